from datetime import datetime
from typing import Any, Dict, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


def _money(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def to_category_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "name": row.name,
        "slug": row.slug,
        "parentId": row.parent_id,
        "sortOrder": row.sort_order,
        "isActive": bool(row.is_active),
    }


def to_product_dto(row: Any) -> Dict:
    category = getattr(row, "category", None)
    brand = getattr(row, "brand", None)
    return {
        "id": getattr(row, "id", None),
        "sku": getattr(row, "sku", None),
        "name": getattr(row, "name", None),
        "description": getattr(row, "description", None),
        "shortDescription": getattr(row, "short_description", None),
        "price": float(getattr(row, "price", 0) or 0),
        "comparePrice": _money(getattr(row, "compare_price", None)),
        "images": getattr(row, "images", None) or [],
        "categoryId": getattr(row, "category_id", None),
        "category": {"id": category.id, "name": category.name, "slug": category.slug} if category else None,
        "brandId": getattr(row, "brand_id", None),
        "brand": {"id": brand.id, "name": brand.name, "logo": brand.logo} if brand else None,
        "tags": sorted(t.name for t in (getattr(row, "tags", None) or [])),
        "stock": getattr(row, "stock", 0) or 0,
        "isActive": bool(getattr(row, "is_active", True)),
        "isFeatured": bool(getattr(row, "is_featured", False)),
        "isDigital": bool(getattr(row, "is_digital", False)),
        "createdAt": _iso(getattr(row, "created_at", None)),
        "updatedAt": _iso(getattr(row, "updated_at", None)),
    }


def to_brand_dto(row: Any, product_count: int = 0) -> Dict:
    return {
        "id": row.id,
        "name": row.name,
        "logo": row.logo,
        "internalPath": row.internal_path,
        "productCount": int(product_count or 0),
        "createdAt": _iso(row.created_at),
        "updatedAt": _iso(row.updated_at),
    }


def to_banner_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "title": row.title,
        "isActive": bool(row.is_active),
        "createdAt": _iso(row.created_at),
        "updatedAt": _iso(row.updated_at),
    }


def to_slider_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "imageUrl": row.image_url,
        "internalLink": row.internal_link or "",
        "isActive": bool(row.is_active),
        "order": row.position,
        "createdAt": _iso(row.created_at),
        "updatedAt": _iso(row.updated_at),
    }


def to_currency_rate_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "country": row.country,
        "currency": row.currency,
        "symbol": row.symbol,
        "rateToNPR": float(row.rate_to_npr),
        "isActive": bool(row.is_active),
        "createdAt": _iso(row.created_at),
    }
