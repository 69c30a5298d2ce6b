from typing import Dict, List, Optional, Tuple
import time

from sqlalchemy import distinct, func, or_
from sqlalchemy.exc import IntegrityError

from ..models.brand import Brand
from ..models.category import Category
from ..models.product import Product
from ..models.product_tag import ProductTag
from ..models.tag import Tag
from ..schemas import CategoryCreate, ProductCreate, ProductUpdate
from ..utils.dto import to_category_dto, to_product_dto
from ..utils.pagination import normalize_paging, page_meta
from ..utils.validators import slugify
from .errors import BadRequestError, ConflictError, NotFoundError
from .logging import log_event

# columns that may not be cleared through an update
_REQUIRED_FIELDS = {"name", "sku", "price", "stock", "is_active", "is_featured", "is_digital"}


class CatalogService:
    """Product catalog queries and admin writes.

    Responsibilities:
    - List/search active products for the storefront with pagination and
      optional category / tag filters
    - Full product listing for the admin catalog view
    - Product and category CRUD, invalidating the query cache on writes
    """

    _cache_ttl_seconds: int = 60

    def __init__(self, session_factory):
        self._session_factory = session_factory
        # naive in-process cache: key -> (ts, result)
        self._cache: Dict[Tuple, Tuple[float, Dict]] = {}

    def list_products(
        self,
        *,
        query: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> Dict:
        """Return dict: { products: [ProductDTO], pagination: {page, limit, total, totalPages} }"""
        p, ps = normalize_paging(page, page_size)
        cache_key = (query or "", category or "", tuple(sorted(tags or [])), p, ps)
        now = time.time()
        cached = self._cache.get(cache_key)
        if cached and now - cached[0] <= self._cache_ttl_seconds:
            return cached[1]

        with self._session_factory() as session:
            q = session.query(Product).filter(Product.is_active.is_(True))
            if query:
                like = f"%{query.strip()}%"
                q = q.filter(
                    or_(
                        Product.name.ilike(like),
                        Product.description.ilike(like),
                        Product.sku.ilike(like),
                    )
                )
            if category:
                cat = (
                    session.query(Category)
                    .filter(or_(Category.id == category, Category.slug == category))
                    .first()
                )
                if cat is None:
                    q = q.filter(Product.id.is_(None))
                else:
                    children = [c.id for c in session.query(Category.id).filter(Category.parent_id == cat.id)]
                    q = q.filter(Product.category_id.in_([cat.id, *children]))
            if tags:
                # Support both tag ids and slugs; product must have all tags
                tag_list = [t.strip() for t in tags if t and t.strip()]
                if tag_list:
                    q = (
                        q.join(ProductTag, ProductTag.product_id == Product.id)
                        .join(Tag, Tag.id == ProductTag.tag_id)
                        .filter(or_(Tag.id.in_(tag_list), Tag.slug.in_(tag_list)))
                        .group_by(Product.id)
                        .having(func.count(distinct(Tag.id)) >= len(set(tag_list)))
                    )
            total = q.count()
            rows = (
                q.order_by(Product.sort_order.desc(), Product.created_at.desc())
                .offset((p - 1) * ps)
                .limit(ps)
                .all()
            )
            result = {"products": [to_product_dto(r) for r in rows], "pagination": page_meta(p, ps, total)}
            self._cache[cache_key] = (now, result)
            return result

    def list_all_products(self) -> List[Dict]:
        """Every product regardless of state, newest first (admin catalog view)."""
        with self._session_factory() as session:
            rows = session.query(Product).order_by(Product.created_at.desc()).all()
            return [to_product_dto(r) for r in rows]

    def list_featured(self, limit: int = 8) -> List[Dict]:
        _, limit = normalize_paging(1, limit, default_size=8)
        with self._session_factory() as session:
            rows = (
                session.query(Product)
                .filter(Product.is_active.is_(True), Product.is_featured.is_(True))
                .order_by(Product.sort_order.desc(), Product.created_at.desc())
                .limit(limit)
                .all()
            )
            return [to_product_dto(r) for r in rows]

    def get_product(self, product_id: str) -> Dict:
        with self._session_factory() as session:
            row = session.get(Product, product_id)
            if row is None:
                raise NotFoundError("Product not found")
            return to_product_dto(row)

    def create_product(self, payload: ProductCreate) -> Dict:
        data = payload.model_dump()
        tag_names = data.pop("tags")
        with self._session_factory() as session:
            if session.query(Product.id).filter(Product.sku == data["sku"]).first():
                raise ConflictError("A product with this SKU already exists")
            self._check_refs(session, data.get("category_id"), data.get("brand_id"))
            product = Product(**data)
            product.tags = self._resolve_tags(session, tag_names)
            session.add(product)
            session.flush()
            dto = to_product_dto(product)
        self.invalidate_cache()
        log_event("info", "product.created", product_id=dto["id"], sku=dto["sku"])
        return dto

    def update_product(self, product_id: str, payload: ProductUpdate) -> Dict:
        changes = payload.changes()
        for key in _REQUIRED_FIELDS:
            if key in changes and changes[key] is None:
                changes.pop(key)
        tag_names = changes.pop("tags", None)
        with self._session_factory() as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFoundError("Product not found")
            if "sku" in changes and changes["sku"] != product.sku:
                clash = session.query(Product.id).filter(Product.sku == changes["sku"], Product.id != product_id).first()
                if clash:
                    raise ConflictError("A product with this SKU already exists")
            self._check_refs(session, changes.get("category_id"), changes.get("brand_id"))
            for key, value in changes.items():
                setattr(product, key, value)
            if tag_names is not None:
                product.tags = self._resolve_tags(session, tag_names)
            session.flush()
            dto = to_product_dto(product)
        self.invalidate_cache()
        log_event("info", "product.updated", product_id=product_id, fields=sorted(changes))
        return dto

    def delete_product(self, product_id: str) -> None:
        with self._session_factory() as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFoundError("Product not found")
            session.delete(product)
        self.invalidate_cache()
        log_event("info", "product.deleted", product_id=product_id)

    def list_categories(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.query(Category).order_by(Category.sort_order.asc(), Category.name.asc()).all()
            return [to_category_dto(r) for r in rows]

    def create_category(self, payload: CategoryCreate) -> Dict:
        data = payload.model_dump()
        data["slug"] = slugify(data.get("slug") or data["name"])
        try:
            with self._session_factory() as session:
                if session.query(Category.id).filter(Category.slug == data["slug"]).first():
                    raise ConflictError("A category with this slug already exists")
                if data.get("parent_id") and session.get(Category, data["parent_id"]) is None:
                    raise BadRequestError("Parent category not found")
                category = Category(**data)
                session.add(category)
                session.flush()
                dto = to_category_dto(category)
        except IntegrityError as exc:
            raise ConflictError("A category with this slug already exists") from exc
        self.invalidate_cache()
        log_event("info", "category.created", category_id=dto["id"], slug=dto["slug"])
        return dto

    def invalidate_cache(self) -> None:
        """Invalidate query caches. Any write clears everything."""
        self._cache.clear()

    @staticmethod
    def _check_refs(session, category_id: Optional[str], brand_id: Optional[str]) -> None:
        if category_id and session.get(Category, category_id) is None:
            raise BadRequestError("Category not found")
        if brand_id and session.get(Brand, brand_id) is None:
            raise BadRequestError("Brand not found")

    @staticmethod
    def _resolve_tags(session, names: List[str]) -> List[Tag]:
        tags: List[Tag] = []
        for name in names:
            clean = (name or "").strip()
            if not clean:
                continue
            slug = slugify(clean)
            tag = session.query(Tag).filter(Tag.slug == slug).first()
            if tag is None:
                tag = Tag(name=clean, slug=slug)
                session.add(tag)
                session.flush()
            if tag not in tags:
                tags.append(tag)
        return tags
