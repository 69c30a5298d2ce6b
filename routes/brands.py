"""Brand registry endpoints."""

from __future__ import annotations

from flask import Blueprint

from shopcore.schemas import BrandCreate, BrandUpdate

from .common import API_PREFIX, admin_required, components, ok, parse_body

brands_bp = Blueprint("store_brands", __name__, url_prefix=f"{API_PREFIX}/brands")


def _brands():
    return components()["brand_service"]


@brands_bp.get("")
def list_brands():
    return ok({"brands": _brands().list_brands()})


@brands_bp.get("/<brand_id>")
@admin_required
def get_brand(brand_id: str):
    return ok({"brand": _brands().get_brand(brand_id)})


@brands_bp.post("")
@admin_required
def create_brand():
    brand = _brands().create_brand(parse_body(BrandCreate))
    return ok({"brand": brand}, "Brand created successfully", 201)


@brands_bp.put("/<brand_id>")
@admin_required
def update_brand(brand_id: str):
    brand = _brands().update_brand(brand_id, parse_body(BrandUpdate))
    return ok({"brand": brand}, "Brand updated successfully")


@brands_bp.delete("/<brand_id>")
@admin_required
def delete_brand(brand_id: str):
    brand, detached = _brands().delete_brand(brand_id)
    message = "Brand deleted successfully"
    if detached:
        message += f"; removed from {detached} product{'s' if detached != 1 else ''}"
    return ok({"brand": brand, "detachedProducts": detached}, message)
