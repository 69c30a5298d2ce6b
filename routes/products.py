"""Product and category endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from shopcore.schemas import CategoryCreate, ProductCreate, ProductUpdate

from .common import API_PREFIX, admin_required, components, ok, parse_body

products_bp = Blueprint("store_products", __name__, url_prefix=f"{API_PREFIX}/products")
categories_bp = Blueprint("store_categories", __name__, url_prefix=f"{API_PREFIX}/categories")


def _catalog():
    return components()["catalog_service"]


@products_bp.get("")
def list_products():
    tags = request.args.get("tags")
    result = _catalog().list_products(
        query=request.args.get("search") or request.args.get("q"),
        category=request.args.get("category"),
        tags=tags.split(",") if tags else None,
        page=request.args.get("page", 1),
        page_size=request.args.get("limit", 10),
    )
    return ok(result)


@products_bp.get("/admin")
@admin_required
def list_products_admin():
    return ok({"products": _catalog().list_all_products()})


@products_bp.get("/featured")
def list_featured():
    return ok({"products": _catalog().list_featured(request.args.get("limit", 8))})


@products_bp.get("/<product_id>")
def get_product(product_id: str):
    return ok({"product": _catalog().get_product(product_id)})


@products_bp.post("")
@admin_required
def create_product():
    product = _catalog().create_product(parse_body(ProductCreate))
    return ok({"product": product}, "Product created successfully", 201)


@products_bp.put("/<product_id>")
@admin_required
def update_product(product_id: str):
    product = _catalog().update_product(product_id, parse_body(ProductUpdate))
    return ok({"product": product}, "Product updated successfully")


@products_bp.delete("/<product_id>")
@admin_required
def delete_product(product_id: str):
    _catalog().delete_product(product_id)
    return ok(message="Product deleted successfully")


@categories_bp.get("")
def list_categories():
    return ok({"categories": _catalog().list_categories()})


@categories_bp.post("")
@admin_required
def create_category():
    category = _catalog().create_category(parse_body(CategoryCreate))
    return ok({"category": category}, "Category created successfully", 201)
