"""Top banner endpoints. Only one banner is active at a time."""

from __future__ import annotations

from flask import Blueprint

from shopcore.schemas import BannerCreate, BannerUpdate

from .common import API_PREFIX, admin_required, components, ok, parse_body

banners_bp = Blueprint("store_banners", __name__, url_prefix=f"{API_PREFIX}/banners")


def _banners():
    return components()["banner_service"]


@banners_bp.get("")
def list_active_banners():
    return ok({"banners": _banners().list_active()})


# declared before /<banner_id> so "admin" is never taken as an id
@banners_bp.get("/admin")
@admin_required
def list_all_banners():
    return ok({"banners": _banners().list_all()})


@banners_bp.get("/<banner_id>")
@admin_required
def get_banner(banner_id: str):
    return ok({"banner": _banners().get(banner_id)})


@banners_bp.post("")
@admin_required
def create_banner():
    banner = _banners().create(parse_body(BannerCreate))
    return ok({"banner": banner}, "Banner created successfully", 201)


@banners_bp.put("/<banner_id>")
@admin_required
def update_banner(banner_id: str):
    banner = _banners().update(banner_id, parse_body(BannerUpdate))
    return ok({"banner": banner}, "Banner updated successfully")


@banners_bp.patch("/<banner_id>/toggle")
@admin_required
def toggle_banner(banner_id: str):
    banner = _banners().toggle(banner_id)
    state = "activated" if banner["isActive"] else "deactivated"
    return ok({"banner": banner}, f"Banner {state} successfully")


@banners_bp.delete("/<banner_id>")
@admin_required
def delete_banner(banner_id: str):
    _banners().delete(banner_id)
    return ok(message="Banner deleted successfully")
