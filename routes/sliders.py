"""Homepage slider endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from shopcore.schemas import SliderCreate, SliderUpdate

from .common import API_PREFIX, admin_required, components, ok, parse_body

sliders_bp = Blueprint("store_sliders", __name__, url_prefix=f"{API_PREFIX}/sliders")


def _sliders():
    return components()["slider_service"]


@sliders_bp.get("")
def list_sliders():
    active_only = request.args.get("active", "").lower() in {"1", "true", "yes"}
    return ok({"sliders": _sliders().list_sliders(active_only=active_only)})


@sliders_bp.get("/<slider_id>")
def get_slider(slider_id: str):
    return ok({"slider": _sliders().get_slider(slider_id)})


@sliders_bp.post("")
@admin_required
def create_slider():
    slider = _sliders().create_slider(parse_body(SliderCreate))
    return ok({"slider": slider}, "Slider created successfully", 201)


@sliders_bp.put("/<slider_id>")
@admin_required
def update_slider(slider_id: str):
    slider = _sliders().update_slider(slider_id, parse_body(SliderUpdate))
    return ok({"slider": slider}, "Slider updated successfully")


@sliders_bp.patch("/<slider_id>/toggle")
@admin_required
def toggle_slider(slider_id: str):
    return ok({"slider": _sliders().toggle_slider(slider_id)}, "Slider status updated")


@sliders_bp.delete("/<slider_id>")
@admin_required
def delete_slider(slider_id: str):
    _sliders().delete_slider(slider_id)
    return ok(message="Slider deleted successfully")
