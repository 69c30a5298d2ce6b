"""Image upload endpoint."""

from __future__ import annotations

from flask import Blueprint, request

from shopcore.services.errors import BadRequestError

from .common import API_PREFIX, admin_required, components, ok

upload_bp = Blueprint("store_upload", __name__, url_prefix=f"{API_PREFIX}/upload")


@upload_bp.post("/<kind>")
@admin_required
def upload_image(kind: str):
    if "image" not in request.files:
        raise BadRequestError("No image file provided")
    result = components()["media_service"].save_upload(kind, request.files["image"])
    return ok(result, "Image uploaded successfully", 201)
