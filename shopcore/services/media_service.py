"""Image upload storage for brand logos, category art, sliders and product media."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Dict
from uuid import uuid4

from PIL import Image, UnidentifiedImageError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from .errors import BadRequestError
from .logging import log_event

# upload kind -> folder under the upload root
UPLOAD_FOLDERS = {
    "brand": "brands",
    "category": "categories",
    "slider": "sliders",
    "product": "products",
    "media": "media",
}

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}
_PIL_FORMATS = {"JPEG", "PNG", "WEBP", "GIF", "MPO"}


class MediaService:
    """Validates uploaded images with Pillow and stores them on disk."""

    def __init__(self, upload_root: Path, max_bytes: int = 10 * 1024 * 1024, url_prefix: str = "/uploads") -> None:
        self._root = upload_root
        self._max_bytes = max_bytes
        self._url_prefix = url_prefix.rstrip("/")
        for folder in UPLOAD_FOLDERS.values():
            (self._root / folder).mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def save_upload(self, kind: str, uploaded: FileStorage) -> Dict:
        """Store an uploaded image and return ``{url, path, originalName, size, filename}``."""

        folder = UPLOAD_FOLDERS.get(kind)
        if folder is None:
            raise BadRequestError(f"Unknown upload type: {kind}")
        self._validate_upload(uploaded)

        binary = uploaded.read()
        if not binary:
            raise BadRequestError("Uploaded file is empty")
        if len(binary) > self._max_bytes:
            raise BadRequestError(f"File too large. Maximum size is {_human_size(self._max_bytes)}")
        self._verify_image(binary)

        filename = self._safe_filename(uploaded.filename, prefix=kind)
        target_path = self._root / folder / filename
        target_path.write_bytes(binary)

        relative = f"{folder}/{filename}"
        log_event("info", "upload.saved", kind=kind, filename=filename, size=len(binary))
        return {
            "url": f"{self._url_prefix}/{relative}",
            "path": relative,
            "originalName": uploaded.filename,
            "size": len(binary),
            "filename": filename,
        }

    def _validate_upload(self, uploaded: FileStorage) -> None:
        if uploaded is None or uploaded.filename is None or not uploaded.filename.strip():
            raise BadRequestError("No image file provided")
        ext = uploaded.filename.rsplit(".", 1)[-1].lower() if "." in uploaded.filename else ""
        if ext not in ALLOWED_EXTENSIONS:
            raise BadRequestError("Only image files are allowed (jpg, jpeg, png, webp, gif)")

    @staticmethod
    def _verify_image(binary: bytes) -> None:
        try:
            with Image.open(BytesIO(binary)) as image:
                fmt = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise BadRequestError("Uploaded file is not a valid image") from exc
        if fmt not in _PIL_FORMATS:
            raise BadRequestError("Only image files are allowed (jpg, jpeg, png, webp, gif)")

    @staticmethod
    def _safe_filename(original: str, prefix: str) -> str:
        ext = original.rsplit(".", 1)[-1].lower()
        if ext == "jpeg":
            ext = "jpg"
        stem = secure_filename(Path(original).stem).lower()[:16] or "image"
        unique = uuid4().hex[:8]
        return f"{prefix}_{stem}_{unique}.{ext}"


def _human_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):g}MB"
    return f"{num_bytes / 1024:g}KB"
