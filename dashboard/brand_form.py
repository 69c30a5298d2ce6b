"""Brand form: client-side validation and the logo upload step."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Mapping, Optional

from shopcore.schemas import INTERNAL_PATH_MESSAGE
from shopcore.utils.validators import is_internal_path

from .api_client import ApiClient, ApiError

LOGO_UPLOAD_KIND = "brand"


@dataclass(frozen=True)
class BrandEntry:
    id: str
    name: str
    logo: str
    internal_path: str
    product_count: int = 0

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> "BrandEntry":
        return cls(
            id=str(raw.get("id") or ""),
            name=raw.get("name") or "",
            logo=raw.get("logo") or "",
            internal_path=raw.get("internalPath") or "",
            product_count=int(raw.get("productCount") or 0),
        )


@dataclass(frozen=True)
class BrandForm:
    name: str = ""
    logo: str = ""
    internal_path: str = ""
    id: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: BrandEntry) -> "BrandForm":
        return cls(name=entry.name, logo=entry.logo, internal_path=entry.internal_path, id=entry.id)

    def to_payload(self) -> Dict[str, str]:
        return {"name": self.name.strip(), "logo": self.logo.strip(), "internalPath": self.internal_path.strip()}


@dataclass(frozen=True)
class LogoFile:
    fileobj: BinaryIO
    filename: str
    content_type: str = "application/octet-stream"


@dataclass
class BrandSaveResult:
    ok: bool
    brand: Optional[BrandEntry] = None
    field_errors: Dict[str, str] = field(default_factory=dict)
    upload_error: Optional[str] = None
    error: Optional[str] = None


class LogoUploadError(Exception):
    def __init__(self, cause: ApiError):
        super().__init__(f"Logo upload failed: {cause.message}")
        self.cause = cause


def validate_brand_form(form: BrandForm, logo_file: Optional[LogoFile] = None) -> Dict[str, str]:
    """Field -> message for every problem; empty when the form can be submitted."""
    errors: Dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Brand name is required"
    elif len(form.name.strip()) > 100:
        errors["name"] = "Brand name must be at most 100 characters"
    if not form.logo.strip() and logo_file is None:
        errors["logo"] = "Brand logo is required"
    path = form.internal_path.strip()
    if not path:
        errors["internalPath"] = "Internal path is required"
    elif not is_internal_path(path):
        errors["internalPath"] = INTERNAL_PATH_MESSAGE
    return errors


def upload_logo(client: ApiClient, logo_file: LogoFile) -> str:
    """Upload the logo and return its URL. Raises :class:`LogoUploadError`."""
    try:
        data = client.upload(LOGO_UPLOAD_KIND, logo_file.fileobj, logo_file.filename, logo_file.content_type)
    except ApiError as exc:
        raise LogoUploadError(exc) from exc
    url = data.get("url") if isinstance(data, dict) else None
    if not url:
        raise LogoUploadError(ApiError(0, "no URL returned"))
    return url


def product_detach_warning(entry: BrandEntry) -> Optional[str]:
    if entry.product_count <= 0:
        return None
    noun = "product" if entry.product_count == 1 else "products"
    return (
        f'Brand "{entry.name}" is used by {entry.product_count} {noun}; '
        "the brand will be removed from those products."
    )
