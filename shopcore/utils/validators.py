import re
from typing import Optional

# storefront route: leading slash, then letters, digits, "/", "_" or "-"
INTERNAL_PATH_RE = re.compile(r"^/[a-zA-Z0-9/_-]*$")


def validate_currency(value: Optional[str]) -> str:
    v = (value or "").strip().upper()
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Invalid currency code: expected ISO4217 length 3")
    return v


def is_internal_path(value: Optional[str]) -> bool:
    return bool(value) and INTERNAL_PATH_RE.fullmatch(value) is not None


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").strip().lower()).strip("-")
    return slug or "item"
