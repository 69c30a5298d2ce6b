"""Admin product list: filter, sort and paginate over the full catalog.

Everything except :class:`CatalogViewModel` is a pure function over immutable
rows, so a given ``FilterSpec`` always yields the same page.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from shopcore.services.logging import log_event

UNCATEGORIZED = "Uncategorized"
MISSING_SKU = "N/A"

SORT_FIELDS = ("name", "price", "stock", "createdAt", "updatedAt")
SORT_ORDERS = ("asc", "desc")
ITEMS_PER_PAGE_CHOICES = (10, 25, 50, 100)
PAGE_WINDOW_SIZE = 5

DateBound = Union[date, datetime, str, None]


@dataclass(frozen=True)
class CategoryRef:
    """Either a bare category id or an inline category name."""

    kind: str
    value: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def by_id(cls, category_id: str) -> "CategoryRef":
        return cls(kind="id", value=category_id)

    @classmethod
    def inline(cls, name: str, category_id: Optional[str] = None) -> "CategoryRef":
        return cls(kind="inline", value=category_id, name=name)

    def display_name(self, lookup: Optional[Mapping[str, str]] = None) -> str:
        if self.kind == "inline":
            return self.name or UNCATEGORIZED
        if lookup and self.value in lookup:
            return lookup[self.value] or UNCATEGORIZED
        return UNCATEGORIZED


@dataclass(frozen=True)
class ProductRow:
    id: str
    name: str
    sku: str
    category: CategoryRef
    category_id: Optional[str]
    category_name: str
    short_description: str
    price: Decimal
    compare_price: Optional[Decimal]
    stock: int
    is_active: bool
    is_featured: bool
    is_digital: bool
    tags: FrozenSet[str] = frozenset()
    images: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def primary_image(self) -> Optional[str]:
        return self.images[0] if self.images else None


def parse_instant(value: Any) -> Optional[datetime]:
    """ISO-8601 text (``Z`` suffix allowed) or datetime -> aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def _int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _category_ref(raw: Mapping[str, Any]) -> CategoryRef:
    category = raw.get("category")
    category_id = raw.get("categoryId")
    if isinstance(category, Mapping):
        name = category.get("name")
        cid = category.get("id") or category_id
        if name:
            return CategoryRef.inline(name, cid)
        if cid:
            return CategoryRef.by_id(cid)
    elif isinstance(category, str) and category.strip():
        return CategoryRef.inline(category.strip(), category_id)
    if category_id:
        return CategoryRef.by_id(category_id)
    return CategoryRef.inline(UNCATEGORIZED)


def ingest_product(raw: Mapping[str, Any], categories: Optional[Mapping[str, str]] = None) -> ProductRow:
    """Turn one API product dict into a :class:`ProductRow`; missing fields get defaults."""
    category = _category_ref(raw)
    category_id = category.value
    tags = raw.get("tags") or ()
    images = raw.get("images") or ()
    return ProductRow(
        id=str(raw.get("id") or ""),
        name=str(raw.get("name") or ""),
        sku=str(raw.get("sku") or MISSING_SKU),
        category=category,
        category_id=category_id,
        category_name=category.display_name(categories),
        short_description=str(raw.get("shortDescription") or ""),
        price=_decimal(raw.get("price"), Decimal("0")),
        compare_price=_decimal(raw.get("comparePrice")),
        stock=_int(raw.get("stock")),
        is_active=bool(raw.get("isActive", True)),
        is_featured=bool(raw.get("isFeatured", False)),
        is_digital=bool(raw.get("isDigital", False)),
        tags=frozenset(str(t) for t in tags if t),
        images=tuple(str(i) for i in images if i),
        created_at=parse_instant(raw.get("createdAt")),
        updated_at=parse_instant(raw.get("updatedAt")),
    )


def _lower_bound(value: DateBound) -> Optional[datetime]:
    return parse_instant(value)


def _upper_bound(value: DateBound) -> Optional[datetime]:
    # a bare date covers the whole day
    if isinstance(value, date) and not isinstance(value, datetime):
        return parse_instant(value + timedelta(days=1)) - timedelta(microseconds=1)
    if isinstance(value, str) and len(value.strip()) == 10:
        start = parse_instant(value)
        return start + timedelta(days=1) - timedelta(microseconds=1) if start else None
    return parse_instant(value)


@dataclass(frozen=True)
class FilterSpec:
    """Search/filter/sort criteria. ``None`` means "no constraint"; ``0`` is a real bound."""

    search: str = ""
    category_id: Optional[str] = None
    is_active: Optional[bool] = None
    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    stock_min: Optional[int] = None
    stock_max: Optional[int] = None
    is_featured: Optional[bool] = None
    is_digital: Optional[bool] = None
    date_from: DateBound = None
    date_to: DateBound = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    def __post_init__(self) -> None:
        if self.sort_by not in SORT_FIELDS:
            raise ValueError(f"sort_by must be one of {', '.join(SORT_FIELDS)}")
        if self.sort_order not in SORT_ORDERS:
            raise ValueError("sort_order must be 'asc' or 'desc'")
        if self.category_id in ("", "all"):
            object.__setattr__(self, "category_id", None)
        for name in ("price_min", "price_max"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _decimal(value))
        for name in ("stock_min", "stock_max"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _int(value, default=None))
        object.__setattr__(self, "search", (self.search or "").strip())

    @property
    def date_from_instant(self) -> Optional[datetime]:
        return _lower_bound(self.date_from)

    @property
    def date_to_instant(self) -> Optional[datetime]:
        return _upper_bound(self.date_to)


def _in_range(value, low, high) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def matches(product: ProductRow, spec: FilterSpec) -> bool:
    if spec.search:
        needle = spec.search.lower()
        haystack = (product.name, product.sku, product.category_name, product.short_description)
        if not any(needle in (text or "").lower() for text in haystack):
            return False
    if spec.category_id is not None and product.category_id != spec.category_id:
        return False
    if spec.is_active is not None and product.is_active != spec.is_active:
        return False
    if spec.is_featured is not None and product.is_featured != spec.is_featured:
        return False
    if spec.is_digital is not None and product.is_digital != spec.is_digital:
        return False
    if not _in_range(product.price, spec.price_min, spec.price_max):
        return False
    if not _in_range(product.stock, spec.stock_min, spec.stock_max):
        return False
    low, high = spec.date_from_instant, spec.date_to_instant
    if low is not None or high is not None:
        if product.created_at is None:
            return False
        if not _in_range(product.created_at, low, high):
            return False
    return True


def filter_products(products: Iterable[ProductRow], spec: FilterSpec) -> List[ProductRow]:
    return [p for p in products if matches(p, spec)]


def _sort_key(sort_by: str):
    if sort_by == "name":
        return lambda p: p.name.casefold()
    if sort_by == "price":
        return lambda p: p.price
    if sort_by == "stock":
        return lambda p: p.stock
    attr = "created_at" if sort_by == "createdAt" else "updated_at"

    def instant(p: ProductRow):
        value = getattr(p, attr)
        # undated rows sort before dated ones when ascending
        return (0, 0.0) if value is None else (1, value.timestamp())

    return instant


def sort_products(products: Iterable[ProductRow], sort_by: str = "createdAt", sort_order: str = "desc") -> List[ProductRow]:
    """Stable sort; rows with equal keys keep their input order in both directions."""
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"sort_by must be one of {', '.join(SORT_FIELDS)}")
    return sorted(products, key=_sort_key(sort_by), reverse=sort_order == "desc")


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size)


def paginate(rows: Sequence[ProductRow], page: int, page_size: int) -> List[ProductRow]:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    start = (max(page, 1) - 1) * page_size
    return list(rows[start:start + page_size])


def page_window(current: int, total: int, size: int = PAGE_WINDOW_SIZE) -> List[int]:
    """Page numbers to show around ``current``, clamped to ``1..total``."""
    if total <= 0:
        return []
    if total <= size:
        return list(range(1, total + 1))
    current = min(max(current, 1), total)
    start = max(1, current - size // 2)
    end = start + size - 1
    if end > total:
        end = total
        start = end - size + 1
    return list(range(start, end + 1))


@dataclass(frozen=True)
class CatalogPage:
    rows: Tuple[ProductRow, ...]
    total_count: int
    total_pages: int
    page: int
    start_index: int
    end_index: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def window(self) -> List[int]:
        return page_window(self.page, self.total_pages)


def apply_pipeline(products: Iterable[ProductRow], spec: FilterSpec, page: int = 1, page_size: int = 10) -> CatalogPage:
    ordered = sort_products(filter_products(products, spec), spec.sort_by, spec.sort_order)
    count = len(ordered)
    start = (max(page, 1) - 1) * page_size
    return CatalogPage(
        rows=tuple(paginate(ordered, page, page_size)),
        total_count=count,
        total_pages=total_pages(count, page_size),
        page=page,
        start_index=min(start, count),
        end_index=min(start + page_size, count),
    )


@dataclass
class CatalogViewModel:
    """State container for the admin product list.

    Filter changes always send the user back to page 1. ``visible`` is only
    recomputed when products, filters, page or page size changed.
    """

    products: Tuple[ProductRow, ...] = ()
    categories: Dict[str, str] = field(default_factory=dict)
    filters: FilterSpec = field(default_factory=FilterSpec)
    current_page: int = 1
    items_per_page: int = ITEMS_PER_PAGE_CHOICES[0]
    recomputations: int = 0
    _version: int = 0
    _memo_key: Optional[tuple] = None
    _memo: Optional[CatalogPage] = None

    def load(self, raw_products: Iterable[Mapping[str, Any]], categories: Optional[Iterable[Mapping[str, Any]]] = None) -> None:
        if categories is not None:
            self.categories = {c["id"]: c.get("name") or UNCATEGORIZED for c in categories if c.get("id")}
        self.products = tuple(ingest_product(raw, self.categories) for raw in raw_products)
        self._version += 1
        self.current_page = 1

    def refresh(self, client) -> None:
        """Fetch every product and the category list through an ``ApiClient``."""
        categories = client.get("/categories").get("categories", [])
        products = client.get("/products/admin").get("products", [])
        self.load(products, categories)
        log_event("info", "catalog.loaded", products=len(self.products), categories=len(self.categories))

    def update_filters(self, **changes) -> FilterSpec:
        self.filters = replace(self.filters, **changes)
        self.current_page = 1
        return self.filters

    def reset_filters(self) -> None:
        self.filters = FilterSpec()
        self.current_page = 1

    @property
    def total_pages(self) -> int:
        return self.visible.total_pages

    def set_page(self, page: int) -> int:
        self.current_page = min(max(int(page), 1), max(self.total_pages, 1))
        return self.current_page

    def next_page(self) -> int:
        return self.set_page(self.current_page + 1)

    def previous_page(self) -> int:
        return self.set_page(self.current_page - 1)

    def set_items_per_page(self, size: int) -> None:
        if size not in ITEMS_PER_PAGE_CHOICES:
            raise ValueError(f"items per page must be one of {ITEMS_PER_PAGE_CHOICES}")
        self.items_per_page = size
        self.current_page = 1

    @property
    def visible(self) -> CatalogPage:
        key = (self._version, self.filters, self.current_page, self.items_per_page)
        if self._memo is None or self._memo_key != key:
            self._memo = apply_pipeline(self.products, self.filters, self.current_page, self.items_per_page)
            self._memo_key = key
            self.recomputations += 1
        return self._memo
