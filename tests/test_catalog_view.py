from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from dashboard.catalog_view import (
    ITEMS_PER_PAGE_CHOICES,
    CatalogViewModel,
    CategoryRef,
    FilterSpec,
    apply_pipeline,
    filter_products,
    ingest_product,
    page_window,
    paginate,
    sort_products,
    total_pages,
)


def _raw(i, **overrides):
    raw = {
        "id": f"p{i}",
        "name": f"Product {i:03d}",
        "sku": f"SKU-{i:03d}",
        "price": (i * 37) % 250,
        "stock": (i * 7) % 40,
        "categoryId": "c1" if i % 2 else "c2",
        "category": {"id": "c1", "name": "Rugs"} if i % 2 else "Lamps",
        "shortDescription": "hand knotted" if i % 3 == 0 else "",
        "isActive": i % 4 != 0,
        "isFeatured": i % 5 == 0,
        "isDigital": False,
        "createdAt": f"2024-01-{(i % 28) + 1:02d}T10:00:00.000Z",
        "updatedAt": f"2024-02-{(i % 28) + 1:02d}T10:00:00Z",
    }
    raw.update(overrides)
    return raw


@pytest.fixture()
def catalog():
    return [ingest_product(_raw(i)) for i in range(1, 238)]


def test_ingest_degrades_missing_fields():
    row = ingest_product({"id": "x", "name": "Bare"})
    assert row.sku == "N/A"
    assert row.category_name == "Uncategorized"
    assert row.short_description == ""
    assert row.price == Decimal("0")
    assert row.compare_price is None
    assert row.stock == 0
    assert row.created_at is None
    assert row.primary_image is None


def test_ingest_resolves_category_variants():
    inline = ingest_product({"id": "a", "category": "Lamps"})
    nested = ingest_product({"id": "b", "category": {"id": "c9", "name": "Rugs"}})
    by_id = ingest_product({"id": "c", "categoryId": "c7"}, categories={"c7": "Pottery"})
    unknown = ingest_product({"id": "d", "categoryId": "zz"})

    assert inline.category == CategoryRef.inline("Lamps")
    assert nested.category_id == "c9"
    assert nested.category_name == "Rugs"
    assert by_id.category == CategoryRef.by_id("c7")
    assert by_id.category_name == "Pottery"
    assert unknown.category_name == "Uncategorized"


def test_ingest_parses_timestamps_as_utc():
    row = ingest_product({"id": "t", "createdAt": "2024-03-05T08:30:00Z"})
    assert row.created_at == datetime(2024, 3, 5, 8, 30, tzinfo=timezone.utc)
    assert ingest_product({"id": "u", "createdAt": "not a date"}).created_at is None


def test_price_min_scenario():
    products = [ingest_product({"id": str(i), "name": f"n{i}", "price": p}) for i, p in enumerate([100, 50, 200, 50, 150])]
    spec = FilterSpec(price_min=60, sort_by="price", sort_order="asc")
    result = apply_pipeline(products, spec, page=1, page_size=10)
    assert [r.price for r in result.rows] == [100, 150, 200]
    assert result.total_count == 3


def test_zero_is_a_real_bound():
    products = [ingest_product({"id": str(i), "stock": s}) for i, s in enumerate([0, 0, 3, 9])]
    assert len(filter_products(products, FilterSpec(stock_max=0))) == 2
    assert len(filter_products(products, FilterSpec(stock_min=0))) == 4
    assert len(filter_products(products, FilterSpec())) == 4


def test_text_range_bounds_are_coerced():
    products = [ingest_product({"id": str(i), "stock": s, "price": s * 10}) for i, s in enumerate([0, 3, 5, 9])]
    spec = FilterSpec(stock_min="3", stock_max=" 5 ", price_min="30")
    assert spec.stock_min == 3
    assert spec.stock_max == 5
    assert [p.stock for p in filter_products(products, spec)] == [3, 5]
    assert FilterSpec(stock_min="").stock_min is None
    assert len(filter_products(products, FilterSpec(stock_max="0"))) == 1


def test_filter_is_idempotent(catalog):
    spec = FilterSpec(search="rug", is_active=True, price_min=20, price_max=200, sort_by="name", sort_order="asc")
    first = apply_pipeline(catalog, spec, page=2, page_size=10)
    second = apply_pipeline(catalog, spec, page=2, page_size=10)
    assert first == second
    assert filter_products(filter_products(catalog, spec), spec) == filter_products(catalog, spec)


def test_search_matches_every_text_field(catalog):
    by_sku = filter_products(catalog, FilterSpec(search="sku-007"))
    by_category = filter_products(catalog, FilterSpec(search="LAMPS"))
    by_description = filter_products(catalog, FilterSpec(search="knotted"))
    assert [r.id for r in by_sku] == ["p7"]
    assert by_category and all(r.category_name == "Lamps" for r in by_category)
    assert by_description and all(int(r.id[1:]) % 3 == 0 for r in by_description)


def test_tri_state_flags(catalog):
    active = filter_products(catalog, FilterSpec(is_active=True))
    inactive = filter_products(catalog, FilterSpec(is_active=False))
    assert len(active) + len(inactive) == len(catalog)
    assert all(not r.is_active for r in inactive)
    assert filter_products(catalog, FilterSpec(is_digital=True)) == []


def test_category_filter_all_means_unset(catalog):
    assert FilterSpec(category_id="all").category_id is None
    assert all(r.category_id == "c1" for r in filter_products(catalog, FilterSpec(category_id="c1")))


def test_date_range_includes_whole_end_day(catalog):
    rows = filter_products(catalog, FilterSpec(date_from=date(2024, 1, 3), date_to=date(2024, 1, 3)))
    assert rows
    assert all(r.created_at.date() == date(2024, 1, 3) for r in rows)
    undated = ingest_product({"id": "nodate"})
    assert filter_products([undated], FilterSpec(date_from="2024-01-01")) == []


@pytest.mark.parametrize("size", ITEMS_PER_PAGE_CHOICES)
def test_pages_cover_the_result_exactly(catalog, size):
    spec = FilterSpec(is_active=True, sort_by="price", sort_order="desc")
    expected = sort_products(filter_products(catalog, spec), spec.sort_by, spec.sort_order)
    pages = total_pages(len(expected), size)
    collected = []
    for page in range(1, pages + 1):
        collected.extend(apply_pipeline(catalog, spec, page, size).rows)
    assert collected == expected
    assert len({r.id for r in collected}) == len(expected)


@pytest.mark.parametrize("field", ["name", "price", "stock", "createdAt", "updatedAt"])
def test_sort_orders_adjacent_pairs(catalog, field):
    rows = sort_products(catalog, field, "asc")
    keys = {
        "name": lambda r: r.name.casefold(),
        "price": lambda r: r.price,
        "stock": lambda r: r.stock,
        "createdAt": lambda r: r.created_at,
        "updatedAt": lambda r: r.updated_at,
    }[field]
    assert all(keys(a) <= keys(b) for a, b in zip(rows, rows[1:]))
    descending = sort_products(catalog, field, "desc")
    assert all(keys(a) >= keys(b) for a, b in zip(descending, descending[1:]))


def test_sort_is_stable_for_equal_keys():
    rows = [ingest_product({"id": str(i), "price": 5}) for i in range(6)]
    assert [r.id for r in sort_products(rows, "price", "asc")] == [str(i) for i in range(6)]
    assert [r.id for r in sort_products(rows, "price", "desc")] == [str(i) for i in range(6)]


def test_undated_rows_sort_first_ascending():
    rows = [ingest_product({"id": "dated", "createdAt": "2024-01-01T00:00:00Z"}), ingest_product({"id": "undated"})]
    assert [r.id for r in sort_products(rows, "createdAt", "asc")] == ["undated", "dated"]


def test_invalid_sort_rejected():
    with pytest.raises(ValueError):
        FilterSpec(sort_by="rating")
    with pytest.raises(ValueError):
        FilterSpec(sort_order="sideways")


def test_paginate_slices_and_total_pages():
    assert paginate(list(range(23)), 3, 10) == [20, 21, 22]
    assert paginate(list(range(23)), 4, 10) == []
    assert total_pages(0, 10) == 0
    assert total_pages(23, 10) == 3


@pytest.mark.parametrize(
    "current,total,expected",
    [
        (1, 3, [1, 2, 3]),
        (1, 10, [1, 2, 3, 4, 5]),
        (6, 10, [4, 5, 6, 7, 8]),
        (10, 10, [6, 7, 8, 9, 10]),
        (9, 10, [6, 7, 8, 9, 10]),
        (1, 0, []),
    ],
)
def test_page_window(current, total, expected):
    assert page_window(current, total) == expected


def test_view_model_resets_page_on_filter_change(catalog):
    view = CatalogViewModel()
    view.load([_raw(i) for i in range(1, 238)])
    view.set_page(3)
    assert view.current_page == 3

    view.update_filters(search="product")
    assert view.current_page == 1

    view.set_page(2)
    view.set_items_per_page(25)
    assert view.current_page == 1

    view.set_page(2)
    view.reset_filters()
    assert view.current_page == 1


def test_view_model_clamps_page_and_memoizes():
    view = CatalogViewModel()
    view.load([_raw(i) for i in range(1, 31)])
    assert view.set_page(99) == 3
    assert view.next_page() == 3
    view.set_page(1)
    assert view.previous_page() == 1

    view.visible
    count = view.recomputations
    view.visible
    assert view.recomputations == count
    view.update_filters(is_featured=True)
    view.visible
    assert view.recomputations == count + 1


def test_view_model_rejects_unknown_page_size():
    with pytest.raises(ValueError):
        CatalogViewModel().set_items_per_page(7)
