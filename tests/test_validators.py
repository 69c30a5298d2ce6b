import pytest

from shopcore.utils.validators import is_internal_path, slugify, validate_currency


@pytest.mark.parametrize("path", ["/", "/zipzip", "/zipzip/products", "/a_b-c/9"])
def test_internal_paths_accepted(path):
    assert is_internal_path(path)


@pytest.mark.parametrize("path", ["", None, "zipzip", "/has space", "/zipzip\n", "/x?y=1", "https://example.com/x"])
def test_internal_paths_rejected(path):
    assert not is_internal_path(path)


def test_validate_currency_normalizes():
    assert validate_currency(" usd ") == "USD"
    with pytest.raises(ValueError):
        validate_currency("US")


def test_slugify():
    assert slugify("Hand Knotted Rugs!") == "hand-knotted-rugs"
    assert slugify("  ") == "item"
