"""System configuration endpoints: units, currency rates, default currency, site settings."""

from __future__ import annotations

from flask import Blueprint, request

from shopcore.schemas import (
    CurrencyRateCreate,
    CurrencyRatesReplace,
    CurrencyRateUpdate,
    DefaultCurrencyPayload,
    UnitsPayload,
)

from .common import API_PREFIX, admin_required, components, ok, parse_body

configuration_bp = Blueprint("store_configuration", __name__, url_prefix=f"{API_PREFIX}/configuration")


def _configuration():
    return components()["configuration_service"]


@configuration_bp.get("")
@admin_required
def get_configuration():
    return ok(_configuration().get_configuration())


@configuration_bp.put("/units")
@admin_required
def replace_units():
    units = _configuration().replace_units(parse_body(UnitsPayload))
    return ok({"units": units}, "Units updated successfully")


@configuration_bp.put("/currency-rates")
@admin_required
def replace_currency_rates():
    result = _configuration().replace_currency_rates(parse_body(CurrencyRatesReplace))
    return ok(result, "Currency rates updated successfully")


@configuration_bp.post("/currency-rates")
@admin_required
def create_currency_rate():
    rate = _configuration().create_currency_rate(parse_body(CurrencyRateCreate))
    return ok({"currencyRate": rate}, "Currency rate created successfully", 201)


@configuration_bp.put("/currency-rates/<rate_id>")
@admin_required
def update_currency_rate(rate_id: str):
    rate = _configuration().update_currency_rate(rate_id, parse_body(CurrencyRateUpdate))
    return ok({"currencyRate": rate}, "Currency rate updated successfully")


@configuration_bp.delete("/currency-rates/<rate_id>")
@admin_required
def delete_currency_rate(rate_id: str):
    result = _configuration().delete_currency_rate(rate_id)
    return ok(result, "Currency rate deleted successfully")


@configuration_bp.put("/default-currency")
@admin_required
def set_default_currency():
    payload = parse_body(DefaultCurrencyPayload)
    code = _configuration().set_default_currency(payload.default_currency)
    return ok({"defaultCurrency": code}, "Default currency updated successfully")


@configuration_bp.get("/public/site-settings")
def public_site_settings():
    return ok(_configuration().public_site_settings())


@configuration_bp.get("/site-settings")
@admin_required
def get_site_settings():
    return ok(_configuration().site_settings())


@configuration_bp.put("/site-settings")
@admin_required
def update_site_settings():
    settings = _configuration().update_site_settings(request.get_json(silent=True) or {})
    return ok(settings, "Site settings updated successfully")
