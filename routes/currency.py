"""Public currency endpoints used by the storefront price switcher."""

from __future__ import annotations

from flask import Blueprint

from shopcore.schemas import ConvertRequest

from .common import API_PREFIX, components, ok, parse_body

currency_bp = Blueprint("store_currency", __name__, url_prefix=f"{API_PREFIX}/currency")


def _currency():
    return components()["currency_service"]


@currency_bp.get("/rates")
def list_rates():
    service = _currency()
    return ok({"baseCurrency": service.base_currency, "rates": service.active_rates()})


@currency_bp.post("/convert")
def convert():
    payload = parse_body(ConvertRequest)
    return ok(_currency().convert(payload.amount, payload.from_currency, payload.to_currency))
