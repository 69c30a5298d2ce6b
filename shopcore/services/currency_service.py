"""Currency arithmetic around the NPR base.

A rate row says "1 unit of CURRENCY is worth rate_to_npr NPR", so converting
into NPR multiplies and converting out of NPR divides. Cross conversion always
goes through NPR.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Optional

from ..models.currency_rate import CurrencyRate
from ..utils.dto import to_currency_rate_dto
from .errors import BadRequestError

BASE_CURRENCY = "NPR"
_CENTS = Decimal("0.01")


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _as_decimal(value, field: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise BadRequestError(f"{field} must be a number") from exc
    if not result.is_finite():
        raise BadRequestError(f"{field} must be a number")
    return result


def to_npr(amount, rate_to_npr) -> Decimal:
    rate = _as_decimal(rate_to_npr, "rate")
    if rate <= 0:
        raise BadRequestError("rate must be greater than 0")
    return quantize(_as_decimal(amount, "amount") * rate)


def from_npr(amount_npr, rate_to_npr) -> Decimal:
    rate = _as_decimal(rate_to_npr, "rate")
    if rate <= 0:
        raise BadRequestError("rate must be greater than 0")
    return quantize(_as_decimal(amount_npr, "amount") / rate)


def convert(amount, from_rate, to_rate) -> Decimal:
    """Convert between two non-base currencies given both rates to NPR."""
    # skip the intermediate rounding so A -> NPR -> B loses nothing
    source = _as_decimal(from_rate, "rate")
    target = _as_decimal(to_rate, "rate")
    if source <= 0 or target <= 0:
        raise BadRequestError("rate must be greater than 0")
    return quantize(_as_decimal(amount, "amount") * source / target)


def format_price(amount, currency: str = BASE_CURRENCY, symbol: Optional[str] = None) -> str:
    value = quantize(_as_decimal(amount, "amount"))
    text = f"{value:,.2f}"
    if currency == BASE_CURRENCY:
        return f"{symbol or BASE_CURRENCY} {text}"
    return f"{symbol or currency + ' '}{text}"


class CurrencyService:
    """Rate lookups backed by the configured currency rates."""

    def __init__(self, session_factory, base_currency: str = BASE_CURRENCY):
        self._session_factory = session_factory
        self._base = base_currency

    @property
    def base_currency(self) -> str:
        return self._base

    def active_rates(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = (
                session.query(CurrencyRate)
                .filter(CurrencyRate.is_active.is_(True))
                .order_by(CurrencyRate.currency.asc())
                .all()
            )
            return [to_currency_rate_dto(r) for r in rows]

    def rate_for(self, currency: str) -> Decimal:
        if currency == self._base:
            return Decimal("1")
        with self._session_factory() as session:
            row = (
                session.query(CurrencyRate)
                .filter(CurrencyRate.currency == currency, CurrencyRate.is_active.is_(True))
                .first()
            )
            if row is None:
                raise BadRequestError(f"Unsupported currency: {currency}")
            return Decimal(str(row.rate_to_npr))

    def convert(self, amount, from_currency: str, to_currency: str) -> Dict:
        value = _as_decimal(amount, "amount")
        if from_currency == to_currency:
            converted = quantize(value)
        elif to_currency == self._base:
            converted = to_npr(value, self.rate_for(from_currency))
        elif from_currency == self._base:
            converted = from_npr(value, self.rate_for(to_currency))
        else:
            converted = convert(value, self.rate_for(from_currency), self.rate_for(to_currency))
        return {
            "amount": float(value),
            "from": from_currency,
            "to": to_currency,
            "convertedAmount": float(converted),
        }
