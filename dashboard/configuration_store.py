"""Admin configuration page state: units, currency rates, default currency, brands.

Every mutation goes through :func:`attempt`, so local state changes first and
is restored if the server rejects the change.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Tuple
from uuid import uuid4

from shopcore.utils.validators import validate_currency

from .api_client import ApiClient
from .brand_form import (
    BrandEntry,
    BrandForm,
    BrandSaveResult,
    LogoFile,
    LogoUploadError,
    product_detach_warning,
    upload_logo,
    validate_brand_form,
)
from .optimistic import LogNotifier, Notifier, OptimisticResult, attempt

BASE_CURRENCY = "NPR"

# kind -> (list attribute, default attribute, wire list key, wire default key)
UNIT_KINDS = {
    "weight": ("weight_units", "default_weight_unit", "weightUnits", "defaultWeightUnit"),
    "length": ("length_units", "default_length_unit", "lengthUnits", "defaultLengthUnit"),
    "clothing_size": ("clothing_sizes", "default_clothing_size", "clothingSizes", "defaultClothingSize"),
    "volume": ("volume_units", "default_volume_unit", "volumeUnits", "defaultVolumeUnit"),
    "temperature": ("temperature_units", "default_temperature_unit", "temperatureUnits", "defaultTemperatureUnit"),
}


@dataclass(frozen=True)
class UnitsConfig:
    weight_units: Tuple[str, ...] = ()
    length_units: Tuple[str, ...] = ()
    clothing_sizes: Tuple[str, ...] = ()
    volume_units: Tuple[str, ...] = ()
    temperature_units: Tuple[str, ...] = ()
    default_weight_unit: str = ""
    default_length_unit: str = ""
    default_clothing_size: str = ""
    default_volume_unit: str = ""
    default_temperature_unit: str = ""

    @classmethod
    def from_payload(cls, raw: Optional[Mapping[str, Any]]) -> "UnitsConfig":
        raw = raw or {}
        values: Dict[str, Any] = {}
        for list_attr, default_attr, list_key, default_key in UNIT_KINDS.values():
            values[list_attr] = tuple(raw.get(list_key) or ())
            values[default_attr] = raw.get(default_key) or ""
        return cls(**values)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for list_attr, default_attr, list_key, default_key in UNIT_KINDS.values():
            payload[list_key] = list(getattr(self, list_attr))
            payload[default_key] = getattr(self, default_attr)
        return payload

    def members(self, kind: str) -> Tuple[str, ...]:
        return getattr(self, _unit_kind(kind)[0])

    def default(self, kind: str) -> str:
        return getattr(self, _unit_kind(kind)[1])

    def with_kind(self, kind: str, units: Tuple[str, ...], default: str) -> "UnitsConfig":
        list_attr, default_attr = _unit_kind(kind)[:2]
        return replace(self, **{list_attr: tuple(units), default_attr: default})


def _unit_kind(kind: str):
    try:
        return UNIT_KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown unit kind: {kind}") from None


@dataclass(frozen=True)
class CurrencyRateEntry:
    id: str
    country: str
    currency: str
    symbol: str
    rate_to_npr: Decimal
    is_active: bool = True

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> "CurrencyRateEntry":
        return cls(
            id=str(raw.get("id") or ""),
            country=raw.get("country") or "",
            currency=raw.get("currency") or "",
            symbol=raw.get("symbol") or "",
            rate_to_npr=Decimal(str(raw.get("rateToNPR") or "0")),
            is_active=bool(raw.get("isActive", True)),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "country": self.country,
            "currency": self.currency,
            "symbol": self.symbol,
            "rateToNPR": str(self.rate_to_npr),
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class ConfigurationState:
    units: UnitsConfig = field(default_factory=UnitsConfig)
    currency_rates: Tuple[CurrencyRateEntry, ...] = ()
    default_currency: str = BASE_CURRENCY
    brands: Tuple[BrandEntry, ...] = ()

    @property
    def currency_codes(self) -> Tuple[str, ...]:
        return tuple(r.currency for r in self.currency_rates)

    def rate(self, rate_id: str) -> Optional[CurrencyRateEntry]:
        return next((r for r in self.currency_rates if r.id == rate_id), None)

    def brand(self, brand_id: str) -> Optional[BrandEntry]:
        return next((b for b in self.brands if b.id == brand_id), None)


def _rate_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    wire = {"country": "country", "currency": "currency", "symbol": "symbol",
            "rate_to_npr": "rateToNPR", "is_active": "isActive"}
    payload = {}
    for key, value in changes.items():
        if key not in wire:
            raise ValueError(f"unknown currency rate field: {key}")
        payload[wire[key]] = str(value) if isinstance(value, Decimal) else value
    return payload


class ConfigurationStore:
    def __init__(self, client: ApiClient, notifier: Optional[Notifier] = None) -> None:
        self._client = client
        self._notifier = notifier or LogNotifier()
        self._state = ConfigurationState()

    @property
    def state(self) -> ConfigurationState:
        return self._state

    def _get(self) -> ConfigurationState:
        return self._state

    def _set(self, state: ConfigurationState) -> None:
        self._state = state

    def load(self) -> ConfigurationState:
        data = self._client.get("/configuration")
        self._state = ConfigurationState(
            units=UnitsConfig.from_payload(data.get("units")),
            currency_rates=tuple(CurrencyRateEntry.from_payload(r) for r in data.get("currencyRates") or ()),
            default_currency=data.get("defaultCurrency") or BASE_CURRENCY,
            brands=tuple(BrandEntry.from_payload(b) for b in data.get("brands") or ()),
        )
        return self._state

    # --- units ---

    def add_unit(self, kind: str, unit: str) -> OptimisticResult:
        name = (unit or "").strip()
        units = self._state.units
        members = units.members(kind)
        if not name or name in members:
            return OptimisticResult(ok=False)
        return self._save_units(units.with_kind(kind, members + (name,), units.default(kind)), "Unit added successfully")

    def remove_unit(self, kind: str, unit: str) -> OptimisticResult:
        units = self._state.units
        members = units.members(kind)
        if unit not in members:
            return OptimisticResult(ok=False)
        remaining = tuple(u for u in members if u != unit)
        default = units.default(kind)
        if default == unit:
            default = remaining[0] if remaining else ""
        return self._save_units(units.with_kind(kind, remaining, default), "Unit removed successfully")

    def set_default_unit(self, kind: str, unit: str) -> OptimisticResult:
        units = self._state.units
        members = units.members(kind)
        if unit not in members:
            raise ValueError(f"{unit!r} is not a configured {kind} unit")
        return self._save_units(units.with_kind(kind, members, unit), "Default unit updated")

    def _save_units(self, units: UnitsConfig, success_message: str) -> OptimisticResult:
        return attempt(
            self._get,
            self._set,
            replace(self._state, units=units),
            lambda: self._client.put("/configuration/units", units.to_payload()),
            self._notifier,
            success_message,
            "Failed to update units",
        )

    # --- currency rates ---

    def add_currency_rate(self, country: str, currency: str, symbol: str, rate_to_npr, is_active: bool = True) -> OptimisticResult:
        try:
            code = validate_currency(currency)
            rate = Decimal(str(rate_to_npr))
        except (ValueError, InvalidOperation):
            self._notifier.error("Enter a 3-letter currency code and a numeric rate")
            return OptimisticResult(ok=False)
        if rate <= 0:
            self._notifier.error("Rate to NPR must be greater than 0")
            return OptimisticResult(ok=False)
        if code in self._state.currency_codes:
            self._notifier.error(f"Currency {code} already exists")
            return OptimisticResult(ok=False)

        pending = CurrencyRateEntry(
            id=f"pending-{uuid4().hex[:8]}", country=country.strip(), currency=code,
            symbol=symbol.strip(), rate_to_npr=rate, is_active=is_active,
        )
        result = attempt(
            self._get,
            self._set,
            replace(self._state, currency_rates=self._state.currency_rates + (pending,)),
            lambda: self._client.post("/configuration/currency-rates", pending.to_payload()),
            self._notifier,
            "Currency rate added successfully",
            "Failed to add currency rate",
        )
        if result.ok:
            saved = CurrencyRateEntry.from_payload(result.data.get("currencyRate") or {})
            self._swap_rate(pending.id, saved)
        return result

    def update_currency_rate(self, rate_id: str, **changes) -> OptimisticResult:
        current = self._state.rate(rate_id)
        if current is None:
            self._notifier.error("Currency rate not found")
            return OptimisticResult(ok=False)
        try:
            if "currency" in changes:
                changes["currency"] = validate_currency(changes["currency"])
            if "rate_to_npr" in changes:
                changes["rate_to_npr"] = Decimal(str(changes["rate_to_npr"]))
        except (ValueError, InvalidOperation):
            self._notifier.error("Enter a 3-letter currency code and a numeric rate")
            return OptimisticResult(ok=False)
        if "rate_to_npr" in changes and changes["rate_to_npr"] <= 0:
            self._notifier.error("Rate to NPR must be greater than 0")
            return OptimisticResult(ok=False)
        payload = _rate_changes(changes)
        updated = replace(current, **changes)
        rates = tuple(updated if r.id == rate_id else r for r in self._state.currency_rates)
        new_state = replace(self._state, currency_rates=rates)
        if updated.currency != current.currency and self._state.default_currency == current.currency:
            new_state = replace(new_state, default_currency=updated.currency)
        return attempt(
            self._get,
            self._set,
            new_state,
            lambda: self._client.put(f"/configuration/currency-rates/{rate_id}", payload),
            self._notifier,
            "Currency rate updated successfully",
            "Failed to update currency rate",
        )

    def toggle_currency_rate(self, rate_id: str) -> OptimisticResult:
        current = self._state.rate(rate_id)
        if current is None:
            self._notifier.error("Currency rate not found")
            return OptimisticResult(ok=False)
        return self.update_currency_rate(rate_id, is_active=not current.is_active)

    def remove_currency_rate(self, rate_id: str) -> OptimisticResult:
        current = self._state.rate(rate_id)
        if current is None:
            self._notifier.error("Currency rate not found")
            return OptimisticResult(ok=False)
        remaining = tuple(r for r in self._state.currency_rates if r.id != rate_id)
        default = self._state.default_currency
        if default == current.currency:
            default = remaining[0].currency if remaining else BASE_CURRENCY
            self._notifier.warning(f"Default currency changed to {default}")
        result = attempt(
            self._get,
            self._set,
            replace(self._state, currency_rates=remaining, default_currency=default),
            lambda: self._client.delete(f"/configuration/currency-rates/{rate_id}"),
            self._notifier,
            "Currency rate deleted successfully",
            "Failed to delete currency rate",
        )
        server_default = result.data.get("defaultCurrency") if result.ok and isinstance(result.data, dict) else None
        if server_default and server_default != self._state.default_currency:
            self._state = replace(self._state, default_currency=server_default)
        return result

    def set_default_currency(self, code: str) -> OptimisticResult:
        if code != BASE_CURRENCY and code not in self._state.currency_codes:
            self._notifier.error("Default currency must be one of the configured currencies")
            return OptimisticResult(ok=False)
        return attempt(
            self._get,
            self._set,
            replace(self._state, default_currency=code),
            lambda: self._client.put("/configuration/default-currency", {"defaultCurrency": code}),
            self._notifier,
            "Default currency updated",
            "Failed to update default currency",
        )

    def _swap_rate(self, old_id: str, saved: CurrencyRateEntry) -> None:
        rates = tuple(saved if r.id == old_id else r for r in self._state.currency_rates)
        self._state = replace(self._state, currency_rates=rates)

    # --- brands ---

    def save_brand(self, form: BrandForm, logo_file: Optional[LogoFile] = None) -> BrandSaveResult:
        """Validate, upload the logo if one is given, then create or update the brand."""
        field_errors = validate_brand_form(form, logo_file)
        if field_errors:
            self._notifier.error(next(iter(field_errors.values())))
            return BrandSaveResult(ok=False, field_errors=field_errors)

        if logo_file is not None:
            try:
                form = replace(form, logo=upload_logo(self._client, logo_file))
            except LogoUploadError as exc:
                self._notifier.error(str(exc))
                return BrandSaveResult(ok=False, upload_error=str(exc))

        payload = form.to_payload()
        if form.id:
            existing = self._state.brand(form.id)
            count = existing.product_count if existing else 0
            optimistic = BrandEntry(form.id, payload["name"], payload["logo"], payload["internalPath"], count)
            brands = tuple(optimistic if b.id == form.id else b for b in self._state.brands)
            brand_id = form.id
            result = attempt(
                self._get,
                self._set,
                replace(self._state, brands=brands),
                lambda: self._client.put(f"/brands/{brand_id}", payload),
                self._notifier,
                "Brand updated successfully",
                "Failed to update brand",
            )
        else:
            brand_id = f"pending-{uuid4().hex[:8]}"
            optimistic = BrandEntry(brand_id, payload["name"], payload["logo"], payload["internalPath"])
            result = attempt(
                self._get,
                self._set,
                replace(self._state, brands=self._state.brands + (optimistic,)),
                lambda: self._client.post("/brands", payload),
                self._notifier,
                "Brand created successfully",
                "Failed to create brand",
            )

        if not result.ok:
            return BrandSaveResult(ok=False, error=result.error.first_error if result.error else None)
        saved = BrandEntry.from_payload(result.data.get("brand") or {})
        brands = tuple(saved if b.id == brand_id else b for b in self._state.brands)
        self._state = replace(self._state, brands=tuple(sorted(brands, key=lambda b: b.name.casefold())))
        return BrandSaveResult(ok=True, brand=saved)

    def remove_brand(self, brand_id: str) -> OptimisticResult:
        entry = self._state.brand(brand_id)
        if entry is None:
            self._notifier.error("Brand not found")
            return OptimisticResult(ok=False)
        warning = product_detach_warning(entry)
        if warning:
            self._notifier.warning(warning)
        return attempt(
            self._get,
            self._set,
            replace(self._state, brands=tuple(b for b in self._state.brands if b.id != brand_id)),
            lambda: self._client.delete(f"/brands/{brand_id}"),
            self._notifier,
            "Brand deleted successfully",
            "Failed to delete brand",
        )
