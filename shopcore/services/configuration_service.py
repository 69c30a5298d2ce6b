"""System configuration aggregate: units, currency rates, default currency, site settings.

Each sub-resource is written in its own transaction. The default currency and
site settings live in the ``system_config`` key/value table.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete

from ..models.currency_rate import CurrencyRate
from ..models.system_config import SystemConfig
from ..models.unit import Unit, UnitType
from ..schemas import CurrencyRateCreate, CurrencyRateUpdate, CurrencyRatesReplace, UnitsPayload
from ..utils.dto import to_currency_rate_dto
from .errors import BadRequestError, ConflictError, NotFoundError
from .logging import log_event

DEFAULT_CURRENCY_KEY = "defaultCurrency"

# unit type -> (list field, default field); wire names are the camelCase forms
UNIT_FIELDS = {
    UnitType.WEIGHT: ("weight_units", "default_weight_unit"),
    UnitType.LENGTH: ("length_units", "default_length_unit"),
    UnitType.CLOTHING_SIZE: ("clothing_sizes", "default_clothing_size"),
    UnitType.VOLUME: ("volume_units", "default_volume_unit"),
    UnitType.TEMPERATURE: ("temperature_units", "default_temperature_unit"),
}

PUBLIC_SITE_SETTINGS = {
    "siteName": "GharSamma",
    "siteLogo": "/logo.png",
    "siteFavicon": "/favicon.ico",
}

SITE_SETTING_KEYS = {
    # general
    "siteName", "siteDescription", "siteUrl", "siteLogo", "siteFavicon",
    # contact
    "email", "phone", "address", "city", "country",
    # business
    "currency", "timezone", "language", "taxRate", "shippingCost",
    # appearance
    "primaryColor", "secondaryColor", "theme",
    # inventory
    "lowStockThreshold", "trackInventory",
    # seo
    "seoTitle", "seoDescription", "seoKeywords", "ogImage", "canonicalUrl",
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class ConfigurationService:
    def __init__(self, session_factory, brand_service, base_currency: str = "NPR"):
        self._session_factory = session_factory
        self._brands = brand_service
        self._base = base_currency

    def get_configuration(self) -> Dict[str, Any]:
        return {
            "units": self.get_units(),
            "currencyRates": self.list_currency_rates(),
            "defaultCurrency": self.get_default_currency(),
            "brands": self._brands.list_brands(),
        }

    # --- units ---

    def get_units(self) -> Dict[str, Any]:
        with self._session_factory() as session:
            rows = (
                session.query(Unit)
                .filter(Unit.is_active.is_(True))
                .order_by(Unit.type.asc(), Unit.position.asc())
                .all()
            )
            doc: Dict[str, Any] = {}
            for unit_type, (list_field, default_field) in UNIT_FIELDS.items():
                members = [r for r in rows if r.type == unit_type]
                doc[_camel(list_field)] = [r.name for r in members]
                default = next((r.name for r in members if r.is_default), None)
                doc[_camel(default_field)] = default or ""
            return doc

    def replace_units(self, payload: UnitsPayload) -> Dict[str, Any]:
        """Replace the whole units document; each default must be in its own set."""
        errors = []
        for list_field, default_field in UNIT_FIELDS.values():
            default = getattr(payload, default_field)
            if default is not None and default not in getattr(payload, list_field):
                errors.append(
                    {
                        "field": _camel(default_field),
                        "message": f"Default must be one of the configured {_camel(list_field)}",
                        "code": "default_not_member",
                    }
                )
        if errors:
            raise BadRequestError("Validation failed", errors=errors)

        with self._session_factory() as session:
            session.execute(delete(Unit))
            for unit_type, (list_field, default_field) in UNIT_FIELDS.items():
                default = getattr(payload, default_field)
                for position, name in enumerate(getattr(payload, list_field)):
                    session.add(Unit(type=unit_type, name=name, position=position, is_default=name == default))
        log_event(
            "info",
            "configuration.units_replaced",
            counts={t.value: len(getattr(payload, f)) for t, (f, _) in UNIT_FIELDS.items()},
        )
        return self.get_units()

    # --- currency rates ---

    def list_currency_rates(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.query(CurrencyRate).order_by(CurrencyRate.created_at.asc(), CurrencyRate.currency.asc()).all()
            return [to_currency_rate_dto(r) for r in rows]

    def get_default_currency(self) -> str:
        with self._session_factory() as session:
            row = session.get(SystemConfig, DEFAULT_CURRENCY_KEY)
            return row.value if row is not None and row.value else self._base

    def create_currency_rate(self, payload: CurrencyRateCreate) -> Dict:
        with self._session_factory() as session:
            if session.query(CurrencyRate.id).filter(CurrencyRate.currency == payload.currency).first():
                raise ConflictError(f"Currency {payload.currency} already exists")
            row = CurrencyRate(**payload.model_dump())
            session.add(row)
            session.flush()
            dto = to_currency_rate_dto(row)
        log_event("info", "currency_rate.created", currency=dto["currency"], rate=dto["rateToNPR"])
        return dto

    def update_currency_rate(self, rate_id: str, payload: CurrencyRateUpdate) -> Dict:
        changes = {k: v for k, v in payload.changes().items() if v is not None}
        with self._session_factory() as session:
            row = session.get(CurrencyRate, rate_id)
            if row is None:
                raise NotFoundError("Currency rate not found")
            old_code = row.currency
            new_code = changes.get("currency", old_code)
            if new_code != old_code:
                clash = (
                    session.query(CurrencyRate.id)
                    .filter(CurrencyRate.currency == new_code, CurrencyRate.id != rate_id)
                    .first()
                )
                if clash:
                    raise ConflictError(f"Currency {new_code} already exists")
                # keep a default that pointed at the renamed code in step
                setting = session.get(SystemConfig, DEFAULT_CURRENCY_KEY)
                if setting is not None and setting.value == old_code:
                    setting.value = new_code
            for key, value in changes.items():
                setattr(row, key, value)
            session.flush()
            dto = to_currency_rate_dto(row)
        log_event("info", "currency_rate.updated", rate_id=rate_id, fields=sorted(changes))
        return dto

    def delete_currency_rate(self, rate_id: str) -> Dict[str, Any]:
        """Delete a rate; a default pointing at it moves to the first remaining rate."""
        with self._session_factory() as session:
            row = session.get(CurrencyRate, rate_id)
            if row is None:
                raise NotFoundError("Currency rate not found")
            code = row.currency
            session.delete(row)
            session.flush()
            default = self._read_default(session) or self._base
            if default == code:
                first = session.query(CurrencyRate).order_by(CurrencyRate.created_at.asc(), CurrencyRate.currency.asc()).first()
                default = first.currency if first is not None else self._base
                self._write_default(session, default)
                log_event("warning", "currency_rate.default_reassigned", removed=code, default_currency=default)
        log_event("info", "currency_rate.deleted", currency=code)
        return {"id": rate_id, "currency": code, "defaultCurrency": default}

    def replace_currency_rates(self, payload: CurrencyRatesReplace) -> Dict[str, Any]:
        codes = [r.currency for r in payload.currency_rates]
        duplicates = sorted({c for c in codes if codes.count(c) > 1})
        if duplicates:
            raise BadRequestError(f"Duplicate currency codes: {', '.join(duplicates)}")
        self._check_default(payload.default_currency, codes)
        with self._session_factory() as session:
            session.execute(delete(CurrencyRate))
            for rate in payload.currency_rates:
                session.add(CurrencyRate(**rate.model_dump()))
            self._write_default(session, payload.default_currency)
        log_event("info", "currency_rate.replaced", count=len(codes), default_currency=payload.default_currency)
        return {"currencyRates": self.list_currency_rates(), "defaultCurrency": payload.default_currency}

    def set_default_currency(self, code: str) -> str:
        with self._session_factory() as session:
            codes = [c for (c,) in session.query(CurrencyRate.currency).all()]
            self._check_default(code, codes)
            self._write_default(session, code)
        log_event("info", "configuration.default_currency", default_currency=code)
        return code

    def _check_default(self, code: str, codes: List[str]) -> None:
        if code != self._base and code not in codes:
            raise BadRequestError(
                "Validation failed",
                errors=[
                    {
                        "field": "defaultCurrency",
                        "message": "Default currency must be one of the configured currency rates",
                        "code": "default_not_member",
                    }
                ],
            )

    @staticmethod
    def _read_default(session) -> Optional[str]:
        row = session.get(SystemConfig, DEFAULT_CURRENCY_KEY)
        return row.value if row is not None else None

    @staticmethod
    def _write_default(session, code: str) -> None:
        row = session.get(SystemConfig, DEFAULT_CURRENCY_KEY)
        if row is None:
            session.add(SystemConfig(key=DEFAULT_CURRENCY_KEY, value=code))
        else:
            row.value = code

    # --- site settings ---

    def public_site_settings(self) -> Dict[str, Any]:
        stored = self._read_settings(PUBLIC_SITE_SETTINGS.keys())
        return {key: stored.get(key) or fallback for key, fallback in PUBLIC_SITE_SETTINGS.items()}

    def site_settings(self) -> Dict[str, Any]:
        return self._read_settings(SITE_SETTING_KEYS)

    def update_site_settings(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(updates, dict) or not updates:
            raise BadRequestError("No settings provided")
        # only known keys are stored
        accepted = {k: v for k, v in updates.items() if k in SITE_SETTING_KEYS}
        if not accepted:
            raise BadRequestError("No recognised settings provided")
        with self._session_factory() as session:
            for key, value in accepted.items():
                row = session.get(SystemConfig, key)
                if row is None:
                    session.add(SystemConfig(key=key, value=value))
                else:
                    row.value = value
        log_event("info", "configuration.site_settings", keys=sorted(accepted))
        return self.site_settings()

    def _read_settings(self, keys) -> Dict[str, Any]:
        with self._session_factory() as session:
            rows = session.query(SystemConfig).filter(SystemConfig.key.in_(list(keys))).all()
            return {r.key: r.value for r in rows}
