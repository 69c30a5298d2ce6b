"""Request schemas for the store API.

Wire format is camelCase (``isActive``, ``rateToNPR``); Python attributes are
snake_case. Every schema ignores unknown keys.
"""

from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .utils.validators import is_internal_path, validate_currency

INTERNAL_PATH_MESSAGE = (
    "Internal path must start with / and contain only letters, numbers, "
    "hyphens, underscores, and forward slashes"
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, by attribute name."""
        return self.model_dump(exclude_unset=True)


# --- products / categories ---


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=512)
    price: Decimal = Field(..., ge=0)
    compare_price: Optional[Decimal] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    category_id: Optional[str] = None
    brand_id: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False
    is_digital: bool = False


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=512)
    price: Optional[Decimal] = Field(None, ge=0)
    compare_price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[str] = None
    brand_id: Optional[str] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_digital: Optional[bool] = None


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    parent_id: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


# --- brands ---


def _check_internal_path(value: str) -> str:
    if not is_internal_path(value):
        raise PydanticCustomError("internal_path", INTERNAL_PATH_MESSAGE)
    return value


InternalPath = Annotated[str, Field(min_length=1, max_length=255), AfterValidator(_check_internal_path)]


class BrandCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    logo: str = Field(..., min_length=1, max_length=1024)
    internal_path: InternalPath


class BrandUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    logo: Optional[str] = Field(None, min_length=1, max_length=1024)
    internal_path: Optional[InternalPath] = None


# --- banners / sliders ---


class BannerCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=512)
    is_active: bool = False


class BannerUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=512)
    is_active: Optional[bool] = None


class SliderCreate(CamelModel):
    image_url: str = Field(..., min_length=1, max_length=1024)
    internal_link: str = ""
    is_active: bool = True
    order: Optional[int] = Field(None, ge=1)


class SliderUpdate(CamelModel):
    image_url: Optional[str] = Field(None, min_length=1, max_length=1024)
    internal_link: Optional[str] = None
    is_active: Optional[bool] = None
    order: Optional[int] = Field(None, ge=1)


# --- configuration ---


class UnitsPayload(CamelModel):
    weight_units: List[str] = Field(default_factory=list)
    length_units: List[str] = Field(default_factory=list)
    clothing_sizes: List[str] = Field(default_factory=list)
    volume_units: List[str] = Field(default_factory=list)
    temperature_units: List[str] = Field(default_factory=list)
    default_weight_unit: Optional[str] = None
    default_length_unit: Optional[str] = None
    default_clothing_size: Optional[str] = None
    default_volume_unit: Optional[str] = None
    default_temperature_unit: Optional[str] = None

    @field_validator("weight_units", "length_units", "clothing_sizes", "volume_units", "temperature_units")
    @classmethod
    def _dedupe(cls, units: List[str]) -> List[str]:
        seen: List[str] = []
        for unit in units:
            name = unit.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    @field_validator(
        "default_weight_unit",
        "default_length_unit",
        "default_clothing_size",
        "default_volume_unit",
        "default_temperature_unit",
    )
    @classmethod
    def _blank_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


def _currency_code(value: str) -> str:
    try:
        return validate_currency(value)
    except ValueError as exc:
        raise PydanticCustomError("currency_code", str(exc)) from exc


CurrencyCode = Annotated[str, AfterValidator(_currency_code)]


class CurrencyRateCreate(CamelModel):
    country: str = Field(..., min_length=1, max_length=128)
    currency: CurrencyCode
    symbol: str = Field(..., min_length=1, max_length=16)
    rate_to_npr: Decimal = Field(..., gt=0, alias="rateToNPR")
    is_active: bool = True


class CurrencyRateUpdate(CamelModel):
    country: Optional[str] = Field(None, min_length=1, max_length=128)
    currency: Optional[CurrencyCode] = None
    symbol: Optional[str] = Field(None, min_length=1, max_length=16)
    rate_to_npr: Optional[Decimal] = Field(None, gt=0, alias="rateToNPR")
    is_active: Optional[bool] = None


class CurrencyRatesReplace(CamelModel):
    currency_rates: List[CurrencyRateCreate] = Field(default_factory=list)
    default_currency: CurrencyCode


class DefaultCurrencyPayload(CamelModel):
    default_currency: CurrencyCode


class ConvertRequest(CamelModel):
    amount: Decimal
    from_currency: CurrencyCode = Field(..., alias="from")
    to_currency: CurrencyCode = Field(..., alias="to")


# --- auth ---


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


def validation_errors(exc: ValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ``{field, message, code}`` items."""
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
            "code": err.get("type", "invalid"),
        }
        for err in exc.errors()
    ]
