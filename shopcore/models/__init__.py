from .base import Base
from .banner import TopBanner
from .brand import Brand
from .category import Category
from .currency_rate import CurrencyRate
from .product import Product
from .product_tag import ProductTag
from .slider import Slider
from .system_config import SystemConfig
from .tag import Tag
from .unit import Unit, UnitType

__all__ = [
    "Base",
    "Brand",
    "Category",
    "CurrencyRate",
    "Product",
    "ProductTag",
    "Slider",
    "SystemConfig",
    "Tag",
    "TopBanner",
    "Unit",
    "UnitType",
]
