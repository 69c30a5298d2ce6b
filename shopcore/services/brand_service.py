from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import func, update

from ..models.brand import Brand
from ..models.product import Product
from ..schemas import BrandCreate, BrandUpdate
from ..utils.dto import to_brand_dto
from .errors import ConflictError, NotFoundError
from .logging import log_event

DUPLICATE_NAME_MESSAGE = "Brand with this name already exists"


class BrandService:
    def __init__(self, session_factory, on_products_changed: Optional[Callable[[], None]] = None):
        self._session_factory = session_factory
        # cached product listings embed brand fields
        self._on_products_changed = on_products_changed or (lambda: None)

    def list_brands(self) -> List[Dict]:
        """All brands sorted by name, each with its product count."""
        with self._session_factory() as session:
            counts = (
                session.query(Product.brand_id, func.count(Product.id))
                .filter(Product.brand_id.isnot(None))
                .group_by(Product.brand_id)
                .all()
            )
            by_brand = dict(counts)
            rows = session.query(Brand).order_by(Brand.name.asc()).all()
            return [to_brand_dto(r, by_brand.get(r.id, 0)) for r in rows]

    def get_brand(self, brand_id: str) -> Dict:
        with self._session_factory() as session:
            brand = self._require(session, brand_id)
            return to_brand_dto(brand, self._product_count(session, brand_id))

    def create_brand(self, payload: BrandCreate) -> Dict:
        with self._session_factory() as session:
            if self._name_taken(session, payload.name):
                raise ConflictError(DUPLICATE_NAME_MESSAGE)
            brand = Brand(name=payload.name, logo=payload.logo, internal_path=payload.internal_path)
            session.add(brand)
            session.flush()
            dto = to_brand_dto(brand, 0)
        log_event("info", "brand.created", brand_id=dto["id"], name=dto["name"])
        return dto

    def update_brand(self, brand_id: str, payload: BrandUpdate) -> Dict:
        changes = {k: v for k, v in payload.changes().items() if v is not None}
        with self._session_factory() as session:
            brand = self._require(session, brand_id)
            new_name = changes.get("name")
            if new_name and new_name != brand.name and self._name_taken(session, new_name, exclude=brand_id):
                raise ConflictError(DUPLICATE_NAME_MESSAGE)
            for key, value in changes.items():
                setattr(brand, key, value)
            session.flush()
            dto = to_brand_dto(brand, self._product_count(session, brand_id))
        self._on_products_changed()
        log_event("info", "brand.updated", brand_id=brand_id, fields=sorted(changes))
        return dto

    def delete_brand(self, brand_id: str) -> Tuple[Dict, int]:
        """Delete a brand, detaching its products first.

        Returns the deleted brand and how many products lost their brand.
        """
        with self._session_factory() as session:
            brand = self._require(session, brand_id)
            detached = self._product_count(session, brand_id)
            dto = to_brand_dto(brand, detached)
            if detached:
                session.execute(
                    update(Product)
                    .where(Product.brand_id == brand_id)
                    .values(brand_id=None)
                    .execution_options(synchronize_session=False)
                )
            session.delete(brand)
        self._on_products_changed()
        log_event("info", "brand.deleted", brand_id=brand_id, detached_products=detached)
        return dto, detached

    @staticmethod
    def _require(session, brand_id: str) -> Brand:
        brand = session.get(Brand, brand_id)
        if brand is None:
            raise NotFoundError("Brand not found")
        return brand

    @staticmethod
    def _product_count(session, brand_id: str) -> int:
        return session.query(func.count(Product.id)).filter(Product.brand_id == brand_id).scalar() or 0

    @staticmethod
    def _name_taken(session, name: str, exclude: Optional[str] = None) -> bool:
        q = session.query(Brand.id).filter(func.lower(Brand.name) == name.lower())
        if exclude:
            q = q.filter(Brand.id != exclude)
        return q.first() is not None
