from typing import Dict, List

from sqlalchemy import func

from ..models.slider import Slider
from ..schemas import SliderCreate, SliderUpdate
from ..utils.dto import to_slider_dto
from .errors import BadRequestError, NotFoundError
from .logging import log_event


def normalize_image_url(url: str) -> str:
    """Absolute URLs pass through; relative upload paths get a leading slash."""
    value = (url or "").strip()
    if not value:
        raise BadRequestError("Image URL is required")
    if value.startswith(("http://", "https://", "/")):
        return value
    return "/" + value


class SliderService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    def list_sliders(self, active_only: bool = False) -> List[Dict]:
        with self._session_factory() as session:
            q = session.query(Slider)
            if active_only:
                q = q.filter(Slider.is_active.is_(True))
            rows = q.order_by(Slider.position.asc(), Slider.created_at.asc()).all()
            return [to_slider_dto(r) for r in rows]

    def get_slider(self, slider_id: str) -> Dict:
        with self._session_factory() as session:
            return to_slider_dto(self._require(session, slider_id))

    def create_slider(self, payload: SliderCreate) -> Dict:
        image_url = normalize_image_url(payload.image_url)
        with self._session_factory() as session:
            position = payload.order
            if position is None:
                last = session.query(func.max(Slider.position)).scalar()
                position = (last or 0) + 1
            slider = Slider(
                image_url=image_url,
                internal_link=payload.internal_link or "",
                is_active=payload.is_active,
                position=position,
            )
            session.add(slider)
            session.flush()
            dto = to_slider_dto(slider)
        log_event("info", "slider.created", slider_id=dto["id"], order=dto["order"])
        return dto

    def update_slider(self, slider_id: str, payload: SliderUpdate) -> Dict:
        changes = payload.changes()
        with self._session_factory() as session:
            slider = self._require(session, slider_id)
            if changes.get("image_url") is not None:
                slider.image_url = normalize_image_url(changes["image_url"])
            if "internal_link" in changes:
                slider.internal_link = changes["internal_link"] or ""
            if changes.get("is_active") is not None:
                slider.is_active = changes["is_active"]
            if changes.get("order") is not None:
                slider.position = changes["order"]
            session.flush()
            dto = to_slider_dto(slider)
        log_event("info", "slider.updated", slider_id=slider_id, fields=sorted(changes))
        return dto

    def toggle_slider(self, slider_id: str) -> Dict:
        with self._session_factory() as session:
            slider = self._require(session, slider_id)
            slider.is_active = not slider.is_active
            session.flush()
            dto = to_slider_dto(slider)
        log_event("info", "slider.toggled", slider_id=slider_id, active=dto["isActive"])
        return dto

    def delete_slider(self, slider_id: str) -> None:
        with self._session_factory() as session:
            session.delete(self._require(session, slider_id))
        log_event("info", "slider.deleted", slider_id=slider_id)

    @staticmethod
    def _require(session, slider_id: str) -> Slider:
        slider = session.get(Slider, slider_id)
        if slider is None:
            raise NotFoundError("Slider not found")
        return slider
