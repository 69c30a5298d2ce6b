from typing import Dict, List, Optional

from sqlalchemy import update

from ..models.banner import TopBanner
from ..schemas import BannerCreate, BannerUpdate
from ..utils.dto import to_banner_dto
from .errors import NotFoundError
from .logging import log_event


class BannerService:
    """Top-of-page announcement banners.

    At most one banner is active. Every path that turns a banner on first
    deactivates the others, then activates the target, inside the same session,
    so a failure rolls both statements back together.
    """

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def list_active(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = (
                session.query(TopBanner)
                .filter(TopBanner.is_active.is_(True))
                .order_by(TopBanner.created_at.desc())
                .all()
            )
            return [to_banner_dto(r) for r in rows]

    def list_all(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.query(TopBanner).order_by(TopBanner.created_at.desc()).all()
            return [to_banner_dto(r) for r in rows]

    def get(self, banner_id: str) -> Dict:
        with self._session_factory() as session:
            return to_banner_dto(self._require(session, banner_id))

    def create(self, payload: BannerCreate) -> Dict:
        with self._session_factory() as session:
            if payload.is_active:
                self._deactivate_all(session)
            banner = TopBanner(title=payload.title, is_active=payload.is_active)
            session.add(banner)
            session.flush()
            dto = to_banner_dto(banner)
        log_event("info", "banner.created", banner_id=dto["id"], active=dto["isActive"])
        return dto

    def update(self, banner_id: str, payload: BannerUpdate) -> Dict:
        changes = payload.changes()
        with self._session_factory() as session:
            banner = self._require(session, banner_id)
            if changes.get("title") is not None:
                banner.title = changes["title"]
            if changes.get("is_active") is True and not banner.is_active:
                self._deactivate_all(session, keep=banner.id)
                banner.is_active = True
            elif changes.get("is_active") is False:
                banner.is_active = False
            session.flush()
            dto = to_banner_dto(banner)
        log_event("info", "banner.updated", banner_id=banner_id, active=dto["isActive"])
        return dto

    def toggle(self, banner_id: str) -> Dict:
        with self._session_factory() as session:
            banner = self._require(session, banner_id)
            if banner.is_active:
                banner.is_active = False
            else:
                self._deactivate_all(session, keep=banner.id)
                banner.is_active = True
            session.flush()
            dto = to_banner_dto(banner)
        log_event("info", "banner.toggled", banner_id=banner_id, active=dto["isActive"])
        return dto

    def delete(self, banner_id: str) -> None:
        with self._session_factory() as session:
            session.delete(self._require(session, banner_id))
        log_event("info", "banner.deleted", banner_id=banner_id)

    @staticmethod
    def _require(session, banner_id: str) -> TopBanner:
        banner = session.get(TopBanner, banner_id)
        if banner is None:
            raise NotFoundError("Banner not found")
        return banner

    @staticmethod
    def _deactivate_all(session, keep: Optional[str] = None) -> None:
        stmt = update(TopBanner).where(TopBanner.is_active.is_(True))
        if keep is not None:
            stmt = stmt.where(TopBanner.id != keep)
        session.execute(stmt.values(is_active=False).execution_options(synchronize_session="fetch"))
        # the partial unique index is checked per statement
        session.flush()
