from sqlalchemy import Boolean, Column, DateTime, Index, String, func, text

from .base import Base, new_id, utcnow


class TopBanner(Base):
    __tablename__ = "top_banner"
    __table_args__ = (
        # at most one row may have is_active = true
        Index(
            "uq_top_banner_single_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(512), nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)
