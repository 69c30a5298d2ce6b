from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from .base import Base, new_id, utcnow


class Slider(Base):
    __tablename__ = "slider"

    id = Column(String(36), primary_key=True, default=new_id)
    image_url = Column(String(1024), nullable=False)
    internal_link = Column(String(512), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    position = Column("order", Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)
