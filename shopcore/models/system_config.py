from sqlalchemy import Column, DateTime, JSON, String, func

from .base import Base, utcnow


class SystemConfig(Base):
    __tablename__ = "system_config"

    key = Column(String(128), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)
