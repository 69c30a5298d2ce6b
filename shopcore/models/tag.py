from sqlalchemy import Boolean, Column, String

from .base import Base, new_id


class Tag(Base):
    __tablename__ = "tag"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(64), nullable=False, unique=True)
    slug = Column(String(64), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
