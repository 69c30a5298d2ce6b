from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class Brand(Base):
    __tablename__ = "brand"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, unique=True)
    logo = Column(String(1024), nullable=False)
    # storefront route the brand card links to, e.g. /zipzip/products
    internal_path = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    products = relationship("Product", back_populates="brand")
