from sqlalchemy import Boolean, Column, DateTime, Numeric, String, func

from .base import Base, new_id, utcnow


class CurrencyRate(Base):
    """1 unit of ``currency`` is worth ``rate_to_npr`` NPR."""

    __tablename__ = "currency_rate"

    id = Column(String(36), primary_key=True, default=new_id)
    country = Column(String(128), nullable=False)
    currency = Column(String(3), nullable=False, unique=True)
    symbol = Column(String(16), nullable=False)
    rate_to_npr = Column(Numeric(18, 6), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
