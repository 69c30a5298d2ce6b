import enum

from sqlalchemy import Boolean, Column, Enum, Integer, String, UniqueConstraint

from .base import Base, new_id


class UnitType(str, enum.Enum):
    WEIGHT = "WEIGHT"
    LENGTH = "LENGTH"
    CLOTHING_SIZE = "CLOTHING_SIZE"
    VOLUME = "VOLUME"
    TEMPERATURE = "TEMPERATURE"


class Unit(Base):
    __tablename__ = "unit"
    __table_args__ = (UniqueConstraint("type", "name", name="uq_unit_type_name"),)

    id = Column(String(36), primary_key=True, default=new_id)
    type = Column(Enum(UnitType, name="unit_type"), nullable=False)
    name = Column(String(64), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
