"""
SQLAlchemy ORM models for the per-country postal-code tables.

Column names follow each country's source data; the country adapters map
them onto normalized place records.
"""
from sqlalchemy import Column, Float, Index, Integer, String

from db import Base


class UsZipcodeORM(Base):
    __tablename__ = "us_zipcodes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    zipcode = Column(String, nullable=False, index=True)
    place = Column(String, nullable=False)
    state = Column(String, nullable=True)
    state_code = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    __table_args__ = (Index("idx_us_place_state", "place", "state_code"),)


class CaZipcodeORM(Base):
    __tablename__ = "ca_zipcodes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    zipcode = Column(String, nullable=False, index=True)
    place = Column(String, nullable=False)
    state = Column(String, nullable=True)
    state_code = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    __table_args__ = (Index("idx_ca_place_state", "place", "state_code"),)


class MxPostalCodeORM(Base):
    __tablename__ = "mx_postal_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo_postal = Column(String, nullable=False, index=True)
    estado = Column(String, nullable=False, index=True)


TABLES = {
    "us": UsZipcodeORM,
    "ca": CaZipcodeORM,
    "mx": MxPostalCodeORM,
}
