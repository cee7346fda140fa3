"""
Place-record repository backed by SQLAlchemy/SQLite.
"""
from typing import Dict, Iterable, Iterator, List

from sqlalchemy import delete, func, inspect, select
from sqlalchemy.orm import Session

from domain.errors import UnknownCountry
from domain.models import PlaceRecord
from repositories.models import TABLES


def _table_for(country: str):
    model = TABLES.get(country)
    if model is None:
        raise UnknownCountry(country)
    return model


def _record_columns(country: str, record: PlaceRecord) -> Dict[str, object]:
    if country == "mx":
        return {"codigo_postal": record.postal_code, "estado": record.region_name or ""}
    return {
        "zipcode": record.postal_code,
        "place": record.city_name or "",
        "state": record.region_name,
        "state_code": record.region_code,
    }


def _row_to_dict(orm) -> Dict[str, object]:
    return {attr.key: getattr(orm, attr.key) for attr in inspect(orm).mapper.column_attrs}


class PlacesRepository:
    """Raw row access for the per-country postal-code tables."""

    def iter_rows(self, session: Session, country: str, batch_size: int = 1000) -> Iterator[Dict[str, object]]:
        """Stream rows as dicts, in primary-key order, `batch_size` at a time."""
        model = _table_for(country)
        stmt = select(model).order_by(model.id).execution_options(yield_per=batch_size)
        for orm in session.scalars(stmt):
            yield _row_to_dict(orm)

    def count(self, session: Session, country: str) -> int:
        model = _table_for(country)
        return session.scalar(select(func.count()).select_from(model)) or 0

    def insert_records(self, session: Session, country: str, records: Iterable[PlaceRecord]) -> int:
        """Insert normalized records using the country table's own column names."""
        model = _table_for(country)
        objects: List[object] = [model(**_record_columns(country, r)) for r in records]
        session.add_all(objects)
        session.flush()
        return len(objects)

    def clear(self, session: Session, country: str) -> None:
        model = _table_for(country)
        session.execute(delete(model))
