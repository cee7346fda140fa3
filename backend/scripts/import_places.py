"""Load a zipcode bundle (JSON array or CSV) into the SQLite place tables.

Usage:
    python -m scripts.import_places --country us --input data/zipcodes.us.json
    python -m scripts.import_places --country ca --input data/zipcodes.ca.csv --replace
    python -m scripts.import_places --country us --input data/zipcodes.us.json --validate

Rows go through the same per-country adapter the API uses, so anything the
service would skip as malformed is reported here instead of being stored.
"""

from __future__ import annotations

import argparse
import logging
from itertools import islice
from typing import Iterable, Iterator, List, Optional, Tuple

from db import init_db, make_engine, make_session_factory
from domain.countries import COUNTRIES, get_country
from domain.errors import DataUnavailable, MalformedRecord
from domain.models import PlaceRecord
from repositories.places import PlacesRepository
from services.place_sources import CountryAdapter, read_bundle
from settings import settings

logger = logging.getLogger("import_places")

MAX_REPORTED_ERRORS = 5


def validate_rows(adapter: CountryAdapter, rows: Iterable) -> Tuple[List[PlaceRecord], int, List[str]]:
    """Split rows into normalized records and malformed ones.

    Returns (records, malformed_count, first few error messages).
    """
    records: List[PlaceRecord] = []
    malformed = 0
    errors: List[str] = []
    for index, row in enumerate(rows, start=1):
        try:
            records.append(adapter.to_record(row))
        except MalformedRecord as exc:
            malformed += 1
            if len(errors) < MAX_REPORTED_ERRORS:
                errors.append(f"row {index}: {exc}")
    return records, malformed, errors


def _batches(records: Iterable[PlaceRecord], size: int) -> Iterator[List[PlaceRecord]]:
    it = iter(records)
    while True:
        batch = list(islice(it, size))
        if not batch:
            return
        yield batch


def import_records(
    session_factory,
    country: str,
    records: Iterable[PlaceRecord],
    batch_size: int = 1000,
    replace: bool = False,
) -> int:
    """Insert records in batches, committing once per batch."""
    repo = PlacesRepository()
    total = 0
    with session_factory() as session:
        if replace:
            repo.clear(session, country)
            session.commit()
        for batch in _batches(records, batch_size):
            total += repo.insert_records(session, country, batch)
            session.commit()
            logger.info("imported %d %s rows", total, country)
    return total


def main(argv: Optional[List[str]] = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Import a zipcode bundle into the SQLite place tables.")
    parser.add_argument("--country", required=True, choices=sorted(COUNTRIES), help="Country code of the bundle.")
    parser.add_argument("--input", required=True, help="Path to zipcodes.<cc>.json or .csv")
    parser.add_argument("--database-url", default=settings.PLACES_DATABASE_URL)
    parser.add_argument("--batch-size", type=int, default=1000)
    parser.add_argument("--replace", action="store_true", help="Delete existing rows for the country first.")
    parser.add_argument("--validate", action="store_true", help="Only report valid/malformed row counts.")
    args = parser.parse_args(argv)

    profile = get_country(args.country)
    try:
        rows = read_bundle(profile.code, args.input)
    except DataUnavailable as exc:
        logger.error("%s", exc)
        return 1

    try:
        records, malformed, errors = validate_rows(CountryAdapter(profile), rows)
    except DataUnavailable as exc:
        logger.error("%s", exc)
        return 1
    logger.info("%s: %d valid rows, %d malformed", args.input, len(records), malformed)
    for message in errors:
        logger.info("  %s", message)
    if args.validate:
        return 0 if malformed == 0 else 2

    engine = make_engine(args.database_url)
    init_db(bind=engine)
    session_factory = make_session_factory(engine)
    total = import_records(
        session_factory,
        profile.code,
        records,
        batch_size=args.batch_size,
        replace=args.replace,
    )
    logger.info("done: %d rows in %s", total, args.database_url)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
