"""Exact-match lookups over a country's place records."""
from __future__ import annotations

from typing import Iterable, List, Optional

from domain.models import PlaceRecord
from services.normalize import fold, normalize_postal_code


def _region_matches(record: PlaceRecord, region: str) -> bool:
    return region in (fold(record.region_code), fold(record.region_name))


def find_postal_code(
    records: Iterable[PlaceRecord],
    city: Optional[str],
    region: str,
) -> Optional[PlaceRecord]:
    """Return the first record for a (city, region) pair, case-insensitively.

    The region may be given as its code ("WI") or full name ("Wisconsin").
    With no city (region-only countries) the first record of the region wins.
    """
    city_key = fold(city)
    region_key = fold(region)
    if not region_key:
        return None
    for record in records:
        if not _region_matches(record, region_key):
            continue
        if city_key and fold(record.city_name) != city_key:
            continue
        return record
    return None


def find_by_postal_code(records: Iterable[PlaceRecord], code: str) -> List[PlaceRecord]:
    """Return every record carrying exactly this postal code."""
    wanted = normalize_postal_code(code)
    if not wanted:
        return []
    return [r for r in records if normalize_postal_code(r.postal_code) == wanted]
