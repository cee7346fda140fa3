"""
Matching strategies for autocomplete.

Each strategy answers three questions about a place record: does it match,
which deduplication key does it collapse onto, and what candidate does it
produce. Records with missing fields simply do not match.
"""
from __future__ import annotations

from typing import Hashable, List, Sequence

from domain.models import MatchKind, MatchResult, PlaceRecord
from services.normalize import fold, normalize_postal_code, split_words


def word_prefix_match(query_words: Sequence[str], target_words: Sequence[str]) -> bool:
    """True when each query word prefixes the target word at the same position.

    "south bur" matches "south burlington" but "bur sou" does not, and the
    query may not have more words than the target.
    """
    if not query_words or len(query_words) > len(target_words):
        return False
    for q, t in zip(query_words, target_words):
        if not t.startswith(q):
            return False
    return True


def city_display(record: PlaceRecord) -> str:
    city = (record.city_name or "").strip()
    region = (record.region or "").strip()
    if city and region:
        return f"{city}, {region}"
    return city or region


def postal_display(record: PlaceRecord) -> str:
    code = (record.postal_code or "").strip()
    place = city_display(record)
    return f"{code} - {place}" if place else code


class MatchStrategy:
    kind: MatchKind

    def matches(self, record: PlaceRecord) -> bool:
        raise NotImplementedError

    def key(self, record: PlaceRecord) -> Hashable:
        raise NotImplementedError

    def to_result(self, record: PlaceRecord) -> MatchResult:
        raise NotImplementedError


class PostalCodePrefix(MatchStrategy):
    kind = MatchKind.POSTAL_CODE

    def __init__(self, prefix: str):
        self.prefix = normalize_postal_code(prefix)

    def matches(self, record: PlaceRecord) -> bool:
        code = normalize_postal_code(record.postal_code)
        return bool(code and self.prefix) and code.startswith(self.prefix)

    def key(self, record: PlaceRecord) -> Hashable:
        return normalize_postal_code(record.postal_code)

    def to_result(self, record: PlaceRecord) -> MatchResult:
        code = (record.postal_code or "").strip()
        return MatchResult(
            kind=self.kind,
            display=postal_display(record),
            value=code,
            city=record.city_name or None,
            region=record.region,
            postal_code=code,
        )


class RegionSubstring(MatchStrategy):
    """Mid-word search over long region names ("calient" -> "Aguascalientes")."""

    kind = MatchKind.REGION

    def __init__(self, text: str):
        self.needle = fold(text)

    def matches(self, record: PlaceRecord) -> bool:
        name = fold(record.region_name)
        return bool(name and self.needle) and self.needle in name

    def key(self, record: PlaceRecord) -> Hashable:
        return fold(record.region_name)

    def to_result(self, record: PlaceRecord) -> MatchResult:
        name = (record.region_name or "").strip()
        return MatchResult(
            kind=self.kind,
            display=name,
            value=name,
            region=name,
            postal_code=record.postal_code or None,
        )


class CityWordPrefix(MatchStrategy):
    kind = MatchKind.CITY

    def __init__(self, city_text: str):
        self.words: List[str] = split_words(city_text)

    def matches(self, record: PlaceRecord) -> bool:
        return word_prefix_match(self.words, split_words(record.city_name))

    def key(self, record: PlaceRecord) -> Hashable:
        return (fold(record.city_name), fold(record.region))

    def to_result(self, record: PlaceRecord) -> MatchResult:
        display = city_display(record)
        return MatchResult(
            kind=self.kind,
            display=display,
            value=display,
            city=(record.city_name or "").strip(),
            region=record.region,
            postal_code=record.postal_code or None,
        )


class CityRegionPrefix(CityWordPrefix):
    """City word-prefix match plus a region code prefix ("w" -> WA, WI, WV, WY)."""

    def __init__(self, city_text: str, region_text: str):
        super().__init__(city_text)
        self.region_prefix = fold(region_text)

    def matches(self, record: PlaceRecord) -> bool:
        region_code = fold(record.region_code)
        if not region_code or not self.region_prefix:
            return False
        if not region_code.startswith(self.region_prefix):
            return False
        return super().matches(record)
