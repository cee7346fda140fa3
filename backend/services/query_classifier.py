"""Pure query classification for autocomplete requests."""

from __future__ import annotations

from domain.countries import US, CountryProfile
from domain.models import QueryKind, QueryMode
from services.normalize import collapse_whitespace


def _looks_like_postal_code(text: str, country: CountryProfile) -> bool:
    if text[:1].isdigit():
        return True
    pattern = country.postal_prefix_pattern
    return bool(pattern and pattern.match(text))


def _is_region_fragment(word: str) -> bool:
    return 1 <= len(word) <= 2 and word.isalpha()


def classify(query: str, country: CountryProfile = US) -> QueryMode:
    """Decide the matching mode for a raw query before any data is scanned.

    Postal-code prefixes win over everything else. Countries without a
    city concept always search region names. Everything else is a city
    query, optionally with a region part:

    - "burlington, wi" splits on the comma into city and region parts;
    - "burlington wi" is split speculatively, since "coos b" could just as
      well be the start of "Coos Bay". The engine decides using the data.
    """
    text = collapse_whitespace(query)

    if _looks_like_postal_code(text, country):
        return QueryMode(kind=QueryKind.POSTAL_CODE, query=text)

    if country.region_only:
        return QueryMode(kind=QueryKind.REGION, query=text)

    if "," in text:
        city_part, _, region_part = text.partition(",")
        city_part = collapse_whitespace(city_part)
        region_part = collapse_whitespace(region_part.replace(",", " "))
        if city_part and region_part:
            return QueryMode(
                kind=QueryKind.CITY,
                query=text,
                city_part=city_part,
                region_part=region_part,
            )
        return QueryMode(
            kind=QueryKind.CITY,
            query=text,
            city_part=collapse_whitespace(text.replace(",", " ")),
        )

    words = text.split(" ")
    if len(words) >= 2 and _is_region_fragment(words[-1]):
        return QueryMode(
            kind=QueryKind.CITY,
            query=text,
            city_part=" ".join(words[:-1]),
            region_part=words[-1],
            speculative=True,
        )

    return QueryMode(kind=QueryKind.CITY, query=text, city_part=text)
