"""
Errors raised at the data-source boundary.

The classifier and matching strategies are total on well-formed input; the
only failures come from producing the place records themselves.
"""
from typing import Optional


class PlacesError(Exception):
    """Base class for place lookup errors."""


class DataUnavailable(PlacesError):
    """The place-record source for a country could not be produced."""

    def __init__(self, country: str, reason: str):
        super().__init__(f"Place data unavailable for '{country}': {reason}")
        self.country = country
        self.reason = reason


class UnknownCountry(PlacesError):
    """No profile is registered (or enabled) for a country code."""

    def __init__(self, country: str):
        super().__init__(f"Unknown country: {country}")
        self.country = country


class MalformedRecord(PlacesError):
    """A raw source row is missing the fields a place record needs."""

    def __init__(self, country: str, missing: str, row: Optional[dict] = None):
        super().__init__(f"Malformed {country} record: missing {missing}")
        self.country = country
        self.missing = missing
        self.row = row
