"""
Core domain models for the postal-code lookup service.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class QueryKind(str, Enum):
    """Matching mode chosen by the query classifier."""
    POSTAL_CODE = "postal_code"
    REGION = "region"
    CITY = "city"


class MatchKind(str, Enum):
    """Kind of an autocomplete candidate."""
    POSTAL_CODE = "postal_code"
    CITY = "city"
    REGION = "region"


@dataclass(frozen=True)
class PlaceRecord:
    """One normalized row of city / region / postal-code data.

    Every field may be missing; strategies treat missing fields as
    non-matching.
    """
    postal_code: Optional[str] = None
    city_name: Optional[str] = None
    region_code: Optional[str] = None
    region_name: Optional[str] = None

    @property
    def region(self) -> Optional[str]:
        """Short region code when present, otherwise the full region name."""
        return self.region_code or self.region_name or None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "postal_code": self.postal_code,
            "city": self.city_name,
            "region_code": self.region_code,
            "region_name": self.region_name,
        }


@dataclass(frozen=True)
class QueryMode:
    """Classifier output: the mode plus the normalized query parts."""
    kind: QueryKind
    query: str  # trimmed, whitespace-collapsed original text
    city_part: Optional[str] = None
    region_part: Optional[str] = None
    # True when a trailing 1-2 letter word was split off without a comma
    speculative: bool = False

    @property
    def has_region_split(self) -> bool:
        return bool(self.city_part and self.region_part)


@dataclass
class MatchResult:
    """A single deduplicated autocomplete candidate."""
    kind: MatchKind
    display: str
    value: str
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "display": self.display,
            "value": self.value,
            "city": self.city,
            "region": self.region,
            "postal_code": self.postal_code,
        }
