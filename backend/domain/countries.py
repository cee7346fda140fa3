"""
Per-country profiles.

Each country's data ships with its own column names; the profile lists the
aliases for every normalized field so a single adapter can read any of them.
"""
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from domain.errors import UnknownCountry


@dataclass(frozen=True)
class CountryProfile:
    code: str
    name: str
    region_param: str  # query/response key for the region, e.g. "state"
    postal_key: str  # response key for the postal code, e.g. "zip"
    postal_aliases: Tuple[str, ...]
    city_aliases: Tuple[str, ...] = ()
    region_code_aliases: Tuple[str, ...] = ()
    region_name_aliases: Tuple[str, ...] = ()
    # Matches the start of an alphanumeric postal code (letter + digit for CA)
    postal_prefix_pattern: Optional[Pattern[str]] = None
    # Region + postal code only, no city concept
    region_only: bool = False
    example_city: str = "Burlington"
    example_region: str = "WI"
    # Zero-pad numeric codes that lost their leading zeros (5401 -> "05401")
    postal_zero_pad: int = 0

    @property
    def example(self) -> str:
        if self.region_only:
            return f"/api/{self.code}?{self.region_param}=Jalisco"
        return f"/api/{self.code}?city={self.example_city}&{self.region_param}={self.example_region}"


US = CountryProfile(
    code="us",
    name="United States",
    region_param="state",
    postal_key="zip",
    postal_aliases=("zipcode", "zip_code", "zip", "postal_code"),
    city_aliases=("place", "city", "cityname", "city_name"),
    region_code_aliases=("state_code", "state_abbr"),
    region_name_aliases=("state", "state_name"),
    postal_zero_pad=5,
)

CA = CountryProfile(
    code="ca",
    name="Canada",
    region_param="province",
    postal_key="postal_code",
    postal_aliases=("postal_code", "zipcode", "fsa"),
    city_aliases=("place", "city", "city_name"),
    region_code_aliases=("province_code", "state_code"),
    region_name_aliases=("province", "state"),
    postal_prefix_pattern=re.compile(r"^[A-Za-z]\d"),
    example_city="Toronto",
    example_region="ON",
)

MX = CountryProfile(
    code="mx",
    name="Mexico",
    region_param="state",
    postal_key="postal_code",
    postal_aliases=("codigo_postal", "cp", "postal_code", "zipcode"),
    region_name_aliases=("estado", "state", "state_name"),
    region_only=True,
    postal_zero_pad=5,
)

COUNTRIES: Dict[str, CountryProfile] = {p.code: p for p in (US, CA, MX)}


def get_country(code: str, enabled: Optional[Iterable[str]] = None) -> CountryProfile:
    """Return the profile for a country code, honoring the enabled list."""
    key = (code or "").strip().lower()
    profile = COUNTRIES.get(key)
    if profile is None:
        raise UnknownCountry(code)
    if enabled is not None and key not in set(enabled):
        raise UnknownCountry(code)
    return profile


def list_countries(enabled: Optional[Iterable[str]] = None) -> List[CountryProfile]:
    codes = list(enabled) if enabled is not None else list(COUNTRIES)
    return [COUNTRIES[c] for c in codes if c in COUNTRIES]
