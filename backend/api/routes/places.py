"""
Postal-code lookup and autocomplete routes.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from domain.countries import CountryProfile, get_country, list_countries
from domain.errors import DataUnavailable, UnknownCountry
from domain.models import MatchResult, PlaceRecord
from services.lookup import find_by_postal_code, find_postal_code
from services.match_engine import ScanBudget, match
from services.place_sources import PlaceSource, build_source, fetch_place_records
from services.query_classifier import classify
from services.records_cache import RecordsCache
from settings import settings

router = APIRouter()
logger = logging.getLogger(__name__)

records_cache = RecordsCache(ttl_seconds=settings.PLACES_CACHE_TTL_SECONDS)
_place_source: Optional[PlaceSource] = None


def get_place_source() -> PlaceSource:
    global _place_source
    if _place_source is None:
        _place_source = build_source(settings)
    return _place_source


def get_records_cache() -> Optional[RecordsCache]:
    return records_cache if settings.PLACES_CACHE_ENABLED else None


class CountryResponse(BaseModel):
    code: str
    name: str
    region_param: str
    postal_key: str
    region_only: bool
    example: str


class MatchResultResponse(BaseModel):
    kind: str
    display: str
    value: str
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None


class AutocompleteResponse(BaseModel):
    country: str
    query: str
    mode: str
    results: List[MatchResultResponse]


def match_to_response(result: MatchResult) -> MatchResultResponse:
    return MatchResultResponse(**result.to_dict())


def _available_endpoints() -> List[str]:
    return [p.example for p in list_countries(settings.PLACES_COUNTRIES)]


def _profile_or_404(country: str) -> CountryProfile:
    try:
        return get_country(country, settings.PLACES_COUNTRIES)
    except UnknownCountry:
        raise HTTPException(
            status_code=404,
            detail={"error": "Not found", "available_endpoints": _available_endpoints()},
        )


@contextmanager
def _open_records(profile: CountryProfile) -> Iterator[Iterator[PlaceRecord]]:
    """Open the country's records for one request, mapping failures to 503."""
    try:
        records = fetch_place_records(profile, get_place_source(), get_records_cache())
    except DataUnavailable as exc:
        logger.warning("place data unavailable: %s", exc)
        raise HTTPException(status_code=503, detail={"error": "Data unavailable", "country": profile.code})
    try:
        yield records
    except DataUnavailable as exc:
        logger.warning("place data failed mid-scan: %s", exc)
        raise HTTPException(status_code=503, detail={"error": "Data unavailable", "country": profile.code})
    finally:
        close = getattr(records, "close", None)
        if close is not None:
            close()


def _place_payload(profile: CountryProfile, record: PlaceRecord) -> dict:
    payload = {}
    if not profile.region_only:
        payload["city"] = record.city_name
    payload[profile.region_param] = record.region
    payload[profile.postal_key] = record.postal_code
    return payload


@router.get("/api/countries", response_model=List[CountryResponse])
def countries():
    """List the countries this deployment serves."""
    return [
        CountryResponse(
            code=p.code,
            name=p.name,
            region_param=p.region_param,
            postal_key=p.postal_key,
            region_only=p.region_only,
            example=p.example,
        )
        for p in list_countries(settings.PLACES_COUNTRIES)
    ]


@router.get("/api/{country}/autocomplete", response_model=AutocompleteResponse)
def autocomplete(
    country: str,
    q: str = Query("", description="Partial city, 'city, region' or postal-code prefix"),
    limit: Optional[int] = Query(None, ge=1, description="Max results; capped server-side"),
):
    """
    Autocomplete a partial query into cities, postal codes or regions.

    An empty result list means "no matches"; it is not an error.
    """
    profile = _profile_or_404(country)
    query = q.strip()
    if len(query) < settings.AUTOCOMPLETE_MIN_QUERY_LENGTH:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Query too short",
                "min_length": settings.AUTOCOMPLETE_MIN_QUERY_LENGTH,
            },
        )

    mode = classify(query, profile)
    with _open_records(profile) as records:
        results = match(
            mode,
            limit or settings.AUTOCOMPLETE_DEFAULT_LIMIT,
            records,
            ScanBudget.from_settings(settings),
            ceiling=settings.AUTOCOMPLETE_MAX_RESULTS,
        )
    return AutocompleteResponse(
        country=profile.code,
        query=query,
        mode=mode.kind.value,
        results=[match_to_response(r) for r in results],
    )


@router.get("/api/{country}/postal/{code}")
def places_for_postal_code(country: str, code: str):
    """Reverse lookup: every place that uses a postal code."""
    profile = _profile_or_404(country)
    with _open_records(profile) as records:
        found = find_by_postal_code(records, code)
    if not found:
        raise HTTPException(status_code=404, detail={"error": "Not found"})
    return {
        profile.postal_key: found[0].postal_code,
        "places": [_place_payload(profile, r) for r in found],
    }


@router.get("/api/{country}")
def lookup_postal_code(country: str, request: Request, city: Optional[str] = None):
    """
    Exact (city, region) -> postal code lookup, case-insensitive.

    Example: /api/us?city=Burlington&state=WI
    """
    profile = _profile_or_404(country)
    region = request.query_params.get(profile.region_param) or request.query_params.get("region")
    required = [profile.region_param] if profile.region_only else ["city", profile.region_param]
    if not region or (not profile.region_only and not city):
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Missing required parameters",
                "required": required,
                "example": profile.example,
            },
        )

    with _open_records(profile) as records:
        record = find_postal_code(records, None if profile.region_only else city, region)
    if record is None:
        raise HTTPException(status_code=404, detail={"error": "Not found"})
    return _place_payload(profile, record)
