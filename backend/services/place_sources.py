"""
Place-record sources and the per-country adapter.

A source knows how to produce raw rows for a country (static bundle file,
SQLite tables, or a bundle downloaded from object storage). The adapter
maps those rows, whatever their column names, onto `PlaceRecord`. All I/O
needed to open a source happens before the first record is yielded, so a
missing or broken source fails as `DataUnavailable` up front.
"""
from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence, Union

import requests
from sqlalchemy.exc import SQLAlchemyError

from domain.countries import CountryProfile, get_country
from domain.errors import DataUnavailable, MalformedRecord
from domain.models import PlaceRecord
from repositories.places import PlacesRepository
from services.records_cache import RecordsCache

logger = logging.getLogger(__name__)

RawRow = Mapping[str, Any]


class CountryAdapter:
    """Normalize raw rows of one country into place records."""

    def __init__(self, profile: CountryProfile):
        self.profile = profile

    @staticmethod
    def _pick(row: RawRow, aliases: Sequence[str]) -> Optional[str]:
        for alias in aliases:
            value = row.get(alias)
            if value is None:
                continue
            text = str(value).strip()
            if text:
                return text
        return None

    def _postal_code(self, row: RawRow) -> Optional[str]:
        code = self._pick(row, self.profile.postal_aliases)
        if code and code.isdigit() and self.profile.postal_zero_pad:
            code = code.zfill(self.profile.postal_zero_pad)
        return code

    def to_record(self, row: RawRow) -> PlaceRecord:
        if not isinstance(row, Mapping):
            raise MalformedRecord(self.profile.code, "object")
        postal_code = self._postal_code(row)
        if not postal_code:
            raise MalformedRecord(self.profile.code, "postal_code", dict(row))
        return PlaceRecord(
            postal_code=postal_code,
            city_name=None if self.profile.region_only else self._pick(row, self.profile.city_aliases),
            region_code=self._pick(row, self.profile.region_code_aliases),
            region_name=self._pick(row, self.profile.region_name_aliases),
        )

    def iter_records(self, rows: Iterable[RawRow]) -> Iterator[PlaceRecord]:
        """Yield normalized records, skipping (and counting) malformed rows."""
        skipped = 0
        try:
            for row in rows:
                try:
                    yield self.to_record(row)
                except MalformedRecord as exc:
                    skipped += 1
                    logger.debug("skipping row: %s", exc)
        finally:
            close = getattr(rows, "close", None)
            if close is not None:
                close()
            if skipped:
                logger.debug("%s: skipped %d malformed rows", self.profile.code, skipped)


def _iter_csv(country: str, path: Path) -> Iterator[RawRow]:
    # The file is opened on first use so an unstarted generator holds no handle
    try:
        handle = open(path, newline="", encoding="utf-8")
    except OSError as exc:
        raise DataUnavailable(country, str(exc)) from exc
    with handle:
        try:
            yield from csv.DictReader(handle)
        except (csv.Error, UnicodeDecodeError) as exc:
            raise DataUnavailable(country, f"unreadable CSV bundle: {exc}") from exc


def read_bundle(country: str, path: Union[str, Path]) -> Iterable[RawRow]:
    """Open a JSON (array of objects) or CSV bundle file.

    CSV files are streamed; JSON files are parsed up front.
    """
    path = Path(path)
    if path.suffix.lower() == ".csv":
        if not path.is_file():
            raise DataUnavailable(country, f"no such bundle: {path}")
        return _iter_csv(country, path)
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as exc:
        raise DataUnavailable(country, f"unreadable bundle {path.name}: {exc}") from exc
    if not isinstance(payload, list):
        raise DataUnavailable(country, f"{path.name} is not a JSON array")
    return payload


class PlaceSource:
    """Produces the raw rows for a country."""

    name = "base"

    def open(self, profile: CountryProfile) -> Iterable[RawRow]:
        raise NotImplementedError


class BundleSource(PlaceSource):
    """Static bundle files: `zipcodes.<cc>.json` (array of objects) or `.csv`."""

    name = "bundle"

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def bundle_path(self, country: str) -> Optional[Path]:
        for ext in ("json", "csv"):
            path = self.data_dir / f"zipcodes.{country}.{ext}"
            if path.exists():
                return path
        return None

    def open(self, profile: CountryProfile) -> Iterable[RawRow]:
        path = self.bundle_path(profile.code)
        if path is None:
            raise DataUnavailable(profile.code, f"no bundle found in {self.data_dir}")
        return read_bundle(profile.code, path)


class RemoteBundleSource(PlaceSource):
    """JSON bundles served from object storage over HTTP."""

    name = "remote"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def bundle_url(self, country: str) -> str:
        return f"{self.base_url}/zipcodes.{country}.json"

    def open(self, profile: CountryProfile) -> Iterable[RawRow]:
        url = self.bundle_url(profile.code)
        try:
            resp = self._session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("remote bundle fetch failed for %s: %s", url, exc)
            raise DataUnavailable(profile.code, f"fetch failed: {exc}") from exc
        if not isinstance(payload, list):
            raise DataUnavailable(profile.code, "remote bundle is not a JSON array")
        return payload


class DatabaseSource(PlaceSource):
    """Rows streamed from the per-country SQLite tables."""

    name = "database"

    def __init__(
        self,
        session_factory: Callable[[], Any],
        repository: Optional[PlacesRepository] = None,
        batch_size: int = 1000,
    ):
        self.session_factory = session_factory
        self.repository = repository or PlacesRepository()
        self.batch_size = batch_size

    def open(self, profile: CountryProfile) -> Iterable[RawRow]:
        session = self.session_factory()
        rows = self.repository.iter_rows(session, profile.code, batch_size=self.batch_size)
        try:
            # Pull the first row now so connection/table errors surface before the scan
            first = next(rows, None)
        except SQLAlchemyError as exc:
            session.close()
            logger.warning("database source failed for %s: %s", profile.code, exc)
            raise DataUnavailable(profile.code, f"database error: {exc}") from exc
        return self._stream(profile.code, session, first, rows)

    @staticmethod
    def _stream(country: str, session, first, rows) -> Iterator[RawRow]:
        try:
            if first is None:
                return
            yield first
            yield from rows
        except SQLAlchemyError as exc:
            raise DataUnavailable(country, f"database error: {exc}") from exc
        finally:
            session.close()


def build_source(settings, session_factory: Optional[Callable[[], Any]] = None) -> PlaceSource:
    """Create the configured place source (`PLACES_SOURCE`)."""
    kind = settings.PLACES_SOURCE
    if kind == "bundle":
        return BundleSource(settings.PLACES_DATA_DIR)
    if kind == "database":
        if session_factory is None:
            from db import SessionLocal

            session_factory = SessionLocal
        return DatabaseSource(session_factory)
    if kind == "remote":
        if not settings.PLACES_BUNDLE_URL:
            raise ValueError("PLACES_BUNDLE_URL must be set when PLACES_SOURCE=remote")
        return RemoteBundleSource(settings.PLACES_BUNDLE_URL, timeout=settings.REMOTE_BUNDLE_TIMEOUT)
    raise ValueError(f"Unknown PLACES_SOURCE: {kind}")


def fetch_place_records(
    country: Union[str, CountryProfile],
    source: PlaceSource,
    cache: Optional[RecordsCache] = None,
    enabled: Optional[Iterable[str]] = None,
) -> Iterator[PlaceRecord]:
    """Return a lazy sequence of normalized place records for a country.

    Raises UnknownCountry for unsupported codes and DataUnavailable when the
    source cannot be opened. With a cache, the normalized records are kept
    for the cache's TTL and later calls skip the source entirely.
    """
    profile = country if isinstance(country, CountryProfile) else get_country(country, enabled)
    adapter = CountryAdapter(profile)
    if cache is None:
        return adapter.iter_records(source.open(profile))
    records = cache.get_or_load(
        f"{source.name}:{profile.code}",
        lambda: adapter.iter_records(source.open(profile)),
    )
    return iter(records)
