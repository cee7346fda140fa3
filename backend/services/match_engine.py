"""
Bounded autocomplete matching over a lazy sequence of place records.

The engine scans the records once, applying the strategy picked from the
classified query, deduplicating as it goes and stopping as soon as either
the result cap or the scan budget is reached. Results are "the first
`limit` matches found within budget", then ordered exact-prefix first and
alphabetically after that.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, List, Optional, Set, Tuple

from domain.models import MatchResult, PlaceRecord, QueryKind, QueryMode
from services.matching import (
    CityRegionPrefix,
    CityWordPrefix,
    MatchStrategy,
    PostalCodePrefix,
    RegionSubstring,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50


@dataclass(frozen=True)
class ScanBudget:
    """Combined wall-clock and item ceiling for a single scan.

    The item ceiling is exact. The clock is only read every `check_every`
    records, so the time limit can overshoot by that many records.
    """
    time_limit_seconds: float = 0.25
    max_items: int = 200_000
    check_every: int = 256

    @classmethod
    def from_settings(cls, settings) -> "ScanBudget":
        return cls(
            time_limit_seconds=settings.AUTOCOMPLETE_TIME_BUDGET_MS / 1000.0,
            max_items=settings.AUTOCOMPLETE_MAX_ITEMS,
            check_every=max(1, settings.AUTOCOMPLETE_CHECK_EVERY),
        )


class _Collector:
    """Deduplicated, capped results for one strategy."""

    def __init__(self, strategy: MatchStrategy, limit: int):
        self.strategy = strategy
        self.limit = limit
        self.results: List[MatchResult] = []
        self._seen: Set[Hashable] = set()

    @property
    def full(self) -> bool:
        return len(self.results) >= self.limit

    def offer(self, record: PlaceRecord) -> None:
        if self.full or not self.strategy.matches(record):
            return
        key = self.strategy.key(record)
        if key in self._seen:
            return
        self._seen.add(key)
        self.results.append(self.strategy.to_result(record))


def clamp_limit(limit: Optional[int], ceiling: int = DEFAULT_MAX_RESULTS) -> int:
    """Clamp a client-requested limit into [1, ceiling]."""
    ceiling = max(1, ceiling)
    if limit is None:
        return ceiling
    return max(1, min(int(limit), ceiling))


def plan_strategies(mode: QueryMode) -> Tuple[MatchStrategy, Optional[MatchStrategy]]:
    """Return (primary, fallback) strategies for a classified query.

    The fallback only exists for speculative city+region splits: when the
    split finds nothing, the whole phrase is treated as a city name.
    """
    if mode.kind == QueryKind.POSTAL_CODE:
        return PostalCodePrefix(mode.query), None
    if mode.kind == QueryKind.REGION:
        return RegionSubstring(mode.query), None
    if mode.has_region_split:
        primary = CityRegionPrefix(mode.city_part, mode.region_part)
        if mode.speculative:
            return primary, CityWordPrefix(mode.query)
        return primary, None
    return CityWordPrefix(mode.city_part or mode.query), None


def rank_results(results: Iterable[MatchResult], query: str) -> List[MatchResult]:
    """Exact-prefix matches on `display` first, then alphabetical."""
    needle = (query or "").strip().casefold()

    def _key(result: MatchResult):
        display = result.display.casefold()
        return (0 if display.startswith(needle) else 1, display, result.display)

    return sorted(results, key=_key)


def match(
    mode: QueryMode,
    limit: Optional[int],
    records: Iterable[PlaceRecord],
    budget: Optional[ScanBudget] = None,
    *,
    ceiling: int = DEFAULT_MAX_RESULTS,
    clock: Callable[[], float] = time.monotonic,
) -> List[MatchResult]:
    """Run the matching strategy for `mode` over `records`.

    Never raises on budget exhaustion; returns whatever was accumulated.
    DataUnavailable raised by the record source propagates unchanged.
    """
    budget = budget or ScanBudget()
    cap = clamp_limit(limit, ceiling)
    primary_strategy, fallback_strategy = plan_strategies(mode)
    primary = _Collector(primary_strategy, cap)
    fallback = _Collector(fallback_strategy, cap) if fallback_strategy else None

    started = clock()
    scanned = 0
    iterator = iter(records)
    try:
        for record in iterator:
            scanned += 1
            primary.offer(record)
            if fallback is not None:
                fallback.offer(record)
            if primary.full:
                break
            if scanned >= budget.max_items:
                logger.debug("autocomplete: item budget exhausted after %d records", scanned)
                break
            if scanned % budget.check_every == 0 and clock() - started >= budget.time_limit_seconds:
                logger.debug("autocomplete: time budget exhausted after %d records", scanned)
                break
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            close()

    winner = primary
    if fallback is not None and not primary.results:
        winner = fallback
    logger.debug(
        "autocomplete: mode=%s query=%r scanned=%d results=%d fallback=%s",
        mode.kind.value,
        mode.query,
        scanned,
        len(winner.results),
        winner is fallback,
    )
    return rank_results(winner.results, mode.query)
