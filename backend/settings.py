import os
from pathlib import Path
from typing import List

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_list(val: str | None, default: str) -> List[str]:
    raw = val if val is not None else default
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        # Data source
        self.PLACES_SOURCE: str = os.getenv("PLACES_SOURCE", "bundle").lower()
        self.PLACES_DATA_DIR: str = os.getenv("PLACES_DATA_DIR", str(BACKEND_ROOT / "data"))
        self.PLACES_BUNDLE_URL: str | None = os.getenv("PLACES_BUNDLE_URL")
        self.PLACES_DATABASE_URL: str = os.getenv(
            "PLACES_DATABASE_URL", f"sqlite:///{BACKEND_ROOT / 'places.db'}"
        )
        self.PLACES_COUNTRIES: List[str] = _as_list(os.getenv("PLACES_COUNTRIES"), "us,ca,mx")
        self.PLACES_CACHE_ENABLED: bool = _as_bool(os.getenv("PLACES_CACHE_ENABLED"), True)
        self.PLACES_CACHE_TTL_SECONDS: int = int(os.getenv("PLACES_CACHE_TTL_SECONDS", "3600"))
        self.REMOTE_BUNDLE_TIMEOUT: float = float(os.getenv("REMOTE_BUNDLE_TIMEOUT", "5.0"))

        # Autocomplete limits; the time budget must stay well below the
        # platform's request ceiling.
        self.AUTOCOMPLETE_MAX_RESULTS: int = int(os.getenv("AUTOCOMPLETE_MAX_RESULTS", "50"))
        self.AUTOCOMPLETE_DEFAULT_LIMIT: int = int(os.getenv("AUTOCOMPLETE_DEFAULT_LIMIT", "10"))
        self.AUTOCOMPLETE_MIN_QUERY_LENGTH: int = int(os.getenv("AUTOCOMPLETE_MIN_QUERY_LENGTH", "3"))
        self.AUTOCOMPLETE_TIME_BUDGET_MS: int = int(os.getenv("AUTOCOMPLETE_TIME_BUDGET_MS", "250"))
        self.AUTOCOMPLETE_MAX_ITEMS: int = int(os.getenv("AUTOCOMPLETE_MAX_ITEMS", "200000"))
        self.AUTOCOMPLETE_CHECK_EVERY: int = int(os.getenv("AUTOCOMPLETE_CHECK_EVERY", "256"))

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
