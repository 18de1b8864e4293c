from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_HOMEPAGE_URL = (
    "https://tfl.gov.uk/modes/cycling/santander-cycles/find-a-docking-station"
)

_HOMEPAGE_URL_ENV = "FEED_HOMEPAGE_URL"
_FEED_PATH_ENV = "FEED_PATH"
_FEED_TIMEOUT_ENV = "FEED_TIMEOUT_SECONDS"
_REGISTRY_PATH_ENV = "REGISTRY_PERSISTENCE_PATH"
_TRIGGER_SECRET_ENV = "TRIGGER_SECRET"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    feed_homepage_url: str
    feed_path: str
    feed_timeout: float
    registry_persistence_path: Optional[str]
    trigger_secret: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_timeout(default: float) -> float:
    value = os.getenv(_FEED_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        feed_homepage_url=_read_str_env(_HOMEPAGE_URL_ENV, DEFAULT_HOMEPAGE_URL),
        feed_path=_read_str_env(_FEED_PATH_ENV, "BikePoint"),
        feed_timeout=_read_timeout(30.0),
        registry_persistence_path=_read_optional_env(
            _REGISTRY_PATH_ENV, "./tmp/registry.json"
        ),
        trigger_secret=_read_str_env(_TRIGGER_SECRET_ENV, "1"),
        log_level=_read_log_level("INFO"),
    )
