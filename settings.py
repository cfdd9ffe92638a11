from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_STORE_ROOT_ENV = "SENSOR_STORE_ROOT_PATH"
_METADATA_PATH_ENV = "SENSOR_METADATA_PATH"
_TARGET_POINTS_ENV = "SYNTHESIS_TARGET_POINTS"
_SEED_ENV = "SYNTHESIS_SEED"
_SMOOTHING_WINDOW_ENV = "SMOOTHING_WINDOW"
_TIMEZONE_ENV = "DASHBOARD_TIMEZONE"
_INSIGHTS_API_KEY_ENV = "INSIGHTS_API_KEY"
_INSIGHTS_MODEL_ENV = "INSIGHTS_MODEL"
_INSIGHTS_BASE_URL_ENV = "INSIGHTS_BASE_URL"
_INSIGHTS_TIMEOUT_ENV = "INSIGHTS_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_INSIGHTS_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class Settings:
    store_root_path: Optional[str]
    metadata_path: Optional[str]
    synthesis_target_points: int
    synthesis_seed: Optional[int]
    smoothing_window: int
    display_timezone: str
    insights_api_key: Optional[str]
    insights_model: str
    insights_base_url: str
    insights_timeout: float
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


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
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


def _read_seed() -> Optional[int]:
    value = os.getenv(_SEED_ENV)
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


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
        store_root_path=_read_optional_env(_STORE_ROOT_ENV, "./tmp/sensor_files"),
        metadata_path=_read_optional_env(_METADATA_PATH_ENV, "./tmp/file_index.json"),
        synthesis_target_points=_read_positive_int(_TARGET_POINTS_ENV, 140),
        synthesis_seed=_read_seed(),
        smoothing_window=_read_positive_int(_SMOOTHING_WINDOW_ENV, 5),
        display_timezone=_read_str_env(_TIMEZONE_ENV, "UTC"),
        insights_api_key=_read_optional_env(_INSIGHTS_API_KEY_ENV, None),
        insights_model=_read_str_env(_INSIGHTS_MODEL_ENV, "gemini-2.5-flash"),
        insights_base_url=_read_str_env(_INSIGHTS_BASE_URL_ENV, DEFAULT_INSIGHTS_BASE_URL),
        insights_timeout=_read_positive_float(_INSIGHTS_TIMEOUT_ENV, 30.0),
        log_level=_read_log_level("INFO"),
    )
