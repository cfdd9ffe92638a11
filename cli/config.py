from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 60.0

_BASE_URL_ENV = "API_BASE_URL"
_TIMEOUT_ENV = "CLI_REQUEST_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def _normalize_base_url(value: str) -> str:
    url = value.strip().rstrip("/")
    if "://" not in url:
        url = f"http://{url}"
    return url


def _read_timeout(value: Optional[str]) -> float:
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT
    try:
        parsed = float(value.strip())
    except ValueError:
        return DEFAULT_TIMEOUT
    return parsed if parsed > 0 else DEFAULT_TIMEOUT


def load_config(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    """Resolve CLI settings; explicit options win over environment variables."""
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if timeout is None or timeout <= 0:
        timeout = _read_timeout(os.getenv(_TIMEOUT_ENV))
    return CLIConfig(base_url=_normalize_base_url(url), timeout=timeout)
