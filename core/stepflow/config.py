"""Shared engine configuration utilities.

Centralises reading of ~/.stepflow/configuration.json so the worker and the
tests share one implementation. Environment variables override the file.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Low-level config file access
# ---------------------------------------------------------------------------

STEPFLOW_CONFIG_FILE = Path.home() / ".stepflow" / "configuration.json"

DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_RETRY_INTERVAL = 2.0
DEFAULT_RETRY_EXPONENTIAL = 2.0
DEFAULT_RETRY_MAX_DELAY = 60.0


def get_stepflow_config() -> dict[str, Any]:
    """Load configuration from ~/.stepflow/configuration.json."""
    if not STEPFLOW_CONFIG_FILE.exists():
        return {}
    try:
        with open(STEPFLOW_CONFIG_FILE, encoding="utf-8-sig") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}


def _setting(section: str, key: str, env_var: str, default: Any, cast: type) -> Any:
    raw = os.environ.get(env_var)
    if raw is None:
        raw = get_stepflow_config().get(section, {}).get(key)
    if raw is None:
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Derived helpers
# ---------------------------------------------------------------------------


def get_retry_max_attempts() -> int:
    return _setting("retry", "max_attempts", "STEPFLOW_RETRY_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, int)


def get_retry_interval() -> float:
    """Base retry interval in seconds."""
    return _setting("retry", "interval", "STEPFLOW_RETRY_INTERVAL", DEFAULT_RETRY_INTERVAL, float)


def get_retry_exponential() -> float:
    return _setting(
        "retry", "exponential", "STEPFLOW_RETRY_EXPONENTIAL", DEFAULT_RETRY_EXPONENTIAL, float
    )


def get_retry_max_delay() -> float:
    return _setting("retry", "max_delay", "STEPFLOW_RETRY_MAX_DELAY", DEFAULT_RETRY_MAX_DELAY, float)


def get_log_level() -> str:
    return _setting("logging", "level", "STEPFLOW_LOG_LEVEL", "INFO", str)


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryConfig:
    """Backoff settings for retryable step failures."""

    max_attempts: int = field(default_factory=get_retry_max_attempts)
    retry_interval: float = field(default_factory=get_retry_interval)
    retry_exponential: float = field(default_factory=get_retry_exponential)
    max_delay: float = field(default_factory=get_retry_max_delay)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before re-running after failed attempt number ``attempt`` (1-based)."""
        return min(self.retry_interval * (self.retry_exponential**attempt), self.max_delay)

