# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for probe timeouts, caching and retries
# CREATED: 02 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for health checks, the service aggregator and the
dependency gate. These can be overridden via environment variables or
explicit constructor arguments.

Environment variables:
    HEALTH_CHECK_TIMEOUT_MS    Aggregator per-probe timeout (5000)
    HEALTH_CACHE_DURATION_MS   Aggregator staleness window (10000)
    HEALTH_PROBE_TIMEOUT_MS    Built-in probe timeout (5000)
    HEALTH_EXPECTED_STATUS     HTTP probe lower bound of the 2xx range (200)
    HEALTH_RETRY_COUNT         Dependency gate attempts (3)
    HEALTH_RETRY_DELAY_MS      Dependency gate delay between attempts (1000)
    SERVICE_NAME / APP_VERSION Identity reported by liveness/readiness
"""

import os
from dataclasses import dataclass
from typing import Optional

from __version__ import __version__


def _env_int(name: str, default: int) -> int:
    """Read an integer env var, naming the variable when it is not a number."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class HealthDefaults:
    """
    Defaults for health evaluation.

    Durations are milliseconds throughout.
    """
    # Aggregator
    check_timeout_ms: int = 5000
    cache_duration_ms: int = 10000

    # Built-in probes
    probe_timeout_ms: int = 5000
    expected_status: int = 200

    # Dependency gate
    retry_count: int = 3
    retry_delay_ms: int = 1000

    # Identity
    service_name: str = "service"
    version: str = __version__

    def __post_init__(self):
        for field_name in (
            "check_timeout_ms",
            "cache_duration_ms",
            "probe_timeout_ms",
            "retry_delay_ms",
        ):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be >= 0")

    @classmethod
    def from_env(cls) -> "HealthDefaults":
        """Create from environment variables."""
        return cls(
            check_timeout_ms=_env_int("HEALTH_CHECK_TIMEOUT_MS", 5000),
            cache_duration_ms=_env_int("HEALTH_CACHE_DURATION_MS", 10000),
            probe_timeout_ms=_env_int("HEALTH_PROBE_TIMEOUT_MS", 5000),
            expected_status=_env_int("HEALTH_EXPECTED_STATUS", 200),
            retry_count=_env_int("HEALTH_RETRY_COUNT", 3),
            retry_delay_ms=_env_int("HEALTH_RETRY_DELAY_MS", 1000),
            service_name=os.getenv("SERVICE_NAME", "service"),
            version=os.getenv("APP_VERSION", __version__),
        )


# Global defaults singleton
_defaults: Optional[HealthDefaults] = None


def get_defaults() -> HealthDefaults:
    """Get the global defaults, loaded from the environment on first use."""
    global _defaults
    if _defaults is None:
        _defaults = HealthDefaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Drop the cached defaults so the next get_defaults() re-reads env."""
    global _defaults
    _defaults = None


__all__ = [
    "HealthDefaults",
    "get_defaults",
    "reset_defaults",
]
