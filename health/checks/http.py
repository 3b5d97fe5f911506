# ============================================================================
# HTTP HEALTH CHECK
# ============================================================================
# STATUS: Checks - HTTP endpoint probe
# PURPOSE: Verify a URL answers with a 2xx status
# CREATED: 03 OCT 2026
# ============================================================================
"""
HTTP Health Check

GETs a URL and reports healthy when the status code lies in
[expected_status, 300). There is no distinction between 3xx, 4xx and 5xx:
all of them are unhealthy and carry the numeric code in the message.
"""

from typing import Optional

import httpx

from core.config import HealthDefaults, get_defaults
from core.logging import get_logger
from health.core import HealthCheck, CheckResult
from health import transport

logger = get_logger(__name__)


class HttpCheck(HealthCheck):
    """
    HTTP endpoint health check.

    Args:
        name: Check name
        url: Absolute http(s) URL to GET
        timeout_ms: Request timeout
        expected_status: Inclusive lower bound of the accepted range
        critical: Failure forces readiness to unhealthy
    """

    def __init__(
        self,
        name: str,
        url: str,
        timeout_ms: int = 5000,
        expected_status: int = 200,
        critical: bool = True,
    ):
        super().__init__(name, critical=critical, timeout_ms=timeout_ms)
        if not url:
            raise ValueError(f"HttpCheck {name}: url must be non-empty")
        if not 100 <= expected_status <= 599:
            raise ValueError(
                f"HttpCheck {name}: expected_status {expected_status} is not an HTTP status"
            )
        self.url = url
        self.expected_status = expected_status

    @classmethod
    def from_defaults(
        cls,
        name: str,
        url: str,
        defaults: Optional[HealthDefaults] = None,
        critical: bool = True,
    ) -> "HttpCheck":
        """Build with HEALTH_PROBE_TIMEOUT_MS and HEALTH_EXPECTED_STATUS."""
        defaults = defaults or get_defaults()
        return cls(
            name,
            url,
            timeout_ms=defaults.probe_timeout_ms,
            expected_status=defaults.expected_status,
            critical=critical,
        )

    def _run(self) -> CheckResult:
        try:
            response = transport.http_get(self.url, self.timeout_seconds)
        except httpx.TimeoutException:
            return CheckResult.unhealthy(
                self.name,
                f"HTTP request timed out after {self.timeout_ms}ms",
            )
        except httpx.HTTPError as e:
            return CheckResult.unhealthy(self.name, f"HTTP connection failed: {e}")

        code = response.status_code
        if self.expected_status <= code < 300:
            return CheckResult.healthy(self.name)

        logger.debug(f"Health check {self.name}: {self.url} returned {code}")
        return CheckResult.unhealthy(self.name, f"HTTP {code}")


__all__ = [
    "HttpCheck",
]
