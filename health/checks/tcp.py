# ============================================================================
# TCP HEALTH CHECK
# ============================================================================
# STATUS: Checks - TCP connect probe
# PURPOSE: Verify a host:port accepts connections
# CREATED: 03 OCT 2026
# ============================================================================
"""
TCP Health Check

Opens and immediately closes a TCP connection. A successful connect is
healthy; a refused or unreachable target is unhealthy with the errno.
"""

from typing import Optional

from core.config import HealthDefaults, get_defaults
from health.core import HealthCheck, CheckResult
from health import transport


class TcpCheck(HealthCheck):
    """
    TCP connectivity health check.

    The address is "host:port". A bare host (or anything that is not
    exactly one host/port pair) probes port 80.
    """

    def __init__(
        self,
        name: str,
        address: str,
        timeout_ms: int = 5000,
        critical: bool = True,
    ):
        super().__init__(name, critical=critical, timeout_ms=timeout_ms)
        if not address:
            raise ValueError(f"TcpCheck {name}: address must be non-empty")
        self.address = address
        self.host, self.port = transport.parse_address(address)

    @classmethod
    def from_defaults(
        cls,
        name: str,
        address: str,
        defaults: Optional[HealthDefaults] = None,
        critical: bool = True,
    ) -> "TcpCheck":
        """Build with HEALTH_PROBE_TIMEOUT_MS."""
        defaults = defaults or get_defaults()
        return cls(name, address, timeout_ms=defaults.probe_timeout_ms, critical=critical)

    def _run(self) -> CheckResult:
        try:
            code = transport.tcp_connect(self.host, self.port, self.timeout_seconds)
        except TimeoutError:
            return CheckResult.unhealthy(
                self.name,
                f"TCP connection timed out after {self.timeout_ms}ms",
            )
        if code == 0:
            return CheckResult.healthy(self.name)
        return CheckResult.unhealthy(self.name, f"TCP connection failed: error {code}")


__all__ = [
    "TcpCheck",
]
