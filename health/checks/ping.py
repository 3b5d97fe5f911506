# ============================================================================
# PING HEALTH CHECK
# ============================================================================
# STATUS: Checks - Boolean ping probe
# PURPOSE: Wrap a client's ping() style function as a health check
# CREATED: 03 OCT 2026
# ============================================================================
"""
Ping Health Check

Wraps any zero-argument callable returning a bool, typically a client's
ping() method (Redis, database pool, message broker).
"""

from typing import Callable

from health.core import HealthCheck, CheckResult


class PingCheck(HealthCheck):
    """
    Health check backed by a boolean ping function.

    True is healthy, False is unhealthy. Exceptions are converted to
    unhealthy results by HealthCheck.check().

    Example:
        checker.register(PingCheck("redis", redis_client.ping))
    """

    def __init__(
        self,
        name: str,
        ping_fn: Callable[[], bool],
        critical: bool = True,
    ):
        super().__init__(name, critical=critical)
        if not callable(ping_fn):
            raise ValueError(f"PingCheck {name}: ping_fn must be callable")
        self.ping_fn = ping_fn

    def _run(self) -> CheckResult:
        if self.ping_fn():
            return CheckResult.healthy(self.name)
        return CheckResult.unhealthy(self.name, "ping returned false")


__all__ = [
    "PingCheck",
]
