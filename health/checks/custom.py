# ============================================================================
# CUSTOM HEALTH CHECK
# ============================================================================
# STATUS: Checks - Function-backed probe
# PURPOSE: Let callers express arbitrary checks as (status, message) functions
# CREATED: 03 OCT 2026
# ============================================================================
"""
Custom Health Check

Wraps a function returning a (status, message) pair. Status may be a
HealthStatus or its string value ("healthy", "degraded", "unhealthy").
"""

from typing import Callable, Tuple, Union

from health.core import HealthCheck, CheckResult, HealthStatus

StatusLike = Union[HealthStatus, str]


class CustomCheck(HealthCheck):
    """
    Health check backed by a status-returning function.

    Example:
        def disk_space():
            free = shutil.disk_usage("/").free
            if free < 1 << 30:
                return HealthStatus.DEGRADED, "less than 1GB free"
            return HealthStatus.HEALTHY, ""

        checker.register(CustomCheck("disk", disk_space, critical=False))
    """

    def __init__(
        self,
        name: str,
        fn: Callable[[], Tuple[StatusLike, str]],
        critical: bool = True,
    ):
        super().__init__(name, critical=critical)
        if not callable(fn):
            raise ValueError(f"CustomCheck {name}: fn must be callable")
        self.fn = fn

    def _run(self) -> CheckResult:
        status, message = self.fn()
        try:
            status = HealthStatus(status)
        except ValueError:
            return CheckResult.unhealthy(
                self.name,
                f"Check returned invalid status {status!r}",
            )
        return CheckResult(name=self.name, status=status, message=message or "")


__all__ = [
    "CustomCheck",
]
