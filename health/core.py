# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# STATUS: Core - Status model and check contract
# PURPOSE: Health status values, fold rules, result record and check base
# CREATED: 02 OCT 2026
# ============================================================================
"""
Health Check Core Types

Defines the status model, the two fold rules shared by the checker and the
aggregator, the single-result record and the check contract.

Status Hierarchy (worst wins):
- healthy: All systems operational
- degraded: Operational with warnings (non-critical failures)
- unhealthy: Critical failure (blocks traffic)

Fold rules:
- escalate(): readiness fold, weights each source by criticality. A
  non-critical unhealthy source degrades instead of failing.
- combine(): aggregator fold, every source equally weighted.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from core.logging import get_logger, ComponentType

logger = get_logger(__name__, ComponentType.CHECK)


def utcnow() -> datetime:
    """Timezone-aware UTC now, used for every timestamp in the package."""
    return datetime.now(timezone.utc)


_SEVERITY = {"healthy": 0, "degraded": 1, "unhealthy": 2}


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self.value]

    def __lt__(self, other: "HealthStatus") -> bool:
        """Enable comparison for 'worst wins' aggregation."""
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity < other.severity

    def __gt__(self, other: "HealthStatus") -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity > other.severity

    def __le__(self, other: "HealthStatus") -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity <= other.severity

    def __ge__(self, other: "HealthStatus") -> bool:
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.severity >= other.severity

    @property
    def http_code(self) -> int:
        """Map health status to HTTP status code."""
        return {
            HealthStatus.HEALTHY: 200,
            HealthStatus.DEGRADED: 206,  # Partial Content
            HealthStatus.UNHEALTHY: 503,  # Service Unavailable
        }[self]

    @classmethod
    def aggregate(cls, statuses: List["HealthStatus"]) -> "HealthStatus":
        """Aggregate multiple statuses (worst wins)."""
        overall = cls.HEALTHY
        for status in statuses:
            overall = combine(overall, status)
        return overall


def escalate(
    current: HealthStatus,
    incoming: HealthStatus,
    is_critical: bool,
) -> HealthStatus:
    """
    Fold one check outcome into the running readiness status.

    Critical unhealthy -> unhealthy. Non-critical unhealthy -> degraded,
    unless already unhealthy. Degraded raises healthy to degraded.
    Healthy never changes the running status.
    """
    if incoming == HealthStatus.UNHEALTHY:
        if is_critical:
            return HealthStatus.UNHEALTHY
        if current == HealthStatus.UNHEALTHY:
            return current
        return HealthStatus.DEGRADED
    if incoming == HealthStatus.DEGRADED and current == HealthStatus.HEALTHY:
        return HealthStatus.DEGRADED
    return current


def combine(overall: HealthStatus, service_status: HealthStatus) -> HealthStatus:
    """Fold one equally weighted status into the running overall status."""
    if service_status == HealthStatus.UNHEALTHY:
        return HealthStatus.UNHEALTHY
    if service_status == HealthStatus.DEGRADED and overall != HealthStatus.UNHEALTHY:
        return HealthStatus.DEGRADED
    return overall


@dataclass
class CheckResult:
    """
    Result from a single check invocation.

    Created once per invocation. Only latency_ms may be overwritten
    afterwards, by whoever timed the invocation.
    """
    name: str
    status: HealthStatus
    message: str = ""
    latency_ms: float = 0.0
    timestamp: datetime = field(default_factory=utcnow)

    @classmethod
    def healthy(cls, name: str, message: str = "") -> "CheckResult":
        """Create healthy result."""
        return cls(name=name, status=HealthStatus.HEALTHY, message=message)

    @classmethod
    def degraded(cls, name: str, message: str) -> "CheckResult":
        """Create degraded result."""
        return cls(name=name, status=HealthStatus.DEGRADED, message=message)

    @classmethod
    def unhealthy(cls, name: str, message: str) -> "CheckResult":
        """Create unhealthy result."""
        return cls(name=name, status=HealthStatus.UNHEALTHY, message=message)

    @classmethod
    def from_exception(cls, name: str, e: Exception) -> "CheckResult":
        """Create unhealthy result from exception."""
        detail = str(e) or "no detail"
        return cls(
            name=name,
            status=HealthStatus.UNHEALTHY,
            message=f"{type(e).__name__}: {detail}",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
        }
        if self.message:
            result["message"] = self.message
        result["latency_ms"] = round(self.latency_ms, 2)
        return result


class HealthCheck(ABC):
    """
    Base class for health checks.

    Subclass and implement _run() to create a check. Callers use check(),
    which never raises: any exception from _run() becomes an unhealthy
    result, and latency covers failure paths too.

    Attributes:
        name: Unique identifier within one HealthChecker
        critical: If True, failure forces readiness to unhealthy;
                  otherwise it only degrades it
        timeout_ms: Probe timeout, honoured by network-backed variants

    Example:
        class QueueDepthCheck(HealthCheck):
            def _run(self) -> CheckResult:
                if queue.depth() > 10_000:
                    return CheckResult.degraded(self.name, "queue backlog")
                return CheckResult.healthy(self.name)
    """

    def __init__(self, name: str, critical: bool = True, timeout_ms: int = 5000):
        if not name:
            raise ValueError("Health check name must be non-empty")
        if timeout_ms < 0:
            raise ValueError("timeout_ms must be >= 0")
        self.name = name
        self.critical = critical
        self.timeout_ms = timeout_ms

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def is_critical(self) -> bool:
        return self.critical

    @abstractmethod
    def _run(self) -> CheckResult:
        """
        Execute the probe.

        May raise; check() converts exceptions to unhealthy results.
        """

    def check(self) -> CheckResult:
        """Run the probe and return its result. Never raises."""
        start_time = time.monotonic()
        try:
            result = self._run()
        except Exception as e:
            logger.warning(f"Health check {self.name} raised: {e}")
            result = CheckResult.from_exception(self.name, e)

        # Results are keyed by the owning check's name
        result.name = self.name
        result.latency_ms = (time.monotonic() - start_time) * 1000
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"critical={self.critical})"
        )


__all__ = [
    "HealthStatus",
    "CheckResult",
    "HealthCheck",
    "escalate",
    "combine",
    "utcnow",
]
