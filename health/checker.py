# ============================================================================
# HEALTH CHECKER
# ============================================================================
# STATUS: Core - Per-process check registry and liveness/readiness
# PURPOSE: Run registered checks and fold them into one readiness status
# CREATED: 04 OCT 2026
# ============================================================================
"""
Health Checker

Owns the ordered check registry for one process and produces the two
orchestrator signals:

- liveness(): process alive. Never runs a check, so a failing dependency
  cannot get a healthy process restarted.
- readiness(): traffic eligibility. Runs every check sequentially in
  registration order and folds the outcomes.

Readiness fold:
1. Start healthy, no critical failure seen.
2. Each result is folded with escalate(); a critical unhealthy result
   also sets the critical-failure flag.
3. After the loop, a critical failure forces unhealthy.

Usage:
    checker = HealthChecker("gateway", "1.0.0")
    checker.register(PingCheck("redis", redis.ping))
    checker.register(HttpCheck("search", "http://search:9200/", critical=False))

    report = checker.readiness()
    report.status          # HealthStatus
    report.to_dict()       # JSON body
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.config import HealthDefaults, get_defaults
from core.logging import get_logger, log_context, ComponentType
from health.core import (
    HealthStatus,
    CheckResult,
    HealthCheck,
    escalate,
    utcnow,
)

logger = get_logger(__name__, ComponentType.CHECKER)


@dataclass
class LivenessReport:
    """Static identity plus a fixed healthy status."""
    service: str
    version: str
    status: HealthStatus = HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "service": self.service,
            "version": self.version,
        }


@dataclass
class ReadinessReport:
    """Folded readiness status with the individual results in check order."""
    status: HealthStatus
    service: str
    version: str
    checks: List[CheckResult] = field(default_factory=list)
    checked_at: datetime = field(default_factory=utcnow)

    @property
    def is_ready(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "status": self.status.value,
            "service": self.service,
            "version": self.version,
            "checks": [result.to_dict() for result in self.checks],
        }


class HealthChecker:
    """
    Check registry and readiness evaluator for one process.

    Registration is guarded by a lock so that FastAPI's threadpool can
    serve readiness while checks are added or removed; evaluation runs on
    a snapshot of the registry.
    """

    def __init__(self, service_name: str, version: str):
        self.service_name = service_name
        self.version = version
        self._checks: List[HealthCheck] = []
        self._lock = threading.Lock()
        self.last_checked: Optional[datetime] = None

    @classmethod
    def from_defaults(cls, defaults: Optional[HealthDefaults] = None) -> "HealthChecker":
        """Build a checker whose identity comes from SERVICE_NAME / APP_VERSION."""
        defaults = defaults or get_defaults()
        return cls(defaults.service_name, defaults.version)

    # ------------------------------------------------------------------
    # REGISTRY
    # ------------------------------------------------------------------

    def register(self, check: HealthCheck) -> None:
        """
        Append a check. Registration order is readiness output order.

        Names should be unique; a duplicate is kept but logged, and
        unregister() removes every check with that name.
        """
        with self._lock:
            if any(c.name == check.name for c in self._checks):
                logger.warning(f"Duplicate health check name: {check.name}")
            self._checks.append(check)
        logger.debug(
            f"Registered health check: {check.name} (critical={check.is_critical()})"
        )

    def unregister(self, name: str) -> int:
        """
        Remove every check with the given name.

        Returns:
            Number of checks removed (0 if none matched)
        """
        with self._lock:
            before = len(self._checks)
            self._checks = [c for c in self._checks if c.name != name]
            removed = before - len(self._checks)
        if removed:
            logger.debug(f"Unregistered health check: {name}")
        return removed

    def get(self, name: str) -> Optional[HealthCheck]:
        """Get the first check registered under name."""
        with self._lock:
            for check in self._checks:
                if check.name == name:
                    return check
        return None

    @property
    def checks(self) -> List[HealthCheck]:
        """Snapshot of registered checks in registration order."""
        with self._lock:
            return list(self._checks)

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    # ------------------------------------------------------------------
    # PROBES
    # ------------------------------------------------------------------

    def liveness(self) -> LivenessReport:
        """Report process identity. Runs no checks."""
        return LivenessReport(service=self.service_name, version=self.version)

    def readiness(self) -> ReadinessReport:
        """Run every check in registration order and fold the results."""
        overall = HealthStatus.HEALTHY
        has_critical_failure = False
        results: List[CheckResult] = []

        with log_context(service=self.service_name, operation="readiness"):
            for check in self.checks:
                result = self._run_check(check)
                results.append(result)

                critical = check.is_critical()
                if result.status == HealthStatus.UNHEALTHY and critical:
                    has_critical_failure = True
                overall = escalate(overall, result.status, critical)

            # Critical failures always win, whatever was folded above
            if has_critical_failure:
                overall = HealthStatus.UNHEALTHY

            if overall != HealthStatus.HEALTHY:
                failing = [r.name for r in results if r.status != HealthStatus.HEALTHY]
                logger.warning(
                    f"Readiness {overall.value}: {', '.join(failing)}"
                )

        report = ReadinessReport(
            status=overall,
            service=self.service_name,
            version=self.version,
            checks=results,
        )
        self.last_checked = report.checked_at
        return report

    def is_ready(self) -> bool:
        """
        Run readiness and report whether it is exactly healthy.

        Degraded counts as not ready.
        """
        return self.readiness().status == HealthStatus.HEALTHY

    def _run_check(self, check: HealthCheck) -> CheckResult:
        """Invoke one check, timing it and containing contract violations."""
        start_time = time.monotonic()

        with log_context(check=check.name):
            try:
                result = check.check()
            except Exception as e:
                # check() must not raise; treat a broken variant as failed
                logger.error(f"Health check {check.name} violated contract: {e}")
                result = CheckResult.from_exception(check.name, e)

            result.latency_ms = (time.monotonic() - start_time) * 1000

            logger.debug(
                f"Health check {check.name}: {result.status.value} "
                f"({result.latency_ms:.1f}ms)"
            )

        return result


__all__ = [
    "HealthChecker",
    "LivenessReport",
    "ReadinessReport",
]
