# ============================================================================
# SERVICE HEALTH AGGREGATOR
# ============================================================================
# STATUS: Core - Downstream service health with cached probes
# PURPOSE: Track named downstream services for gateway-style components
# CREATED: 05 OCT 2026
# ============================================================================
"""
Service Health Aggregator

Keeps one ServiceHealth record per registered downstream service and
folds them into an overall status. Every service is weighted equally:
any unhealthy service makes the whole set unhealthy.

Two read paths:
- check_all(): re-probes everything, bypassing the cache.
- get_cached() / is_all_healthy(): re-probe only when the stored record
  is stale, which bounds probe traffic under repeated readiness polling.

A record is stale when it has never been checked, or when its age
exceeds cache_duration_ms.

Usage:
    aggregator = HealthAggregator(check_timeout_ms=2000)
    aggregator.register("orders", "http://orders:8080/livez")
    aggregator.register("billing", "http://billing:8080/livez")

    report = aggregator.check_all()
    report.overall, report.healthy, report.total
"""

import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from core.config import HealthDefaults, get_defaults
from core.logging import get_logger, log_context, ComponentType
from health.core import HealthStatus, combine, utcnow
from health.transport import probe_service_url

logger = get_logger(__name__, ComponentType.AGGREGATOR)

NOT_REGISTERED_MESSAGE = "Service not registered"

# (url, timeout_seconds) -> (status, message)
ServiceProbe = Callable[[str, float], Tuple[HealthStatus, str]]


@dataclass
class ServiceHealth:
    """Most recent probe outcome for one downstream service."""
    name: str
    url: str
    status: HealthStatus = HealthStatus.HEALTHY
    last_check_time: Optional[datetime] = None
    latency_ms: float = 0.0
    message: str = ""
    # time.monotonic() at the last check; staleness is measured against this
    checked_monotonic: Optional[float] = field(default=None, repr=False)

    @property
    def checked(self) -> bool:
        return self.last_check_time is not None

    def is_stale(self, cache_duration_ms: float, now: Optional[float] = None) -> bool:
        """
        Never-checked records are always stale.

        now is a time.monotonic() reading, so wall-clock steps do not
        change the answer.
        """
        if self.checked_monotonic is None:
            return True
        if now is None:
            now = time.monotonic()
        return (now - self.checked_monotonic) * 1000 > cache_duration_ms

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
            "message": self.message,
        }


@dataclass
class AggregateReport:
    """Overall status across all registered services."""
    overall: HealthStatus
    healthy: int
    total: int
    services: Dict[str, ServiceHealth] = field(default_factory=dict)
    checked_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "overall": self.overall.value,
            "healthy": self.healthy,
            "total": self.total,
            "services": {
                name: service.to_dict()
                for name, service in self.services.items()
            },
        }


def _coerce_status(raw: Any) -> Optional[HealthStatus]:
    """HealthStatus for raw (enum or its string value), None if unrecognised."""
    try:
        return HealthStatus(raw)
    except ValueError:
        return None


def _not_registered(name: str) -> ServiceHealth:
    return ServiceHealth(
        name=name,
        url="",
        status=HealthStatus.UNHEALTHY,
        message=NOT_REGISTERED_MESSAGE,
    )


class HealthAggregator:
    """
    Registry of downstream services with cached health records.

    Args:
        check_timeout_ms: Per-probe timeout
        cache_duration_ms: Staleness window for get_cached()
        probe: Callable (url, timeout_seconds) -> (status, message);
               defaults to an HTTP GET of the service URL
    """

    def __init__(
        self,
        check_timeout_ms: int = 5000,
        cache_duration_ms: int = 10000,
        probe: Optional[ServiceProbe] = None,
    ):
        if check_timeout_ms < 0:
            raise ValueError("check_timeout_ms must be >= 0")
        if cache_duration_ms < 0:
            raise ValueError("cache_duration_ms must be >= 0")
        self.check_timeout_ms = check_timeout_ms
        self.cache_duration_ms = cache_duration_ms
        self._probe = probe or probe_service_url
        self._services: Dict[str, ServiceHealth] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_defaults(
        cls,
        defaults: Optional[HealthDefaults] = None,
        probe: Optional[ServiceProbe] = None,
    ) -> "HealthAggregator":
        defaults = defaults or get_defaults()
        return cls(
            check_timeout_ms=defaults.check_timeout_ms,
            cache_duration_ms=defaults.cache_duration_ms,
            probe=probe,
        )

    # ------------------------------------------------------------------
    # REGISTRY
    # ------------------------------------------------------------------

    def register(self, name: str, url: str) -> None:
        """Insert or replace a service. Replacing discards its cached status."""
        with self._lock:
            if name in self._services:
                logger.info(f"Re-registering service {name}, cached status dropped")
            self._services[name] = ServiceHealth(name=name, url=url)

    def unregister(self, name: str) -> None:
        """Remove a service. No-op if absent."""
        with self._lock:
            self._services.pop(name, None)

    def get(self, name: str) -> Optional[ServiceHealth]:
        """Stored record for name, without probing."""
        with self._lock:
            return self._services.get(name)

    @property
    def services(self) -> List[str]:
        with self._lock:
            return list(self._services)

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, name: str) -> bool:
        return name in self._services

    # ------------------------------------------------------------------
    # PROBING
    # ------------------------------------------------------------------

    def check_service(self, name: str) -> ServiceHealth:
        """
        Probe one service and update its record in place.

        Unknown names get a synthetic unhealthy record and leave the
        aggregator untouched. Never raises.
        """
        service = self.get(name)
        if service is None:
            return _not_registered(name)

        timeout_s = self.check_timeout_ms / 1000.0
        start_time = time.monotonic()

        with log_context(target=name, operation="check_service"):
            try:
                raw_status, message = self._probe(service.url, timeout_s)
                status = _coerce_status(raw_status)
                if status is None:
                    status = HealthStatus.UNHEALTHY
                    message = f"Health endpoint returned invalid status {raw_status!r}"
            except httpx.TimeoutException:
                status = HealthStatus.UNHEALTHY
                message = f"Timeout after {self.check_timeout_ms}ms"
            except httpx.HTTPError as e:
                status = HealthStatus.UNHEALTHY
                message = f"Cannot connect to service: {e}"
            except Exception as e:
                status = HealthStatus.UNHEALTHY
                message = f"Health probe error: {type(e).__name__}: {e}"

            finished = time.monotonic()
            latency_ms = (finished - start_time) * 1000

            service.status = status
            service.message = message or ""
            service.latency_ms = latency_ms
            service.last_check_time = utcnow()
            service.checked_monotonic = finished

            if status != HealthStatus.HEALTHY:
                logger.warning(
                    f"Service {name} {status.value}: {service.message}"
                )
            else:
                logger.debug(f"Service {name} healthy ({latency_ms:.1f}ms)")

        return service

    def check_all(self) -> AggregateReport:
        """Re-probe every service, ignoring the cache, and fold the results."""
        overall = HealthStatus.HEALTHY
        healthy = 0
        details: Dict[str, ServiceHealth] = {}

        for name in self.services:
            service = replace(self.check_service(name))
            details[name] = service
            if service.status == HealthStatus.HEALTHY:
                healthy += 1
            overall = combine(overall, service.status)

        return AggregateReport(
            overall=overall,
            healthy=healthy,
            total=len(details),
            services=details,
        )

    def get_cached(self, name: str) -> ServiceHealth:
        """Stored record if fresh, otherwise a new probe."""
        service = self.get(name)
        if service is None:
            return _not_registered(name)

        if service.is_stale(self.cache_duration_ms):
            return self.check_service(name)
        return service

    def is_all_healthy(self) -> bool:
        """Cached check of every service; stops at the first non-healthy one."""
        for name in self.services:
            if self.get_cached(name).status != HealthStatus.HEALTHY:
                return False
        return True


__all__ = [
    "ServiceHealth",
    "AggregateReport",
    "HealthAggregator",
    "NOT_REGISTERED_MESSAGE",
]
