# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# STATUS: API - FastAPI health endpoints
# PURPOSE: Expose liveness, readiness and downstream service health
# CREATED: 07 OCT 2026
# ============================================================================
"""
Health Check Router

FastAPI router factory exposing a HealthChecker (and optionally a
HealthAggregator) over HTTP.

Endpoints:
    GET /livez   - Liveness probe (is the process alive?)
                   Always 200. Runs no checks.

    GET /readyz  - Readiness probe (can we accept traffic?)
                   Runs every registered check.

    GET /health/services        - Re-probe all downstream services
    GET /health/services/{name} - Cached single-service record

Response Codes:
    200 - Healthy
    206 - Degraded (partial content)
    503 - Unhealthy (service unavailable)
    404 - Unknown service name

Endpoints are sync functions: FastAPI runs them in its threadpool, so the
blocking probes do not stall the event loop.
"""

from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.logging import get_logger, ComponentType
from health.aggregator import HealthAggregator
from health.checker import HealthChecker
from health.core import HealthStatus
from health.models import (
    AggregateResponse,
    LivenessResponse,
    ReadinessResponse,
    ServiceReport,
)

logger = get_logger(__name__, ComponentType.API)


def _log_unavailable(path: str, status: HealthStatus, failing: List[str]) -> None:
    if status.http_code == 503:
        logger.warning(f"{path} returning 503, unhealthy: {', '.join(failing)}")


def create_health_router(
    checker: HealthChecker,
    aggregator: Optional[HealthAggregator] = None,
) -> APIRouter:
    """
    Build a router bound to the given checker and aggregator.

    Args:
        checker: Process check registry backing /livez and /readyz
        aggregator: Downstream services backing /health/services;
                    those routes are omitted when None
    """
    router = APIRouter(tags=["Health"])

    # ========================================================================
    # LIVENESS PROBE
    # ========================================================================

    @router.get("/livez", response_model=LivenessResponse)
    def liveness_probe():
        """
        Kubernetes liveness probe.

        No checks run here: a process with unreachable dependencies must
        stay alive (not restarted) while readiness keeps it out of rotation.
        """
        return LivenessResponse(**checker.liveness().to_dict())

    # ========================================================================
    # READINESS PROBE
    # ========================================================================

    @router.get("/readyz", response_model=ReadinessResponse)
    def readiness_probe():
        """Kubernetes readiness probe."""
        report = checker.readiness()
        _log_unavailable(
            "/readyz",
            report.status,
            [r.name for r in report.checks if r.status == HealthStatus.UNHEALTHY],
        )
        body = ReadinessResponse(**report.to_dict())
        return JSONResponse(
            status_code=report.status.http_code,
            content=body.model_dump(mode="json", exclude_none=True),
        )

    if aggregator is None:
        return router

    # ========================================================================
    # DOWNSTREAM SERVICES
    # ========================================================================

    @router.get("/health/services", response_model=AggregateResponse)
    def services_health():
        """Re-probe every registered downstream service."""
        report = aggregator.check_all()
        _log_unavailable(
            "/health/services",
            report.overall,
            [n for n, s in report.services.items() if s.status == HealthStatus.UNHEALTHY],
        )
        body = AggregateResponse(**report.to_dict())
        return JSONResponse(
            status_code=report.overall.http_code,
            content=body.model_dump(mode="json"),
        )

    @router.get("/health/services/{name}", response_model=ServiceReport)
    def service_health(name: str):
        """Cached health of one downstream service."""
        if name not in aggregator:
            return JSONResponse(
                status_code=404,
                content={"error": f"Service not registered: {name}"},
            )

        service = aggregator.get_cached(name)
        body = ServiceReport(**service.to_dict())
        return JSONResponse(
            status_code=service.status.http_code,
            content=body.model_dump(mode="json"),
        )

    return router


__all__ = [
    "create_health_router",
]
