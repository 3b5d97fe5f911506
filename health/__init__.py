# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# STATUS: Public API - Process and downstream health aggregation
# PURPOSE: Kubernetes probes, downstream service health, startup gating
# CREATED: 02 OCT 2026
# ============================================================================
"""
Health Check Module

Process-health aggregation for orchestrated services:
- HealthChecker: registry of checks, liveness() and readiness()
- HealthAggregator: downstream services with cached probe results
- DependencyChecker: bounded-retry startup gate
- create_health_router: FastAPI /livez, /readyz, /health/services

Usage:
    from health import HealthChecker, PingCheck, HttpCheck, create_health_router

    checker = HealthChecker("gateway", "1.0.0")
    checker.register(PingCheck("redis", redis_client.ping))
    checker.register(HttpCheck("search", "http://search:9200/", critical=False))

    app.include_router(create_health_router(checker))
"""

from health.core import (
    HealthStatus,
    CheckResult,
    HealthCheck,
    escalate,
    combine,
)
from health.checks import (
    PingCheck,
    HttpCheck,
    TcpCheck,
    CustomCheck,
)
from health.checker import (
    HealthChecker,
    LivenessReport,
    ReadinessReport,
)
from health.aggregator import (
    HealthAggregator,
    ServiceHealth,
    AggregateReport,
)
from health.dependencies import DependencyChecker
from health.router import create_health_router

__all__ = [
    # Core types
    "HealthStatus",
    "CheckResult",
    "HealthCheck",
    "escalate",
    "combine",
    # Checks
    "PingCheck",
    "HttpCheck",
    "TcpCheck",
    "CustomCheck",
    # Checker
    "HealthChecker",
    "LivenessReport",
    "ReadinessReport",
    # Aggregator
    "HealthAggregator",
    "ServiceHealth",
    "AggregateReport",
    # Startup gate
    "DependencyChecker",
    # Router
    "create_health_router",
]
