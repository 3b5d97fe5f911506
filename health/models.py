# ============================================================================
# HEALTH RESPONSE MODELS
# ============================================================================
# STATUS: API - Response schemas for health endpoints
# PURPOSE: Pydantic models for the liveness/readiness/services contract
# CREATED: 07 OCT 2026
# ============================================================================
"""
Health Response Models

Pydantic models for the HTTP surface. The report dataclasses in
health.checker and health.aggregator produce plain dicts; these models
validate them and document the schema in OpenAPI.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from health.core import HealthStatus


class LivenessResponse(BaseModel):
    """Liveness probe body. Status is always healthy."""

    status: HealthStatus = Field(
        default=HealthStatus.HEALTHY,
        description="Always 'healthy' while the process responds",
    )
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")


class CheckReport(BaseModel):
    """One check outcome inside a readiness response."""

    name: str = Field(..., description="Check name")
    status: HealthStatus
    message: Optional[str] = Field(
        default=None,
        description="Failure detail; omitted when empty",
    )
    latency_ms: float = Field(..., ge=0, description="Check invocation time")


class ReadinessResponse(BaseModel):
    """Readiness probe body."""

    status: HealthStatus
    service: str
    version: str
    checks: List[CheckReport] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "degraded",
                "service": "gateway",
                "version": "1.0.0",
                "checks": [
                    {"name": "redis", "status": "healthy", "latency_ms": 1.2},
                    {
                        "name": "search",
                        "status": "unhealthy",
                        "message": "HTTP 503",
                        "latency_ms": 12.8,
                    },
                ],
            }
        }
    }


class ServiceReport(BaseModel):
    """Most recent probe outcome for one downstream service."""

    status: HealthStatus
    latency_ms: float = Field(..., ge=0)
    message: str = ""


class AggregateResponse(BaseModel):
    """Aggregated downstream service health."""

    overall: HealthStatus
    healthy: int = Field(..., ge=0, description="Services currently healthy")
    total: int = Field(..., ge=0, description="Services registered")
    services: Dict[str, ServiceReport] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "example": {
                "overall": "unhealthy",
                "healthy": 2,
                "total": 3,
                "services": {
                    "orders": {"status": "healthy", "latency_ms": 4.1, "message": ""},
                    "billing": {"status": "unhealthy", "latency_ms": 5000.3,
                                "message": "Timeout after 5000ms"},
                    "users": {"status": "healthy", "latency_ms": 3.7, "message": ""},
                },
            }
        }
    }


__all__ = [
    "LivenessResponse",
    "CheckReport",
    "ReadinessResponse",
    "ServiceReport",
    "AggregateResponse",
]
