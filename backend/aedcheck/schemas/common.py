"""
AEDCheck Backend — Shared Response Schemas
===========================================

What:  Error and health payloads shared by every router.
Why:   Clients need one error shape to parse programmatically.

Error example:
    {
        "error": "permission_denied",
        "message": "요청한 지역은 조회 권한 범위를 벗어났습니다.",
        "details": {"requested_sido": "SEO"},
        "request_id": "a1b2c3d4"
    }
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    Returned by GET /health for container and load balancer probes.

    The service is only useful with its database, so a failed DB probe
    makes the whole service unhealthy.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
