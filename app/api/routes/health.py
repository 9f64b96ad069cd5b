"""
Health check endpoint for the contact relay.

Liveness only: it never touches the mail transport or the rate limiter, so
it reports OK even while SMTP is down or a client is being throttled.
"""
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Liveness payload."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "OK",
                "message": "Email service is running",
                "timestamp": "2026-02-08T14:30:00Z",
            }
        }
    )

    status: Literal["OK"]
    message: str
    timestamp: datetime


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns service liveness for monitoring and uptime checks.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="OK",
        message="Email service is running",
        timestamp=datetime.now(timezone.utc),
    )
