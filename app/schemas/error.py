"""
Error response schemas for the contact relay API.

These mirror the JSON bodies produced by the contact router and the 404
exception handler so the OpenAPI document describes every failure shape.
"""
from typing import List

from pydantic import BaseModel, Field

from app.schemas.contact import (
    ContactErrorResponse,
    DeliveryFailedResponse,
    RateLimitedResponse,
)


class NotFoundResponse(BaseModel):
    """404 body listing the endpoints that do exist."""

    error: str = Field("Endpoint not found", examples=["Endpoint not found"])
    available: List[str] = Field(
        ..., examples=[["/api/send-email", "/api/health"]]
    )


# Error responses for the contact endpoint's OpenAPI documentation
CONTACT_ERROR_RESPONSES = {
    400: {"model": ContactErrorResponse, "description": "Invalid submission"},
    404: {"model": NotFoundResponse, "description": "Endpoint not found"},
    413: {"model": ContactErrorResponse, "description": "Payload too large"},
    429: {"model": RateLimitedResponse, "description": "Rate limit exceeded"},
    500: {"model": DeliveryFailedResponse, "description": "Email delivery failed"},
}
