from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ContactSubmission(BaseModel):
    """One contact-form payload. Immutable once validated."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    subject: str
    message: str


class ContactRequest(BaseModel):
    """Request body documented in OpenAPI; parsing is done by the endpoint."""

    name: str = Field(..., max_length=100, examples=["Jane"])
    email: str = Field(..., examples=["jane@example.com"])
    subject: str = Field(..., max_length=200, examples=["Hi"])
    message: str = Field(..., max_length=2000, examples=["Hello"])


class ContactResponse(BaseModel):
    success: bool = True
    message: str
    details: str


class ContactErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class RateLimitedResponse(BaseModel):
    error: str
    details: Optional[str] = None
    retry_after: Optional[int] = Field(
        None, description="Seconds until the next submission is admitted"
    )


class DeliveryFailedResponse(BaseModel):
    error: str
    details: str
    timestamp: datetime
