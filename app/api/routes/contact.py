"""
Contact form relay.

Public endpoint that emails a contact-form submission to the site owner and
sends the visitor an acknowledgement.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import get_contact_service, get_request_ip, get_settings
from app.core.config import Settings
from app.core.rate_limiter import RateLimitDecision
from app.schemas.contact import ContactRequest, ContactResponse
from app.schemas.error import CONTACT_ERROR_RESPONSES
from app.services.contact_service import (
    ContactAccepted,
    ContactDeliveryFailed,
    ContactRateLimited,
    ContactRejected,
    ContactService,
)

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMITED_MESSAGE = "Too many emails sent from this IP, please try again later."

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _rate_headers(rate: RateLimitDecision) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(rate.limit),
        "X-RateLimit-Remaining": str(rate.remaining),
    }


async def _read_payload(request: Request, body: bytes) -> Optional[Dict[str, Any]]:
    """Decode a JSON or form-encoded body; None when it is not an object."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items()}

    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


@router.post(
    "/send-email",
    response_model=ContactResponse,
    responses=CONTACT_ERROR_RESPONSES,
    summary="Send contact form email",
    description=(
        "Relays a contact-form submission to the site owner and sends an "
        "acknowledgement to the sender. Accepts JSON or form-encoded bodies."
    ),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": ContactRequest.model_json_schema()}
            },
        }
    },
)
async def send_email(
    request: Request,
    client_ip: str = Depends(get_request_ip),
    service: ContactService = Depends(get_contact_service),
    settings: Settings = Depends(get_settings),
):
    body = await request.body()
    if len(body) > settings.MAX_BODY_BYTES:
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={
                "error": "Payload too large",
                "details": "Please keep your message within reasonable limits",
            },
        )

    payload = await _read_payload(request, body)
    outcome = await service.submit(payload, client_ip)

    if isinstance(outcome, ContactAccepted):
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=ContactResponse(
                message="Email sent successfully!",
                details="Thank you for your message. I will get back to you soon.",
            ).model_dump(),
            headers=_rate_headers(outcome.rate),
        )

    if isinstance(outcome, ContactRateLimited):
        headers = _rate_headers(outcome.rate)
        headers["Retry-After"] = str(outcome.rate.retry_after)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                "error": RATE_LIMITED_MESSAGE,
                "details": outcome.description,
                "retry_after": outcome.rate.retry_after,
            },
            headers=headers,
        )

    if isinstance(outcome, ContactRejected):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": outcome.message, "details": outcome.details},
            headers=_rate_headers(outcome.rate),
        )

    if isinstance(outcome, ContactDeliveryFailed):
        # Transport detail was logged by the dispatcher; the client gets none.
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to send email",
                "details": (
                    "Sorry, there was a problem sending your message. "
                    "Please try again later or contact me directly."
                ),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    raise TypeError(f"Unexpected contact outcome: {outcome!r}")
