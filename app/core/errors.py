"""
=============================================================================
PORTFOLIO CONTACT RELAY - ERROR HANDLING MODULE
=============================================================================
Error taxonomy for the contact pipeline plus the global exception handlers.

Features:
- Catches unhandled exceptions and unmatched routes
- Logs full stack trace server-side
- Returns sanitized error message to client
- Prevents information leakage in production

Usage:
    # In main.py
    from app.core.errors import register_exception_handlers
    register_exception_handlers(app, settings)
=============================================================================
"""

import logging
import traceback
from enum import Enum
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings

logger = logging.getLogger(__name__)


class ContactErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    INVALID_EMAIL_FORMAT = "InvalidEmailFormat"
    INPUT_TOO_LONG = "InputTooLong"
    INVALID_BODY = "InvalidBody"
    RATE_LIMITED = "RateLimited"
    MAIL_TRANSPORT_ERROR = "MailTransportError"
    UNHANDLED_ERROR = "UnhandledError"


class SubmissionRejected(Exception):
    """A client-correctable problem with a submission (reported as 400)."""

    def __init__(self, kind: ContactErrorKind, message: str, details: str):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message
        self.details = details


class MailTransportError(Exception):
    """The mail transport failed to accept a message."""

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(detail)
        self.detail = detail
        self.cause = cause


def known_paths(settings: Settings) -> list[str]:
    return [
        f"{settings.API_PREFIX}/send-email",
        f"{settings.API_PREFIX}/health",
    ]


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown path or a known path with the wrong method: both are
        # reported as a missing endpoint.
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint not found",
                    "available": known_paths(settings),
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all handler for unhandled exceptions.

        - Logs the full traceback for debugging
        - Returns a generic error message to prevent info leakage
        - In debug mode, includes more details
        """
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}:\n"
            f"{traceback.format_exc()}",
            extra={"event_type": "unhandled_error", "kind": ContactErrorKind.UNHANDLED_ERROR.value},
        )

        content = {
            "error": "Internal server error",
            "message": "Something went wrong on our end",
        }
        if settings.DEBUG:
            content["error_type"] = type(exc).__name__
            content["detail"] = str(exc)
        return JSONResponse(status_code=500, content=content)
