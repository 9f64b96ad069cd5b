import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import contact, health
from app.core.config import Settings, settings as default_settings
from app.core.email import MailTransport, SMTPTransport
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.core.middleware import RequestIdMiddleware
from app.core.rate_limiter import (
    RateLimiter,
    build_rate_limiter,
    parse_trusted_networks,
)
from app.core.security_headers import SecurityHeadersMiddleware

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# OpenAPI Tags Metadata
# =============================================================================
tags_metadata = [
    {
        "name": "contact",
        "description": "**Contact** - Public contact form. Relays a visitor's message to the site owner and acknowledges it to the visitor.",
    },
    {
        "name": "health",
        "description": "**Health** - Liveness probe for monitoring and uptime checks.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    settings: Settings = app.state.settings
    logger.info("Starting %s v%s", settings.PROJECT_NAME, settings.VERSION)
    logger.info("Email server running on port %s", settings.PORT)
    logger.info(
        "Health check: http://localhost:%s%s/health", settings.PORT, settings.API_PREFIX
    )
    logger.info(
        "Email endpoint: http://localhost:%s%s/send-email",
        settings.PORT,
        settings.API_PREFIX,
    )
    if not settings.mail_configured:
        logger.warning(
            "Mail delivery is not configured; /send-email will answer 500 "
            "until EMAIL_USER or MAIL_FROM and RECIPIENT_EMAIL are set"
        )

    yield

    # Shutdown
    logger.info("Shutting down...")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[MailTransport] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Build the relay application.

    Collaborators default to the ones described by ``settings``; tests pass
    their own transport and limiter.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="""
## Portfolio Contact Relay

Accepts contact-form submissions from the portfolio site, emails them to the
site owner and sends the visitor an acknowledgement.
        """,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
    )

    app.state.settings = settings
    app.state.rate_limiter = rate_limiter or build_rate_limiter(settings)
    app.state.mail_transport = transport or SMTPTransport.from_settings(settings)
    app.state.trusted_networks = parse_trusted_networks(settings.TRUSTED_PROXIES)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=settings.ALLOWED_METHODS,
        allow_headers=settings.ALLOWED_HEADERS,
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "Retry-After",
        ],
    )

    app.add_middleware(SecurityHeadersMiddleware)

    # Request ID Tracing
    app.add_middleware(RequestIdMiddleware)

    # Register global exception handlers
    register_exception_handlers(app, settings)

    app.include_router(contact.router, prefix=settings.API_PREFIX, tags=["contact"])
    app.include_router(health.router, prefix=settings.API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=default_settings.PORT)
