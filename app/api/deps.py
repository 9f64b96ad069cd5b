from fastapi import Depends, Request

from app.core.config import Settings
from app.core.email import MailTransport
from app.core.rate_limiter import RateLimiter, get_client_ip
from app.services.contact_service import ContactService
from app.services.mail_dispatcher import MailDispatcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    """
    Process-wide limiter owned by the application.

    Usage:
        @router.post("/items")
        def create(limiter: RateLimiter = Depends(get_rate_limiter)):
            ...
    """
    return request.app.state.rate_limiter


def get_mail_transport(request: Request) -> MailTransport:
    return request.app.state.mail_transport


def get_request_ip(request: Request) -> str:
    return get_client_ip(request, request.app.state.trusted_networks)


def get_contact_service(
    settings: Settings = Depends(get_settings),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    transport: MailTransport = Depends(get_mail_transport),
) -> ContactService:
    """Return the contact service used by the send-email endpoint."""
    dispatcher = (
        MailDispatcher.from_settings(transport, settings)
        if settings.mail_configured
        else None
    )
    return ContactService(rate_limiter=rate_limiter, dispatcher=dispatcher)
