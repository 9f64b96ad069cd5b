"""
Portfolio Contact Relay Services.

Services:
    - ContactService: runs a submission through rate gate, checks and delivery
    - MailDispatcher: builds and sends the notification/acknowledgement pair
"""

from .contact_service import (
    ContactAccepted,
    ContactDeliveryFailed,
    ContactOutcome,
    ContactRateLimited,
    ContactRejected,
    ContactService,
    sanitize_submission,
)
from .mail_dispatcher import DispatchResult, MailDispatcher, Signature

__all__ = [
    # Contact Service
    "ContactService",
    "ContactOutcome",
    "ContactAccepted",
    "ContactRejected",
    "ContactRateLimited",
    "ContactDeliveryFailed",
    "sanitize_submission",
    # Mail Dispatcher
    "MailDispatcher",
    "DispatchResult",
    "Signature",
]
