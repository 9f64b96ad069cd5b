from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from app.core.errors import ContactErrorKind, SubmissionRejected
from app.core.rate_limiter import RateLimitDecision, RateLimiter
from app.core.sanitizer import sanitize_input
from app.core.validation import check_lengths, check_sanitized, validate_submission
from app.schemas.contact import ContactSubmission
from app.services.mail_dispatcher import MailDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactAccepted:
    submission: ContactSubmission
    rate: RateLimitDecision


@dataclass(frozen=True)
class ContactRejected:
    kind: ContactErrorKind
    message: str
    details: str
    rate: RateLimitDecision


@dataclass(frozen=True)
class ContactRateLimited:
    rate: RateLimitDecision
    description: str
    kind: ContactErrorKind = ContactErrorKind.RATE_LIMITED


@dataclass(frozen=True)
class ContactDeliveryFailed:
    detail: str
    rate: RateLimitDecision
    kind: ContactErrorKind = ContactErrorKind.MAIL_TRANSPORT_ERROR


ContactOutcome = Union[
    ContactAccepted, ContactRejected, ContactRateLimited, ContactDeliveryFailed
]


def sanitize_submission(submission: ContactSubmission) -> ContactSubmission:
    return ContactSubmission(
        name=sanitize_input(submission.name),
        email=sanitize_input(submission.email),
        subject=sanitize_input(submission.subject),
        message=sanitize_input(submission.message),
    )


class ContactService:
    """Runs one contact submission through gate, checks and delivery."""

    def __init__(
        self, rate_limiter: RateLimiter, dispatcher: Optional[MailDispatcher]
    ) -> None:
        self.rate_limiter = rate_limiter
        self.dispatcher = dispatcher

    async def submit(
        self, data: Optional[Mapping[str, Any]], client_ip: str
    ) -> ContactOutcome:
        rate = self.rate_limiter.hit(client_ip)
        if not rate.allowed:
            logger.warning(
                "Contact rate limit exceeded ip=%s retry_after=%s",
                client_ip,
                rate.retry_after,
                extra={"event_type": "contact_rate_limited"},
            )
            return ContactRateLimited(rate=rate, description=self.rate_limiter.describe())

        try:
            submission = validate_submission(data)
            submission = sanitize_submission(submission)
            check_sanitized(submission)
            check_lengths(submission)
        except SubmissionRejected as rejected:
            logger.info(
                "Contact submission rejected kind=%s",
                rejected.kind.value,
                extra={"event_type": "contact_rejected", "kind": rejected.kind.value},
            )
            return ContactRejected(
                kind=rejected.kind,
                message=rejected.message,
                details=rejected.details,
                rate=rate,
            )

        if self.dispatcher is None:
            logger.error(
                "Contact delivery skipped: mail is not configured",
                extra={"event_type": "contact_mail_unconfigured"},
            )
            return ContactDeliveryFailed(detail="mail delivery is not configured", rate=rate)

        result = await self.dispatcher.dispatch(submission)
        if not result.ok:
            return ContactDeliveryFailed(detail=result.detail or "", rate=rate)

        logger.info(
            "AUDIT: Contact submission delivered",
            extra={
                "event_type": "contact_delivered",
                "email_domain": submission.email.split("@")[-1],
            },
        )
        return ContactAccepted(submission=submission, rate=rate)
