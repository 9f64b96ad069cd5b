from __future__ import annotations

import asyncio
import html
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable, List, Optional

from app.core.config import Settings
from app.core.email import MailTransport
from app.core.email_config import email_config
from app.core.errors import ContactErrorKind, MailTransportError
from app.schemas.contact import ContactSubmission

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Outcome of sending the notification/acknowledgement pair."""
    notification_sent: bool
    acknowledgement_sent: bool
    error: Optional[ContactErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.notification_sent and self.acknowledgement_sent


@dataclass(frozen=True)
class Signature:
    name: str
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def lines(self) -> List[str]:
        return [line for line in (self.name, self.title, self.email, self.phone) if line]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def header_safe(value: str) -> str:
    """Fold any run of whitespace, CR/LF included, into one space."""
    return " ".join(value.split())


class MailDispatcher:
    """Builds the two contact emails and sends them concurrently."""

    def __init__(
        self,
        transport: MailTransport,
        recipient: str,
        sender: str,
        signature: Signature,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.transport = transport
        self.recipient = recipient
        self.sender = sender
        self.signature = signature
        self._clock = clock

    @classmethod
    def from_settings(cls, transport: MailTransport, settings: Settings) -> "MailDispatcher":
        if not settings.contact_recipient or not settings.mail_from:
            raise RuntimeError(
                "Contact email is not configured: set SMTP_USER or MAIL_FROM/CONTACT_RECIPIENT"
            )
        return cls(
            transport=transport,
            recipient=settings.contact_recipient,
            sender=settings.mail_from,
            signature=Signature(
                name=settings.SIGNATURE_NAME,
                title=settings.SIGNATURE_TITLE,
                email=settings.SIGNATURE_EMAIL,
                phone=settings.SIGNATURE_PHONE,
            ),
        )

    def build_notification(
        self, submission: ContactSubmission, sent_at: datetime
    ) -> EmailMessage:
        timestamp = sent_at.strftime(email_config.TIMESTAMP_FORMAT)

        msg = EmailMessage()
        msg["From"] = formataddr((email_config.NOTIFICATION_FROM_NAME, self.sender))
        msg["To"] = self.recipient
        msg["Reply-To"] = submission.email
        msg["Subject"] = (
            f"{email_config.NOTIFICATION_SUBJECT_PREFIX} {header_safe(submission.subject)}"
        )

        body_lines = [
            email_config.NOTIFICATION_HEADING,
            "",
            f"Name: {submission.name}",
            f"Email: {submission.email}",
            f"Subject: {submission.subject}",
            "",
            "Message:",
            submission.message,
            "",
            "--",
            email_config.NOTIFICATION_FOOTER,
            f"Time: {timestamp}",
        ]
        msg.set_content("\n".join(body_lines))

        esc = html.escape
        message_html = esc(submission.message).replace("\n", "<br>")
        msg.add_alternative(
            f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333; border-bottom: 2px solid #007bff; padding-bottom: 10px;">{esc(email_config.NOTIFICATION_HEADING)}</h2>
  <div style="background-color: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">
    <p><strong>Name:</strong> {esc(submission.name)}</p>
    <p><strong>Email:</strong> {esc(submission.email)}</p>
    <p><strong>Subject:</strong> {esc(submission.subject)}</p>
  </div>
  <div style="background-color: #fff; padding: 20px; border: 1px solid #dee2e6; border-radius: 5px;">
    <h3 style="color: #495057;">Message:</h3>
    <p style="line-height: 1.6; color: #212529;">{message_html}</p>
  </div>
  <div style="margin-top: 20px; padding: 10px; background-color: #e9ecef; border-radius: 5px; font-size: 12px; color: #6c757d;">
    <p>{esc(email_config.NOTIFICATION_FOOTER)}</p>
    <p>Time: {timestamp}</p>
  </div>
</div>
""",
            subtype="html",
        )
        return msg

    def build_acknowledgement(
        self, submission: ContactSubmission, sent_at: datetime
    ) -> EmailMessage:
        date = sent_at.strftime(email_config.DATE_FORMAT)
        signature = self.signature.lines()

        msg = EmailMessage()
        msg["From"] = formataddr((self.signature.name, self.sender))
        msg["To"] = submission.email
        msg["Subject"] = email_config.ACKNOWLEDGEMENT_SUBJECT

        body_lines = [
            f"Hi {submission.name},",
            "",
            email_config.ACKNOWLEDGEMENT_INTRO,
            "",
            "Your Message Summary:",
            f"Subject: {submission.subject}",
            f"Date: {date}",
            "",
            email_config.ACKNOWLEDGEMENT_RESPONSE_TIME,
            "",
            email_config.ACKNOWLEDGEMENT_CLOSING,
            *signature,
        ]
        msg.set_content("\n".join(body_lines))

        esc = html.escape
        signature_html = "<br>\n".join(
            f"<strong>{esc(line)}</strong>" if i == 0 else esc(line)
            for i, line in enumerate(signature)
        )
        msg.add_alternative(
            f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #007bff;">{esc(email_config.ACKNOWLEDGEMENT_HEADING)}</h2>
  <p>Hi {esc(submission.name)},</p>
  <p>{esc(email_config.ACKNOWLEDGEMENT_INTRO)}</p>
  <div style="background-color: #f8f9fa; padding: 15px; border-radius: 5px; margin: 20px 0;">
    <h4>Your Message Summary:</h4>
    <p><strong>Subject:</strong> {esc(submission.subject)}</p>
    <p><strong>Date:</strong> {date}</p>
  </div>
  <p>{esc(email_config.ACKNOWLEDGEMENT_RESPONSE_TIME)}</p>
  <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #dee2e6;">
    <p>{esc(email_config.ACKNOWLEDGEMENT_CLOSING)}<br>
{signature_html}</p>
  </div>
</div>
""",
            subtype="html",
        )
        return msg

    async def dispatch(self, submission: ContactSubmission) -> DispatchResult:
        """Send both emails concurrently; success only if both were accepted.

        Neither send short-circuits the other, and a delivered notification is
        not recalled when the acknowledgement fails.
        """
        sent_at = self._clock()
        notification = self.build_notification(submission, sent_at)
        acknowledgement = self.build_acknowledgement(submission, sent_at)

        notification_outcome, acknowledgement_outcome = await asyncio.gather(
            self.transport.send(notification),
            self.transport.send(acknowledgement),
            return_exceptions=True,
        )

        result = DispatchResult(
            notification_sent=not isinstance(notification_outcome, BaseException),
            acknowledgement_sent=not isinstance(acknowledgement_outcome, BaseException),
        )
        if result.ok:
            logger.info(
                "Contact emails sent notification_id=%s acknowledgement_id=%s",
                notification_outcome,
                acknowledgement_outcome,
                extra={"event_type": "contact_emails_sent"},
            )
            return result

        failures = []
        for label, outcome in (
            ("notification", notification_outcome),
            ("acknowledgement", acknowledgement_outcome),
        ):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                detail = outcome.detail if isinstance(outcome, MailTransportError) else repr(outcome)
                failures.append(f"{label}: {detail}")
                logger.error(
                    "Contact %s delivery failed: %s",
                    label,
                    detail,
                    exc_info=outcome,
                    extra={"event_type": "contact_delivery_failed", "message_kind": label},
                )

        result.error = ContactErrorKind.MAIL_TRANSPORT_ERROR
        result.detail = "; ".join(failures)
        return result
