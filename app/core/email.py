from __future__ import annotations

import asyncio
import logging
import smtplib
import socket
from abc import ABC, abstractmethod
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from app.core.config import Settings
from app.core.errors import MailTransportError

logger = logging.getLogger(__name__)


class MailTransport(ABC):
    """Capability to hand one message to a mail system."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> str:
        """Send the message and return its Message-ID.

        Raises MailTransportError on any delivery failure, timeouts included.
        """


class SMTPTransport(MailTransport):
    """Blocking smtplib delivery, run in a worker thread per message."""

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPTransport":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=(
                settings.SMTP_PASSWORD.get_secret_value()
                if settings.SMTP_PASSWORD
                else None
            ),
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT,
        )

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)

    async def send(self, message: EmailMessage) -> str:
        if not self.host:
            raise MailTransportError("SMTP_HOST is not configured")

        if not message["Message-ID"]:
            message["Message-ID"] = make_msgid()

        try:
            await asyncio.to_thread(self._send_sync, message)
        except socket.timeout as exc:
            raise MailTransportError(
                f"SMTP timeout after {self.timeout}s talking to {self.host}", exc
            ) from exc
        except (smtplib.SMTPException, OSError) as exc:
            raise MailTransportError(
                f"SMTP delivery via {self.host}:{self.port} failed: {exc}", exc
            ) from exc

        logger.debug("smtp_message_sent message_id=%s", message["Message-ID"])
        return message["Message-ID"]
