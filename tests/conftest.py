from email.message import EmailMessage
from typing import Iterable, List

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.email import MailTransport
from app.core.errors import MailTransportError
from app.core.rate_limiter import RateLimiter
from app.main import create_app

OPERATOR_EMAIL = "owner@example.com"
RELAY_ACCOUNT = "relay@example.com"

JANE = {
    "name": "Jane",
    "email": "jane@example.com",
    "subject": "Hi",
    "message": "Hello",
}

# -----------------------------------------------------------------------------
# Test doubles
# -----------------------------------------------------------------------------


class RecordingTransport(MailTransport):
    """Keeps sent messages in memory; fails for the given recipients."""

    __test__ = False

    def __init__(self, fail_for: Iterable[str] = ()):
        self.sent: List[EmailMessage] = []
        self.attempts: List[EmailMessage] = []
        self.fail_for = set(fail_for)

    async def send(self, message: EmailMessage) -> str:
        self.attempts.append(message)
        if message["To"] in self.fail_for:
            raise MailTransportError(f"550 mailbox unavailable: {message['To']}")
        self.sent.append(message)
        return f"<{len(self.sent)}@relay.test>"

    def recipients(self) -> List[str]:
        return [message["To"] for message in self.sent]


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# -----------------------------------------------------------------------------
# Settings / collaborator fixtures
# -----------------------------------------------------------------------------


def make_settings(**overrides) -> Settings:
    values = {
        "SMTP_HOST": "smtp.test",
        "SMTP_USER": RELAY_ACCOUNT,
        "CONTACT_RECIPIENT": OPERATOR_EMAIL,
        "SIGNATURE_NAME": "Alex Doe",
        "SIGNATURE_TITLE": "Network Engineer & Web Developer",
        "SIGNATURE_EMAIL": "alex@example.com",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def test_settings():
    return make_settings()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def rate_limiter(clock):
    return RateLimiter(max_requests=5, window_seconds=15 * 60, clock=clock)


# -----------------------------------------------------------------------------
# Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture()
def app(test_settings, transport, rate_limiter):
    return create_app(
        settings=test_settings, transport=transport, rate_limiter=rate_limiter
    )


@pytest.fixture()
def client(app):
    # Using 'with' context manager to trigger lifespan events (startup/shutdown)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def settings_factory():
    return make_settings


@pytest.fixture()
def transport_factory():
    return RecordingTransport


@pytest.fixture()
def jane():
    return dict(JANE)
