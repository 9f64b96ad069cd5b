import pytest

from app.core.errors import ContactErrorKind
from app.core.rate_limiter import RateLimiter
from app.schemas.contact import ContactSubmission
from app.services.contact_service import (
    ContactAccepted,
    ContactDeliveryFailed,
    ContactRateLimited,
    ContactRejected,
    ContactService,
    sanitize_submission,
)
from app.services.mail_dispatcher import MailDispatcher, Signature

CLIENT_IP = "203.0.113.7"


def _service(transport, rate_limiter, configured=True):
    dispatcher = None
    if configured:
        dispatcher = MailDispatcher(
            transport=transport,
            recipient="owner@example.com",
            sender="relay@example.com",
            signature=Signature(name="Alex Doe"),
        )
    return ContactService(rate_limiter=rate_limiter, dispatcher=dispatcher)


@pytest.mark.asyncio
async def test_accepted_outcome_carries_sanitized_submission(transport, rate_limiter, jane):
    jane["name"] = "  <b>Jane</b> "

    outcome = await _service(transport, rate_limiter).submit(jane, CLIENT_IP)

    assert isinstance(outcome, ContactAccepted)
    assert outcome.submission.name == "bJane/b"
    assert outcome.rate.remaining == 4


@pytest.mark.asyncio
async def test_rejected_outcome(transport, rate_limiter, jane):
    jane["email"] = "nope"

    outcome = await _service(transport, rate_limiter).submit(jane, CLIENT_IP)

    assert isinstance(outcome, ContactRejected)
    assert outcome.kind is ContactErrorKind.INVALID_EMAIL_FORMAT
    assert transport.attempts == []


@pytest.mark.asyncio
async def test_invalid_body_outcome(transport, rate_limiter):
    outcome = await _service(transport, rate_limiter).submit(None, CLIENT_IP)

    assert isinstance(outcome, ContactRejected)
    assert outcome.kind is ContactErrorKind.INVALID_BODY


@pytest.mark.asyncio
async def test_rate_limited_before_validation(transport, jane):
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    service = _service(transport, limiter)

    await service.submit({}, CLIENT_IP)
    outcome = await service.submit(jane, CLIENT_IP)

    assert isinstance(outcome, ContactRateLimited)
    assert outcome.kind is ContactErrorKind.RATE_LIMITED
    assert outcome.description == "Limit of 1 requests per 1 minute exceeded."
    assert transport.attempts == []


@pytest.mark.asyncio
async def test_delivery_failure_outcome(transport_factory, rate_limiter, jane):
    transport = transport_factory(fail_for={"owner@example.com"})

    outcome = await _service(transport, rate_limiter).submit(jane, CLIENT_IP)

    assert isinstance(outcome, ContactDeliveryFailed)
    assert outcome.kind is ContactErrorKind.MAIL_TRANSPORT_ERROR
    assert outcome.detail.startswith("notification:")


@pytest.mark.asyncio
async def test_unconfigured_dispatcher_fails_delivery(transport, rate_limiter, jane):
    outcome = await _service(transport, rate_limiter, configured=False).submit(
        jane, CLIENT_IP
    )

    assert isinstance(outcome, ContactDeliveryFailed)
    assert transport.attempts == []


def test_sanitize_submission_strips_every_field():
    submission = ContactSubmission(
        name=" <i>Jane</i> ",
        email="jane@example.com ",
        subject="<script>x()</script>Hi",
        message="a<b",
    )

    cleaned = sanitize_submission(submission)

    assert cleaned == ContactSubmission(
        name="iJane/i", email="jane@example.com", subject="Hi", message="ab"
    )
