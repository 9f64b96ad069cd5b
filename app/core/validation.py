"""Field checks for contact form submissions.

Presence is checked before format, and the length bounds apply to the
sanitized values so stripped markup never counts against a visitor.
"""
import re
from typing import Any, Mapping, Optional

from app.core.errors import ContactErrorKind, SubmissionRejected
from app.schemas.contact import ContactSubmission

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS = ("name", "email", "subject", "message")

MAX_LENGTHS = {
    "name": 100,
    "email": 254,
    "subject": 200,
    "message": 2000,
}


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(email))


def _missing_field() -> SubmissionRejected:
    return SubmissionRejected(
        ContactErrorKind.MISSING_FIELD,
        "All fields are required",
        "Please fill in all form fields",
    )


def _invalid_email() -> SubmissionRejected:
    return SubmissionRejected(
        ContactErrorKind.INVALID_EMAIL_FORMAT,
        "Invalid email format",
        "Please provide a valid email address",
    )


def validate_submission(data: Optional[Mapping[str, Any]]) -> ContactSubmission:
    """Check presence and email format of a raw payload.

    A field is missing when it is absent, null, not a string or blank.
    """
    if data is None:
        raise SubmissionRejected(
            ContactErrorKind.INVALID_BODY,
            "Invalid request body",
            "Send the form fields as a JSON object or form-encoded data",
        )

    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise _missing_field()

    if not is_valid_email(data["email"]):
        raise _invalid_email()

    return ContactSubmission(
        name=data["name"],
        email=data["email"],
        subject=data["subject"],
        message=data["message"],
    )


def check_sanitized(submission: ContactSubmission) -> None:
    """Reject submissions that sanitization emptied or mangled."""
    for field in REQUIRED_FIELDS:
        if not getattr(submission, field):
            raise _missing_field()
    if not is_valid_email(submission.email):
        raise _invalid_email()


def check_lengths(submission: ContactSubmission) -> None:
    for field, limit in MAX_LENGTHS.items():
        if len(getattr(submission, field)) > limit:
            raise SubmissionRejected(
                ContactErrorKind.INPUT_TOO_LONG,
                "Input too long",
                "Please keep your message within reasonable limits",
            )
