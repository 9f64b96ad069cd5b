import re

_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_ANGLE_BRACKETS = re.compile(r"[<>]")


def sanitize_input(value: str) -> str:
    """Strip markup from a free-text form field.

    Script blocks go first (repeated until none is left, since removing one
    can splice the pieces of another together), then every remaining angle
    bracket, then surrounding whitespace. The result never contains ``<`` or
    ``>`` and sanitizing it again returns it unchanged.
    """
    previous = None
    while previous != value:
        previous = value
        value = _SCRIPT_BLOCK.sub("", value)
    value = _ANGLE_BRACKETS.sub("", value)
    return value.strip()


def redact_pii(message: str) -> str:
    """Redact personally identifiable information from log messages.

    Masks visitor emails, client IPs and credential values so contact
    submissions can be traced in logs without storing who sent them.
    """
    if not isinstance(message, str):
        return str(message)

    # Emails: jane@example.com -> j***@example.com
    message = re.sub(
        r"[\w.+-]+@[\w.-]+\.\w+",
        lambda m: m.group()[0] + "***@" + m.group().split("@")[1],
        message,
    )

    # IPs (IPv4): 203.0.113.10 -> 203.0.113.***
    message = re.sub(
        r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.)\d{1,3}\b", r"\1***", message
    )

    # SMTP credentials in common patterns
    message = re.sub(
        r'(password|passwd|pwd|pass|secret)["\']?\s*[:=]\s*["\']?[^"\'&\s]+',
        r"\1=[REDACTED]",
        message,
        flags=re.IGNORECASE,
    )

    return message
