"""
=============================================================================
PORTFOLIO CONTACT RELAY - EMAIL CONTENT CONFIGURATION
=============================================================================

Fixed labels and copy used by the contact form emails. Addresses and the
signature live in Settings (they vary per deployment); everything here is
part of the message templates.
=============================================================================
"""


class EmailConfig:
    """
    Centralized email copy for the contact relay.

    Usage:
        from app.core.email_config import email_config

        subject = f"{email_config.NOTIFICATION_SUBJECT_PREFIX} {subject}"
    """

    # =========================================================================
    # OWNER NOTIFICATION
    # =========================================================================

    # Display name on the notification sent to the site owner
    NOTIFICATION_FROM_NAME: str = "Portfolio Contact Form"

    # Subject prefix for the notification
    NOTIFICATION_SUBJECT_PREFIX: str = "Portfolio Contact:"

    NOTIFICATION_HEADING: str = "New Contact Form Submission"

    NOTIFICATION_FOOTER: str = "This email was sent from your portfolio contact form."

    # =========================================================================
    # SENDER ACKNOWLEDGEMENT
    # =========================================================================

    ACKNOWLEDGEMENT_SUBJECT: str = "Thank you for contacting me!"

    ACKNOWLEDGEMENT_HEADING: str = "Thank You for Your Message!"

    ACKNOWLEDGEMENT_INTRO: str = (
        "Thank you for reaching out through my portfolio contact form. "
        "I have received your message and will get back to you as soon as possible."
    )

    ACKNOWLEDGEMENT_RESPONSE_TIME: str = (
        "I typically respond within 24-48 hours. If your inquiry is urgent, "
        "please feel free to call me directly."
    )

    ACKNOWLEDGEMENT_CLOSING: str = "Best regards,"

    # =========================================================================
    # FORMATTING
    # =========================================================================

    TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S UTC"
    DATE_FORMAT: str = "%Y-%m-%d"


# Singleton instance - import this in your code
email_config = EmailConfig()
