"""Email domain: renderer, SMTP transport, and models."""

from enquiry.email.models import (
    Branding,
    RenderedEmail,
    SendResult,
    SmtpConfig,
    TransportFailure,
)
from enquiry.email.renderer import EmailRenderer, html_to_text
from enquiry.email.transport import SmtpTransport, build_message

__all__ = [
    "Branding",
    "EmailRenderer",
    "RenderedEmail",
    "SendResult",
    "SmtpConfig",
    "SmtpTransport",
    "TransportFailure",
    "build_message",
    "html_to_text",
]
