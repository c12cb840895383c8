"""Pydantic v2 models for the email domain.

Provides frozen (immutable) models for the rendered message, the transport
configuration, and the transport's result.
"""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, SecretStr


class Branding(BaseModel):
    """Fixed business details embedded in every rendered message."""

    model_config = ConfigDict(frozen=True)

    business_name: str = "TDE Trading"
    tagline: str = "Professional Trading Education"
    subject: str = "TDE Trading - Website Contact Form Submission"
    support_phone: str = "(+61) 430 333 813"
    support_phone_uri: str = "+61430333813"
    support_email: str = "info@tdetrading.com.au"


class RenderedEmail(BaseModel):
    """A contact-form notification ready for the transport.

    ``plain_text_body`` is always derived from ``html_body`` so the two
    representations cannot drift apart.
    """

    model_config = ConfigDict(frozen=True)

    subject: str
    html_body: str
    plain_text_body: str
    reply_to: str


class SmtpConfig(BaseModel):
    """Connection details for the outbound SMTP server."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = 587
    username: str = ""
    password: SecretStr = SecretStr("")
    encryption: Literal["tls", "ssl", "none"] = "tls"
    timeout: float = 30.0
    from_address: str = ""


class TransportFailure(StrEnum):
    """Why a single SMTP submission did not go through."""

    NOT_CONFIGURED = "not_configured"
    AUTH_FAILED = "auth_failed"
    CONNECTION_FAILED = "connection_failed"
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    PROTOCOL_ERROR = "protocol_error"


class SendResult(BaseModel):
    """Terminal value of one send attempt.  ``error_detail`` stays server-side."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error_detail: str | None = None
    failure: TransportFailure | None = None
