"""SMTP mail transport built on aiosmtplib.

``SmtpTransport.send`` makes exactly one submission attempt bounded by the
configured timeout and never retries; retry policy belongs to the caller.
Every failure is logged here with full detail and returned as a
``SendResult`` carrying a ``TransportFailure`` category.  Credentials never
appear in the result or the log.
"""

from __future__ import annotations

from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid

import aiosmtplib
import structlog

from enquiry.email.models import SendResult, SmtpConfig, TransportFailure

logger = structlog.get_logger()

X_MAILER = "TDE Trading Contact Form"


def build_message(
    recipient: str,
    subject: str,
    html_body: str,
    plain_text_body: str,
    from_name: str,
    from_address: str,
    reply_to: str | None = None,
) -> EmailMessage:
    """Compose a multipart/alternative message (plain text first, then HTML)."""
    message = EmailMessage()
    message["From"] = formataddr((from_name, from_address))
    message["To"] = recipient
    message["Subject"] = subject
    message["Date"] = formatdate(localtime=False, usegmt=True)
    message["Message-ID"] = make_msgid(domain=from_address.rpartition("@")[2] or None)
    if reply_to:
        message["Reply-To"] = reply_to
    message["X-Mailer"] = X_MAILER
    message["X-Priority"] = "3"

    message.set_content(plain_text_body)
    message.add_alternative(html_body, subtype="html")
    return message


def classify_failure(exc: BaseException) -> TransportFailure:
    """Map an aiosmtplib/OS exception onto the transport failure taxonomy."""
    if isinstance(exc, aiosmtplib.SMTPTimeoutError | TimeoutError):
        return TransportFailure.TIMEOUT
    if isinstance(exc, aiosmtplib.SMTPAuthenticationError):
        return TransportFailure.AUTH_FAILED
    if isinstance(exc, aiosmtplib.SMTPConnectError | aiosmtplib.SMTPServerDisconnected):
        return TransportFailure.CONNECTION_FAILED
    if isinstance(
        exc,
        aiosmtplib.SMTPRecipientsRefused
        | aiosmtplib.SMTPSenderRefused
        | aiosmtplib.SMTPResponseException,
    ):
        return TransportFailure.REJECTED
    if isinstance(exc, aiosmtplib.SMTPException):
        return TransportFailure.PROTOCOL_ERROR
    return TransportFailure.CONNECTION_FAILED


class SmtpTransport:
    """Send one message per call through the configured SMTP server.

    Args:
        config: Host, port, credentials, encryption mode and timeout.
    """

    def __init__(self, config: SmtpConfig) -> None:
        self._config = config

    @property
    def configured(self) -> bool:
        """Return True when a host and sender address are available."""
        return bool(self._config.host and self._config.from_address)

    async def send(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        plain_text_body: str,
        from_name: str,
        reply_to: str | None = None,
    ) -> SendResult:
        """Submit one message.

        Args:
            recipient: Envelope and header recipient.
            subject: Message subject.
            html_body: HTML alternative.
            plain_text_body: Plain-text alternative.
            from_name: Display name for the ``From`` header.
            reply_to: Optional ``Reply-To`` address (the submitter).

        Returns:
            ``SendResult`` -- success, or the failure category and a
            server-side detail string.
        """
        if not self.configured:
            logger.error("smtp_not_configured")
            return SendResult(
                success=False,
                error_detail="SMTP host or sender address not configured",
                failure=TransportFailure.NOT_CONFIGURED,
            )

        message = build_message(
            recipient=recipient,
            subject=subject,
            html_body=html_body,
            plain_text_body=plain_text_body,
            from_name=from_name,
            from_address=self._config.from_address,
            reply_to=reply_to,
        )

        cfg = self._config
        try:
            await aiosmtplib.send(
                message,
                hostname=cfg.host,
                port=cfg.port,
                username=cfg.username or None,
                password=cfg.password.get_secret_value() or None,
                use_tls=cfg.encryption == "ssl",
                start_tls=cfg.encryption == "tls",
                timeout=cfg.timeout,
            )
        except (aiosmtplib.SMTPException, OSError, TimeoutError) as exc:
            failure = classify_failure(exc)
            logger.error(
                "smtp_send_failed",
                failure=failure,
                host=cfg.host,
                port=cfg.port,
                error=str(exc),
                exc_info=True,
            )
            return SendResult(
                success=False,
                error_detail=f"{failure}: {type(exc).__name__}",
                failure=failure,
            )

        logger.info("smtp_send_succeeded", host=cfg.host)
        return SendResult(success=True)
