"""Operator commands for the enquiry service.

Usage::

    python -m enquiry.cli smtp-test ops@example.com

``smtp-test`` sends a fixed message through the configured SMTP transport
and prints the outcome.  Exit status is 0 on success and 1 on failure.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from enquiry.app import build_smtp_config
from enquiry.config import Settings, get_settings
from enquiry.email.models import SendResult
from enquiry.email.renderer import html_to_text
from enquiry.email.transport import SmtpTransport

logger = structlog.get_logger()

TEST_SUBJECT = "TDE Trading - SMTP Test Email"
TEST_HTML = """<html><body>
<h2>SMTP Test Email</h2>
<p>This is a test email from the TDE Trading contact form service.</p>
<p>If you received this email, SMTP delivery is working.</p>
</body></html>
"""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for operator commands.

    Returns:
        A configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(description="Enquiry service operator commands")
    subparsers = parser.add_subparsers(dest="command", required=True)

    smtp_test = subparsers.add_parser("smtp-test", help="Send a test email via SMTP")
    smtp_test.add_argument("address", type=str, help="Recipient address for the test email")

    return parser


async def send_test_email(settings: Settings, address: str) -> SendResult:
    """Send the fixed test message to ``address`` with the configured transport."""
    transport = SmtpTransport(build_smtp_config(settings))
    return await transport.send(
        recipient=address,
        subject=TEST_SUBJECT,
        html_body=TEST_HTML,
        plain_text_body=html_to_text(TEST_HTML),
        from_name=settings.mail_from_name,
    )


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the command, and return the exit status."""
    args = build_parser().parse_args(argv)

    if args.command == "smtp-test":
        logger.info("smtp_test_started", recipient=args.address)
        result = asyncio.run(send_test_email(get_settings(), args.address))
        if result.success:
            print(f"Test email sent to {args.address}")
            return 0
        print(f"Test email failed: {result.failure} ({result.error_detail})", file=sys.stderr)
        return 1

    return 2


if __name__ == "__main__":
    sys.exit(main())
