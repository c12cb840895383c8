"""Sentry SDK initialization with structlog-sentry bridge.

``init_sentry(dsn)`` is a no-op for an empty DSN.  ``get_sentry_processor()``
returns the structlog processor that forwards ERROR events (transport
failures, unexpected pipeline errors) to Sentry.  Request bodies and user
fields are never attached: ``send_default_pii`` stays off.
"""

from __future__ import annotations

import logging

import sentry_sdk
import structlog
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog_sentry import SentryProcessor


def init_sentry(dsn: str, environment: str = "development") -> bool:
    """Initialize Sentry SDK with the given *dsn*.

    Args:
        dsn: Sentry DSN string.  Empty string disables Sentry.
        environment: Environment tag reported with every event.

    Returns:
        True if the SDK was initialized.
    """
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1,
        send_default_pii=False,
        max_request_body_size="never",
        integrations=[
            # structlog-sentry does the capturing; avoid double reports.
            LoggingIntegration(event_level=None, level=None),
        ],
    )
    return True


def get_sentry_processor() -> structlog.types.Processor:
    """Return a structlog processor that forwards ERROR events to Sentry.

    Insert it after ``add_log_level`` and before the renderer.
    """
    return SentryProcessor(event_level=logging.ERROR)
