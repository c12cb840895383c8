"""Time-delay anti-bot gate.

The browser stamps ``formStartTime`` (epoch milliseconds) when the page
loads.  Bots fill forms near-instantly; stale forms suggest replay.  This is
a best-effort heuristic, not a cryptographic guarantee.
"""

from __future__ import annotations

import math

from enquiry.domain.models import GateDecision
from enquiry.domain.types import GateRejectionKind

TOO_FAST_MESSAGE = "Form submitted too quickly. Please take a moment and try again."
EXPIRED_MESSAGE = "Your session has expired. Please reload the page and try again."


def check_form_timing(
    form_start_time: str,
    now: float,
    min_fill_seconds: int = 20,
    max_age_seconds: int = 1800,
) -> GateDecision:
    """Judge how long the visitor spent on the form.

    Args:
        form_start_time: Client-recorded page-load time in epoch milliseconds.
        now: Current time in epoch seconds.
        min_fill_seconds: Submissions faster than this are rejected as bots.
        max_age_seconds: Forms older than this are rejected as expired.

    Returns:
        ``GateDecision`` -- ``TOO_FAST`` when ``elapsed < min``, ``EXPIRED``
        when ``elapsed > max`` or the stamp is missing or unreadable.
    """
    try:
        started_ms = float(form_start_time.strip())
    except ValueError:
        return GateDecision.reject(GateRejectionKind.EXPIRED, EXPIRED_MESSAGE)
    if not math.isfinite(started_ms):
        return GateDecision.reject(GateRejectionKind.EXPIRED, EXPIRED_MESSAGE)

    elapsed_ms = now * 1000 - started_ms
    if elapsed_ms < min_fill_seconds * 1000:
        return GateDecision.reject(GateRejectionKind.TOO_FAST, TOO_FAST_MESSAGE)
    if elapsed_ms > max_age_seconds * 1000:
        return GateDecision.reject(GateRejectionKind.EXPIRED, EXPIRED_MESSAGE)
    return GateDecision.allow()
