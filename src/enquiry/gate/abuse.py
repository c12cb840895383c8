"""The Abuse Gate: timing, rate limit and CAPTCHA checks ahead of validation.

Checks run cheapest first and stop at the first rejection:

1. time-delay gate (pure)
2. rate limiter (in-process state; counts the attempt when admitted)
3. CAPTCHA verification (network call)
"""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from enquiry.domain.models import ClientContext, GateDecision, SubmissionInput
from enquiry.domain.types import GateRejectionKind
from enquiry.gate.captcha import CaptchaVerifier
from enquiry.gate.rate_limit import RateLimiter
from enquiry.gate.timing import check_form_timing

logger = structlog.get_logger()

CAPTCHA_FAILED_MESSAGE = "Please complete the reCAPTCHA verification."


class AbuseGate:
    """Veto abusive submissions before any validation or mail work happens.

    Args:
        rate_limiter: Per-key frequency policy.
        captcha: CAPTCHA verifier.
        min_fill_seconds: Lower bound for time spent on the form.
        max_form_age_seconds: Upper bound for time spent on the form.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        captcha: CaptchaVerifier,
        min_fill_seconds: int = 20,
        max_form_age_seconds: int = 1800,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._captcha = captcha
        self._min_fill_seconds = min_fill_seconds
        self._max_form_age_seconds = max_form_age_seconds
        self._clock = clock

    async def check(self, submission: SubmissionInput, client: ClientContext) -> GateDecision:
        """Run the three checks in order.

        Args:
            submission: The raw submission.
            client: Rate key and remote address of the submitter.

        Returns:
            The first rejecting ``GateDecision``, or an allowing one.
        """
        timing = check_form_timing(
            submission.form_start_time,
            now=self._clock(),
            min_fill_seconds=self._min_fill_seconds,
            max_age_seconds=self._max_form_age_seconds,
        )
        if not timing.allowed:
            logger.info("gate_rejected", kind=timing.kind)
            return timing

        rate = self._rate_limiter.check(client.rate_key)
        if not rate.allowed:
            logger.info(
                "gate_rejected",
                kind=rate.kind,
                retry_after_seconds=rate.retry_after_seconds,
            )
            return rate

        if not await self._captcha.verify(submission.captcha_token, client.remote_ip):
            logger.info("gate_rejected", kind=GateRejectionKind.CAPTCHA_FAILED)
            return GateDecision.reject(
                GateRejectionKind.CAPTCHA_FAILED, CAPTCHA_FAILED_MESSAGE
            )

        return GateDecision.allow()
