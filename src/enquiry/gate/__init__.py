"""Abuse Gate: anti-bot timing, rate limiting, and CAPTCHA verification."""

from enquiry.gate.abuse import AbuseGate
from enquiry.gate.captcha import CaptchaVerifier
from enquiry.gate.rate_limit import InMemoryRateStore, RateLimiter, RateStore
from enquiry.gate.timing import check_form_timing

__all__ = [
    "AbuseGate",
    "CaptchaVerifier",
    "InMemoryRateStore",
    "RateLimiter",
    "RateStore",
    "check_form_timing",
]
