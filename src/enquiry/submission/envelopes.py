"""Map each terminal outcome onto the ``ResponseEnvelope`` sent to the browser.

User-facing text lives here and nowhere else.  Transport and unexpected
failures share one apology that names the alternate contact channels and
never carries internal detail.
"""

from __future__ import annotations

from enquiry.domain.models import GateDecision, ResponseEnvelope, ValidationResult
from enquiry.email.models import Branding

SUCCESS_MESSAGE = "Thank you for your message! We will get back to you within 24 hours."
VALIDATION_MESSAGE = "Please correct the following issues:"
MALFORMED_MESSAGE = "No form data received"
POST_ONLY_MESSAGE = "This endpoint accepts POST requests only"


def sent_envelope(suggestions: tuple[str, ...] = ()) -> ResponseEnvelope:
    """Confirmation for a delivered message, with any typo hints attached."""
    return ResponseEnvelope(
        success=True,
        message=SUCCESS_MESSAGE,
        suggestions=list(suggestions) or None,
    )


def gate_rejected_envelope(decision: GateDecision) -> ResponseEnvelope:
    """One explanatory message; rate-limit rejections add the retry hint."""
    return ResponseEnvelope(
        success=False,
        message=decision.message,
        errors=[decision.message],
        retry_after_seconds=decision.retry_after_seconds,
    )


def validation_failed_envelope(result: ValidationResult) -> ResponseEnvelope:
    """Every validation error in order so the visitor can fix them all at once.

    A spam match arrives here as a single vague error; nothing more specific
    is ever surfaced for it.
    """
    return ResponseEnvelope(
        success=False,
        message=VALIDATION_MESSAGE,
        errors=result.messages,
        suggestions=list(result.suggestions) or None,
    )


def apology_message(branding: Branding) -> str:
    """Return the generic apology naming the support email and phone."""
    return (
        "We apologise, but there was a problem sending your message. "
        f"Please try again later or contact us directly at {branding.support_email} "
        f"or {branding.support_phone}."
    )


def send_failed_envelope(branding: Branding) -> ResponseEnvelope:
    """Generic apology for transport and unexpected failures."""
    return ResponseEnvelope(success=False, message=apology_message(branding))


def malformed_envelope() -> ResponseEnvelope:
    return ResponseEnvelope(success=False, message=MALFORMED_MESSAGE)


def post_only_envelope(csrf_token: str | None = None) -> ResponseEnvelope:
    """Static reply for ``GET``; also hands the browser its CSRF token."""
    return ResponseEnvelope(success=False, message=POST_ONLY_MESSAGE, csrf_token=csrf_token)
