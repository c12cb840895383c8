"""Tests for the outcome -> ResponseEnvelope mapping."""

from __future__ import annotations

from enquiry.domain.models import GateDecision, ValidationIssue, ValidationResult
from enquiry.domain.types import ErrorCode, FieldId, GateRejectionKind
from enquiry.email.models import Branding
from enquiry.submission.envelopes import (
    MALFORMED_MESSAGE,
    POST_ONLY_MESSAGE,
    SUCCESS_MESSAGE,
    VALIDATION_MESSAGE,
    apology_message,
    gate_rejected_envelope,
    malformed_envelope,
    post_only_envelope,
    send_failed_envelope,
    sent_envelope,
    validation_failed_envelope,
)


class TestSent:
    def test_plain_success(self) -> None:
        assert sent_envelope().to_payload() == {"success": True, "message": SUCCESS_MESSAGE}

    def test_suggestions_attached(self) -> None:
        payload = sent_envelope(("Did you mean jane@gmail.com?",)).to_payload()
        assert payload["suggestions"] == ["Did you mean jane@gmail.com?"]


class TestGateRejected:
    def test_rate_limited_carries_retry_hint(self) -> None:
        decision = GateDecision.reject(
            GateRejectionKind.RATE_LIMITED, "Too many submissions.", retry_after_seconds=42
        )
        assert gate_rejected_envelope(decision).to_payload() == {
            "success": False,
            "message": "Too many submissions.",
            "errors": ["Too many submissions."],
            "retryAfterSeconds": 42,
        }

    def test_captcha_has_no_retry_hint(self) -> None:
        decision = GateDecision.reject(GateRejectionKind.CAPTCHA_FAILED, "Do the captcha.")
        assert "retryAfterSeconds" not in gate_rejected_envelope(decision).to_payload()


class TestValidationFailed:
    def test_all_messages_in_order(self) -> None:
        result = ValidationResult(
            errors=(
                ValidationIssue(field=FieldId.LAST_NAME, code=ErrorCode.REQUIRED, message="b"),
                ValidationIssue(field=FieldId.PHONE, code=ErrorCode.TOO_SHORT, message="c"),
            ),
            suggestions=("Did you mean x@gmail.com?",),
        )
        payload = validation_failed_envelope(result).to_payload()
        assert payload["success"] is False
        assert payload["message"] == VALIDATION_MESSAGE
        assert payload["errors"] == ["b", "c"]
        assert payload["suggestions"] == ["Did you mean x@gmail.com?"]


class TestFailures:
    def test_apology_names_contact_channels(self) -> None:
        branding = Branding(support_email="help@acme.test", support_phone="555 0100")
        message = apology_message(branding)
        assert "help@acme.test" in message
        assert "555 0100" in message

    def test_send_failed_has_no_internal_detail(self) -> None:
        payload = send_failed_envelope(Branding()).to_payload()
        assert set(payload) == {"success", "message"}
        assert payload["success"] is False

    def test_malformed(self) -> None:
        assert malformed_envelope().to_payload() == {
            "success": False,
            "message": MALFORMED_MESSAGE,
        }

    def test_post_only_hands_out_csrf_token(self) -> None:
        payload = post_only_envelope("tok").to_payload()
        assert payload == {"success": False, "message": POST_ONLY_MESSAGE, "csrf_token": "tok"}
