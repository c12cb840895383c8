"""Tests for domain enumerations."""

from enquiry.domain.types import (
    FIELD_LABELS,
    FIELD_ORDER,
    ErrorCode,
    FieldId,
    GateRejectionKind,
    Outcome,
    SubmissionState,
)


class TestFieldId:
    def test_wire_names(self) -> None:
        assert [f.value for f in FieldId] == ["fname", "lname", "email", "phone", "message"]

    def test_field_order_is_declaration_order(self) -> None:
        assert FIELD_ORDER == tuple(FieldId)

    def test_every_field_has_a_label(self) -> None:
        assert set(FIELD_LABELS) == set(FieldId)


class TestEnumsAreStrings:
    """StrEnum members compare equal to their values (used in logs and audit rows)."""

    def test_error_code(self) -> None:
        assert ErrorCode.REQUIRED == "required"

    def test_gate_rejection_kind(self) -> None:
        assert GateRejectionKind.RATE_LIMITED == "rate_limited"
        assert GateRejectionKind.CSRF_FAILED == "csrf_failed"

    def test_submission_state_members(self) -> None:
        assert {s.value for s in SubmissionState} == {
            "received",
            "gate_rejected",
            "validating",
            "validation_failed",
            "rendering",
            "sending",
            "sent",
            "send_failed",
        }

    def test_outcome_members(self) -> None:
        assert Outcome.SPAM_DETECTED == "spam_detected"
        assert len(Outcome) == 6
