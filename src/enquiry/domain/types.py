"""Domain enumerations for the contact-form submission pipeline."""

from enum import StrEnum


class FieldId(StrEnum):
    """Form fields subject to validation, in declaration order."""

    FIRST_NAME = "fname"
    LAST_NAME = "lname"
    EMAIL = "email"
    PHONE = "phone"
    MESSAGE = "message"


# Declaration order drives error ordering in every ValidationResult.
FIELD_ORDER: tuple[FieldId, ...] = (
    FieldId.FIRST_NAME,
    FieldId.LAST_NAME,
    FieldId.EMAIL,
    FieldId.PHONE,
    FieldId.MESSAGE,
)

FIELD_LABELS: dict[FieldId, str] = {
    FieldId.FIRST_NAME: "First name",
    FieldId.LAST_NAME: "Last name",
    FieldId.EMAIL: "Email",
    FieldId.PHONE: "Phone number",
    FieldId.MESSAGE: "Message",
}


class ErrorCode(StrEnum):
    """Machine-readable reason attached to each validation issue."""

    REQUIRED = "required"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_CHARACTERS = "invalid_characters"
    INVALID_FORMAT = "invalid_format"
    PROHIBITED_CONTENT = "prohibited_content"
    DOMAIN_INVALID = "domain_invalid"
    SPAM = "spam"


class GateRejectionKind(StrEnum):
    """Reasons the Abuse Gate (or the CSRF check in front of it) can veto a request."""

    RATE_LIMITED = "rate_limited"
    TOO_FAST = "too_fast"
    EXPIRED = "expired"
    CAPTCHA_FAILED = "captcha_failed"
    CSRF_FAILED = "csrf_failed"


class SubmissionState(StrEnum):
    """States a single submission passes through inside the orchestrator."""

    RECEIVED = "received"
    GATE_REJECTED = "gate_rejected"
    VALIDATING = "validating"
    VALIDATION_FAILED = "validation_failed"
    RENDERING = "rendering"
    SENDING = "sending"
    SENT = "sent"
    SEND_FAILED = "send_failed"


class Outcome(StrEnum):
    """Terminal outcome of a request, used for metrics and the audit trail."""

    SENT = "sent"
    GATE_REJECTED = "gate_rejected"
    VALIDATION_FAILED = "validation_failed"
    SPAM_DETECTED = "spam_detected"
    SEND_FAILED = "send_failed"
    MALFORMED = "malformed"
