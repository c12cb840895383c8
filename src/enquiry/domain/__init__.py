"""Domain types, models, and errors for the enquiry service."""

from enquiry.domain.errors import EnquiryError, InvalidTransitionError, MalformedRequestError
from enquiry.domain.models import (
    ClientContext,
    GateDecision,
    RateState,
    ResponseEnvelope,
    SubmissionInput,
    ValidationIssue,
    ValidationResult,
)
from enquiry.domain.types import (
    FIELD_LABELS,
    FIELD_ORDER,
    ErrorCode,
    FieldId,
    GateRejectionKind,
    Outcome,
    SubmissionState,
)

__all__ = [
    "FIELD_LABELS",
    "FIELD_ORDER",
    "ClientContext",
    "EnquiryError",
    "ErrorCode",
    "FieldId",
    "GateDecision",
    "GateRejectionKind",
    "InvalidTransitionError",
    "MalformedRequestError",
    "Outcome",
    "RateState",
    "ResponseEnvelope",
    "SubmissionInput",
    "SubmissionState",
    "ValidationIssue",
    "ValidationResult",
]
