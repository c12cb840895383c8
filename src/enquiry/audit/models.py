"""Audit trail models for contact-form submissions.

One entry is written per request that reaches a terminal state.  Message
bodies are never stored; the submitter email is kept only so an operator
can trace a complaint back to a specific request.
"""

from enum import StrEnum

from pydantic import BaseModel


class EventType(StrEnum):
    """Types of events tracked in the audit trail."""

    SUBMISSION_SENT = "submission_sent"
    GATE_REJECTED = "gate_rejected"
    VALIDATION_FAILED = "validation_failed"
    SPAM_DETECTED = "spam_detected"
    SEND_FAILED = "send_failed"
    MALFORMED_REQUEST = "malformed_request"


class AuditEntry(BaseModel):
    """A single audit trail entry.

    All fields except event_type are optional; a malformed request, for
    example, has no submitter email.
    """

    event_type: EventType
    outcome: str | None = None
    rate_key: str | None = None
    remote_ip: str | None = None
    submitter_email: str | None = None
    detail: str | None = None
    metadata: dict[str, str] | None = None
