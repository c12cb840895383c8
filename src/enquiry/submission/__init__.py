"""Submission pipeline: state machine, envelopes, and orchestrator."""

from enquiry.submission.envelopes import (
    apology_message,
    gate_rejected_envelope,
    malformed_envelope,
    post_only_envelope,
    send_failed_envelope,
    sent_envelope,
    validation_failed_envelope,
)
from enquiry.submission.machine import SubmissionStateMachine
from enquiry.submission.orchestrator import SubmissionOrchestrator
from enquiry.submission.transitions import TERMINAL_STATES, TRANSITIONS, SubmissionEvent

__all__ = [
    "TERMINAL_STATES",
    "TRANSITIONS",
    "SubmissionEvent",
    "SubmissionOrchestrator",
    "SubmissionStateMachine",
    "apology_message",
    "gate_rejected_envelope",
    "malformed_envelope",
    "post_only_envelope",
    "send_failed_envelope",
    "sent_envelope",
    "validation_failed_envelope",
]
