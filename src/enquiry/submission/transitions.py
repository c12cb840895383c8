"""Transition map defining all valid (state, event) -> state mappings."""

from enum import StrEnum

from enquiry.domain.types import SubmissionState


class SubmissionEvent(StrEnum):
    """Events that move a submission through the pipeline."""

    GATE_PASSED = "gate_passed"
    GATE_REJECTED = "gate_rejected"
    VALIDATION_PASSED = "validation_passed"
    VALIDATION_FAILED = "validation_failed"
    RENDERED = "rendered"
    SEND_SUCCEEDED = "send_succeeded"
    SEND_FAILED = "send_failed"
    FAULT = "fault"


# All valid (current_state, event_string) -> next_state mappings.
# Any pair not in this dict is an invalid transition.
TRANSITIONS: dict[tuple[SubmissionState, str], SubmissionState] = {
    # From RECEIVED
    (SubmissionState.RECEIVED, SubmissionEvent.GATE_PASSED): SubmissionState.VALIDATING,
    (SubmissionState.RECEIVED, SubmissionEvent.GATE_REJECTED): SubmissionState.GATE_REJECTED,
    (SubmissionState.RECEIVED, SubmissionEvent.FAULT): SubmissionState.SEND_FAILED,
    # From VALIDATING
    (SubmissionState.VALIDATING, SubmissionEvent.VALIDATION_PASSED): SubmissionState.RENDERING,
    (SubmissionState.VALIDATING, SubmissionEvent.VALIDATION_FAILED): (
        SubmissionState.VALIDATION_FAILED
    ),
    (SubmissionState.VALIDATING, SubmissionEvent.FAULT): SubmissionState.SEND_FAILED,
    # From RENDERING
    (SubmissionState.RENDERING, SubmissionEvent.RENDERED): SubmissionState.SENDING,
    (SubmissionState.RENDERING, SubmissionEvent.FAULT): SubmissionState.SEND_FAILED,
    # From SENDING
    (SubmissionState.SENDING, SubmissionEvent.SEND_SUCCEEDED): SubmissionState.SENT,
    (SubmissionState.SENDING, SubmissionEvent.SEND_FAILED): SubmissionState.SEND_FAILED,
    (SubmissionState.SENDING, SubmissionEvent.FAULT): SubmissionState.SEND_FAILED,
}

# States that reject all events -- no outgoing transitions allowed.
TERMINAL_STATES: frozenset[SubmissionState] = frozenset(
    {
        SubmissionState.GATE_REJECTED,
        SubmissionState.VALIDATION_FAILED,
        SubmissionState.SENT,
        SubmissionState.SEND_FAILED,
    }
)
