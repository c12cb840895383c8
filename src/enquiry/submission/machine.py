"""SubmissionStateMachine class with trigger, history, and valid_events."""

from __future__ import annotations

from enquiry.domain.errors import InvalidTransitionError
from enquiry.domain.types import SubmissionState
from enquiry.submission.transitions import TERMINAL_STATES, TRANSITIONS


class SubmissionStateMachine:
    """Finite state machine governing one pass through the pipeline.

    One instance per request.  The machine only moves forward; once it
    reaches a terminal state every further event is rejected, so a request
    can never reach the mail transport twice.

    Usage::

        sm = SubmissionStateMachine()
        sm.trigger("gate_passed")        # -> VALIDATING
        sm.trigger("validation_passed")  # -> RENDERING
        sm.trigger("rendered")           # -> SENDING
        sm.trigger("send_succeeded")     # -> SENT (terminal)
    """

    def __init__(self) -> None:
        self._state: SubmissionState = SubmissionState.RECEIVED
        self._history: list[tuple[SubmissionState, str, SubmissionState]] = []
        # Typo hints from validation, still owed to the visitor once sent.
        self.suggestions: tuple[str, ...] = ()

    @property
    def state(self) -> SubmissionState:
        """Return the current submission state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Return True once the submission has reached a terminal state."""
        return self._state in TERMINAL_STATES

    @property
    def history(self) -> list[tuple[SubmissionState, str, SubmissionState]]:
        """Return a copy of the ``(from_state, event, to_state)`` history."""
        return list(self._history)

    def trigger(self, event: str) -> SubmissionState:
        """Apply an event to the current state and transition.

        Args:
            event: The event string (e.g. ``"gate_passed"``).

        Returns:
            The new state after the transition.

        Raises:
            InvalidTransitionError: If the transition is not allowed from
                the current state, or if the machine is in a terminal state.
        """
        if self.is_terminal:
            raise InvalidTransitionError(self._state, event)

        key = (self._state, event)
        if key not in TRANSITIONS:
            raise InvalidTransitionError(self._state, event)

        old_state = self._state
        new_state = TRANSITIONS[key]
        self._history.append((old_state, event, new_state))
        self._state = new_state
        return new_state

    def get_valid_events(self) -> list[str]:
        """Return a sorted list of events valid from the current state."""
        if self.is_terminal:
            return []
        return sorted(event for state, event in TRANSITIONS if state == self._state)
