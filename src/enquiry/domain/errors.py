"""Domain-specific exception classes for the contact-form pipeline.

Gate rejections, validation failures and transport failures are returned as
values; only programming errors and unreadable requests are raised.
"""

from enquiry.domain.types import SubmissionState


class EnquiryError(Exception):
    """Base class for all domain errors in the enquiry service."""


class MalformedRequestError(EnquiryError):
    """Raised when a request body cannot be parsed into form fields.

    Attributes:
        reason: Short server-side description of what was wrong.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class InvalidTransitionError(EnquiryError):
    """Raised when the submission state machine is driven out of order.

    Attributes:
        current_state: The state the machine was in when the transition was attempted.
        event: The event that was rejected.
    """

    def __init__(self, current_state: SubmissionState, event: str) -> None:
        self.current_state = current_state
        self.event = event
        super().__init__(
            f"Cannot apply event '{event}' in state '{current_state}'"
        )
