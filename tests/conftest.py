"""Shared pytest fixtures for the enquiry service test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from enquiry.domain.models import ClientContext, SubmissionInput

# Fixed clock reading shared by gate and orchestrator tests (epoch seconds).
NOW = 1_760_000_000.0

RECEIVED_AT = datetime(2026, 10, 19, 18, 5, tzinfo=UTC)

PayloadFactory = Callable[..., dict[str, Any]]
SubmissionFactory = Callable[..., SubmissionInput]


def _wire_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "fname": "Jane",
        "lname": "Doe",
        "email": "jane@example.com",
        "phone": "0411222333",
        "message": "I would like to learn about your mentorship program.",
        "formStartTime": int((NOW - 25) * 1000),
        "captchaToken": "captcha-ok",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def now() -> float:
    """The fixed clock reading, in epoch seconds."""
    return NOW


@pytest.fixture
def make_payload() -> PayloadFactory:
    """Build a valid wire-form submission (25 s after page load) with overrides."""
    return _wire_payload


@pytest.fixture
def make_submission() -> SubmissionFactory:
    """Build a ``SubmissionInput`` from the valid payload with overrides."""

    def _make(**overrides: Any) -> SubmissionInput:
        return SubmissionInput.model_validate(
            {**_wire_payload(**overrides), "received_at": RECEIVED_AT}
        )

    return _make


@pytest.fixture
def valid_submission(make_submission: SubmissionFactory) -> SubmissionInput:
    """The end-to-end example submission with a fixed receipt time."""
    return make_submission()


@pytest.fixture
def client_ctx() -> ClientContext:
    """A fresh rate key with a documentation-range address."""
    return ClientContext(rate_key="session:abc123", remote_ip="203.0.113.7")
