"""Pydantic v2 models for the data that flows through one submission."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from enquiry.domain.types import ErrorCode, FieldId, GateRejectionKind

_TEXT_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "message",
    "form_start_time",
    "captcha_token",
    "csrf_token",
)


class SubmissionInput(BaseModel):
    """Raw form fields received once per request.

    Accepts the wire names posted by the site (``fname``, ``formStartTime``,
    ``g-recaptcha-response`` ...) as well as the Python field names.  Values
    are kept as received apart from coercion to ``str``; trimming and every
    other judgement belongs to the validators.  ``received_at`` is the
    server-side receipt time and is the only clock reading the renderer sees.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    first_name: str = Field(default="", validation_alias=AliasChoices("fname", "first_name"))
    last_name: str = Field(default="", validation_alias=AliasChoices("lname", "last_name"))
    email: str = ""
    phone: str = ""
    message: str = ""
    form_start_time: str = Field(
        default="", validation_alias=AliasChoices("formStartTime", "form_start_time")
    )
    captcha_token: str = Field(
        default="",
        validation_alias=AliasChoices("captchaToken", "g-recaptcha-response", "captcha_token"),
    )
    csrf_token: str = Field(default="", validation_alias=AliasChoices("csrf_token", "csrfToken"))
    received_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_to_text(cls, v: object) -> str:
        """Turn scalars into strings; anything structured becomes empty."""
        if v is None or isinstance(v, bool):
            return ""
        if isinstance(v, str):
            return v
        if isinstance(v, int | float):
            return str(v)
        return ""

    def value_of(self, field_id: FieldId) -> str:
        """Return the raw value for a validated form field."""
        return {
            FieldId.FIRST_NAME: self.first_name,
            FieldId.LAST_NAME: self.last_name,
            FieldId.EMAIL: self.email,
            FieldId.PHONE: self.phone,
            FieldId.MESSAGE: self.message,
        }[field_id]


class ValidationIssue(BaseModel):
    """One validation problem.  ``field`` is ``None`` for cross-field checks."""

    model_config = ConfigDict(frozen=True)

    field: FieldId | None
    code: ErrorCode
    message: str


class ValidationResult(BaseModel):
    """Ordered validation issues plus non-blocking suggestions."""

    model_config = ConfigDict(frozen=True)

    errors: tuple[ValidationIssue, ...] = ()
    suggestions: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """Return True when no blocking issue was found."""
        return not self.errors

    @property
    def messages(self) -> list[str]:
        """Return the user-facing error messages in order."""
        return [issue.message for issue in self.errors]


class ClientContext(BaseModel):
    """Who is submitting: the rate-limit key and the address reported to CAPTCHA."""

    model_config = ConfigDict(frozen=True)

    rate_key: str
    remote_ip: str | None = None


class RateState(BaseModel):
    """Submission counters for one session/IP key.  Timestamps are epoch seconds."""

    model_config = ConfigDict(frozen=True)

    last_submission_at: float
    window_count: int
    window_started_at: float


class GateDecision(BaseModel):
    """Verdict of one Abuse Gate check (or of the gate as a whole)."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    kind: GateRejectionKind | None = None
    message: str = ""
    retry_after_seconds: int | None = None

    @classmethod
    def allow(cls) -> GateDecision:
        """Return a passing decision."""
        return cls(allowed=True)

    @classmethod
    def reject(
        cls,
        kind: GateRejectionKind,
        message: str,
        retry_after_seconds: int | None = None,
    ) -> GateDecision:
        """Return a rejecting decision."""
        return cls(
            allowed=False,
            kind=kind,
            message=message,
            retry_after_seconds=retry_after_seconds,
        )


class ResponseEnvelope(BaseModel):
    """The single JSON document returned to the browser for every outcome."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool
    message: str
    errors: list[str] | None = None
    retry_after_seconds: int | None = Field(default=None, alias="retryAfterSeconds")
    suggestions: list[str] | None = None
    csrf_token: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire names, omitting absent optional members."""
        return self.model_dump(by_alias=True, exclude_none=True)
