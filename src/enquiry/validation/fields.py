"""Single-field validators.

Each validator is pure and total: any input, however odd, produces a
``ValidationResult`` and never an exception.  A blank field yields exactly
one ``required`` issue and none of that field's format issues.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from enquiry.domain.models import ValidationIssue, ValidationResult
from enquiry.domain.types import FIELD_LABELS, ErrorCode, FieldId
from enquiry.validation.domains import suggest_correction

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 30
EMAIL_MAX_LENGTH = 254
PHONE_MIN_DIGITS = 8
PHONE_MAX_DIGITS = 15
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 2000

_NAME_PATTERN = re.compile(r"[A-Za-z\s\-']+")
_EMAIL_PATTERN = re.compile(
    r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}"
)
_PHONE_FORMATTING = re.compile(r"[\s\-()+]")
_PHONE_PATTERN = re.compile(r"\+?[0-9\s\-()]+")
_DIGIT = re.compile(r"[0-9]")

# Script-injection fragments that never belong in an address
EMAIL_BLACKLIST: tuple[str, ...] = (
    "javascript:",
    "data:",
    "vbscript:",
    "onload=",
    "onerror=",
    "<script",
    "</script>",
    "eval(",
    "document.cookie",
)


def _issue(field_id: FieldId, code: ErrorCode, message: str) -> ValidationIssue:
    return ValidationIssue(field=field_id, code=code, message=message)


def _validate_name(field_id: FieldId, value: str) -> list[ValidationIssue]:
    label = FIELD_LABELS[field_id]
    issues: list[ValidationIssue] = []
    if len(value) < NAME_MIN_LENGTH:
        issues.append(
            _issue(
                field_id,
                ErrorCode.TOO_SHORT,
                f"{label} must be at least {NAME_MIN_LENGTH} characters",
            )
        )
    elif len(value) > NAME_MAX_LENGTH:
        issues.append(
            _issue(
                field_id,
                ErrorCode.TOO_LONG,
                f"{label} must be no more than {NAME_MAX_LENGTH} characters",
            )
        )
    if not _NAME_PATTERN.fullmatch(value):
        issues.append(
            _issue(
                field_id,
                ErrorCode.INVALID_CHARACTERS,
                f"{label} can only contain letters, spaces, hyphens, and apostrophes",
            )
        )
    return issues


def _validate_email(value: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if len(value) > EMAIL_MAX_LENGTH:
        issues.append(_issue(FieldId.EMAIL, ErrorCode.TOO_LONG, "Email address is too long"))
    if not _EMAIL_PATTERN.fullmatch(value):
        issues.append(
            _issue(FieldId.EMAIL, ErrorCode.INVALID_FORMAT, "Please enter a valid email address")
        )
    lowered = value.lower()
    if any(fragment in lowered for fragment in EMAIL_BLACKLIST):
        issues.append(
            _issue(
                FieldId.EMAIL, ErrorCode.PROHIBITED_CONTENT, "Email contains invalid characters"
            )
        )
    return issues


def _validate_phone(value: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    digits = _PHONE_FORMATTING.sub("", value)
    if len(digits) < PHONE_MIN_DIGITS:
        issues.append(_issue(FieldId.PHONE, ErrorCode.TOO_SHORT, "Phone number is too short"))
    elif len(digits) > PHONE_MAX_DIGITS:
        issues.append(_issue(FieldId.PHONE, ErrorCode.TOO_LONG, "Phone number is too long"))
    if not _PHONE_PATTERN.fullmatch(value):
        issues.append(
            _issue(
                FieldId.PHONE,
                ErrorCode.INVALID_CHARACTERS,
                "Phone number contains invalid characters",
            )
        )
    if not _DIGIT.search(digits):
        issues.append(
            _issue(FieldId.PHONE, ErrorCode.INVALID_FORMAT, "Phone number must contain digits")
        )
    return issues


def _validate_message(value: str) -> list[ValidationIssue]:
    if len(value) < MESSAGE_MIN_LENGTH:
        return [
            _issue(
                FieldId.MESSAGE,
                ErrorCode.TOO_SHORT,
                f"Message must be at least {MESSAGE_MIN_LENGTH} characters",
            )
        ]
    if len(value) > MESSAGE_MAX_LENGTH:
        return [
            _issue(
                FieldId.MESSAGE,
                ErrorCode.TOO_LONG,
                f"Message must be no more than {MESSAGE_MAX_LENGTH} characters",
            )
        ]
    return []


_FORMAT_RULES: dict[FieldId, Callable[[str], list[ValidationIssue]]] = {
    FieldId.FIRST_NAME: lambda v: _validate_name(FieldId.FIRST_NAME, v),
    FieldId.LAST_NAME: lambda v: _validate_name(FieldId.LAST_NAME, v),
    FieldId.EMAIL: _validate_email,
    FieldId.PHONE: _validate_phone,
    FieldId.MESSAGE: _validate_message,
}


def validate_field(field_id: FieldId, raw_value: str | None) -> ValidationResult:
    """Validate one form field against its syntactic rules.

    The value is trimmed before every rule.  For ``email`` a known-typo
    domain adds a "Did you mean ...?" suggestion without failing the field.
    The DNS domain check is not done here; see ``FormValidator``.

    Args:
        field_id: Which field the value belongs to.
        raw_value: The value as received (``None`` is treated as blank).

    Returns:
        A ``ValidationResult`` whose issues all carry ``field_id``.
    """
    value = (raw_value or "").strip()
    if not value:
        return ValidationResult(
            errors=(
                _issue(field_id, ErrorCode.REQUIRED, f"{FIELD_LABELS[field_id]} is required"),
            )
        )

    issues = _FORMAT_RULES[field_id](value)

    suggestions: tuple[str, ...] = ()
    if field_id is FieldId.EMAIL and not issues:
        corrected = suggest_correction(value)
        if corrected is not None:
            suggestions = (f"Did you mean {corrected}?",)

    return ValidationResult(errors=tuple(issues), suggestions=suggestions)
