"""Composite form validator.

Runs every field validator without short-circuiting so the visitor sees all
problems at once, then the cross-field checks.  Result ordering:

1. ``required`` issues, in field declaration order
2. format/length issues, per field in declaration order (the DNS domain
   check sits with the email issues)
3. cross-field issues (script injection)

A spam match replaces all of the above with one deliberately vague issue.
"""

from __future__ import annotations

import structlog

from enquiry.domain.models import SubmissionInput, ValidationIssue, ValidationResult
from enquiry.domain.types import FIELD_ORDER, ErrorCode, FieldId
from enquiry.validation.domains import DomainChecker, domain_of
from enquiry.validation.fields import validate_field
from enquiry.validation.spam import SpamScanner

logger = structlog.get_logger()

SPAM_MESSAGE = "Message appears to contain spam content"
INJECTION_MESSAGE = "Message contains prohibited content"
DOMAIN_MESSAGE = "Email domain appears to be invalid"


class FormValidator:
    """Validate a whole ``SubmissionInput`` in one pass.

    Args:
        spam_scanner: Compiled spam/injection rules.  Defaults to built-ins.
        domain_checker: DNS checker for the email domain.  ``None`` disables
            the lookup.
        spam_detection_enabled: When False the spam-signature scan is skipped;
            the injection scan always runs.
    """

    def __init__(
        self,
        spam_scanner: SpamScanner | None = None,
        domain_checker: DomainChecker | None = None,
        spam_detection_enabled: bool = True,
    ) -> None:
        self._spam = spam_scanner or SpamScanner()
        self._domains = domain_checker
        self._spam_detection_enabled = spam_detection_enabled

    async def validate(self, submission: SubmissionInput) -> ValidationResult:
        """Validate every field plus the cross-field checks.

        Args:
            submission: The raw submission.

        Returns:
            The aggregated ``ValidationResult``.
        """
        values = [submission.value_of(field_id) for field_id in FIELD_ORDER]

        if self._spam_detection_enabled and self._spam.looks_like_spam(values):
            logger.info("spam_signature_matched")
            return ValidationResult(
                errors=(ValidationIssue(field=None, code=ErrorCode.SPAM, message=SPAM_MESSAGE),)
            )

        required: list[ValidationIssue] = []
        formats: list[ValidationIssue] = []
        suggestions: list[str] = []

        for field_id in FIELD_ORDER:
            result = validate_field(field_id, submission.value_of(field_id))
            suggestions.extend(result.suggestions)
            for issue in result.errors:
                (required if issue.code is ErrorCode.REQUIRED else formats).append(issue)

            if field_id is FieldId.EMAIL and result.ok and not result.suggestions:
                domain_issue = await self._check_domain(submission.email)
                if domain_issue is not None:
                    formats.append(domain_issue)

        cross: list[ValidationIssue] = []
        if submission.message.strip() and self._spam.contains_injection(submission.message):
            cross.append(
                ValidationIssue(
                    field=None, code=ErrorCode.PROHIBITED_CONTENT, message=INJECTION_MESSAGE
                )
            )

        return ValidationResult(
            errors=(*required, *formats, *cross),
            suggestions=tuple(suggestions),
        )

    async def _check_domain(self, email: str) -> ValidationIssue | None:
        if self._domains is None:
            return None
        domain = domain_of(email)
        known = await self._domains.has_mail_records(domain)
        if known is False:
            return ValidationIssue(
                field=FieldId.EMAIL, code=ErrorCode.DOMAIN_INVALID, message=DOMAIN_MESSAGE
            )
        return None
