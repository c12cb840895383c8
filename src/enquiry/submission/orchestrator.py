"""Submission Orchestrator: Abuse Gate -> validation -> render -> send.

One ``SubmissionStateMachine`` is created per request and driven through a
single forward pass.  Every path ends in exactly one terminal state, one
``ResponseEnvelope``, one metrics increment and one audit entry.  The mail
transport is called only after both the gate and the validator passed, and
at most once.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable

import structlog

from enquiry.audit.logger import AuditLogger
from enquiry.domain.models import (
    ClientContext,
    GateDecision,
    ResponseEnvelope,
    SubmissionInput,
    ValidationResult,
)
from enquiry.domain.types import ErrorCode, Outcome, SubmissionState
from enquiry.email.models import Branding
from enquiry.email.renderer import EmailRenderer
from enquiry.email.transport import SmtpTransport
from enquiry.gate.abuse import AbuseGate
from enquiry.observability.metrics import GATE_REJECTIONS, SUBMISSIONS
from enquiry.submission.envelopes import (
    gate_rejected_envelope,
    malformed_envelope,
    send_failed_envelope,
    sent_envelope,
    validation_failed_envelope,
)
from enquiry.submission.machine import SubmissionStateMachine
from enquiry.submission.transitions import SubmissionEvent
from enquiry.validation.form import FormValidator

logger = structlog.get_logger()


class SubmissionOrchestrator:
    """Run one contact-form submission to a terminal state.

    Args:
        gate: The Abuse Gate.
        validator: The composite form validator.
        renderer: Builds the notification email.
        transport: Sends the notification.
        recipient: Mailbox that receives enquiries.
        from_name: Display name for the ``From`` header.
        branding: Contact details quoted in the apology message.
        audit_logger: Optional audit trail writer.
    """

    def __init__(
        self,
        gate: AbuseGate,
        validator: FormValidator,
        renderer: EmailRenderer,
        transport: SmtpTransport,
        recipient: str,
        from_name: str,
        branding: Branding | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._gate = gate
        self._validator = validator
        self._renderer = renderer
        self._transport = transport
        self._recipient = recipient
        self._from_name = from_name
        self._branding = branding or Branding()
        self._audit = audit_logger

    async def submit(
        self, submission: SubmissionInput, client: ClientContext
    ) -> ResponseEnvelope:
        """Process one submission.

        Never raises: unexpected errors are logged with full detail and
        answered with the generic apology.

        Args:
            submission: The raw submission as received.
            client: Rate key and remote address of the submitter.

        Returns:
            The envelope for the terminal state reached.
        """
        machine = SubmissionStateMachine()
        structlog.contextvars.bind_contextvars(rate_key=client.rate_key)
        try:
            return await self._run(machine, submission, client)
        except Exception:
            logger.exception("submission_pipeline_error", state=machine.state)
            if machine.state is SubmissionState.SENT:
                return sent_envelope(machine.suggestions)
            if not machine.is_terminal:
                machine.trigger(SubmissionEvent.FAULT)
                self._finish(Outcome.SEND_FAILED)
                self._record(
                    lambda audit: audit.log_send_failed(
                        client, "unexpected pipeline error", submission.email.strip()
                    )
                )
            return send_failed_envelope(self._branding)

    async def _run(
        self,
        machine: SubmissionStateMachine,
        submission: SubmissionInput,
        client: ClientContext,
    ) -> ResponseEnvelope:
        decision = await self._gate.check(submission, client)
        if not decision.allowed:
            machine.trigger(SubmissionEvent.GATE_REJECTED)
            return self.reject_at_gate(decision, client, submission.email.strip())
        machine.trigger(SubmissionEvent.GATE_PASSED)

        result = await self._validator.validate(submission)
        if not result.ok:
            machine.trigger(SubmissionEvent.VALIDATION_FAILED)
            return self._reject_invalid(result, client, submission.email.strip())
        machine.trigger(SubmissionEvent.VALIDATION_PASSED)
        machine.suggestions = result.suggestions

        rendered = self._renderer.render(submission)
        machine.trigger(SubmissionEvent.RENDERED)

        send_result = await self._transport.send(
            recipient=self._recipient,
            subject=rendered.subject,
            html_body=rendered.html_body,
            plain_text_body=rendered.plain_text_body,
            from_name=self._from_name,
            reply_to=rendered.reply_to,
        )

        if not send_result.success:
            machine.trigger(SubmissionEvent.SEND_FAILED)
            logger.error("submission_send_failed", failure=send_result.failure)
            self._finish(Outcome.SEND_FAILED)
            self._record(
                lambda audit: audit.log_send_failed(
                    client, send_result.error_detail or "send failed", rendered.reply_to
                )
            )
            return send_failed_envelope(self._branding)

        machine.trigger(SubmissionEvent.SEND_SUCCEEDED)
        logger.info("submission_sent", submitter_email=rendered.reply_to)
        self._finish(Outcome.SENT)
        self._record(lambda audit: audit.log_submission_sent(client, rendered.reply_to))
        return sent_envelope(machine.suggestions)

    def reject_at_gate(
        self,
        decision: GateDecision,
        client: ClientContext,
        submitter_email: str | None = None,
    ) -> ResponseEnvelope:
        """Account for a gate veto and build its envelope.

        Also used by the HTTP layer for CSRF failures, which are vetoed
        before the Abuse Gate runs.
        """
        if decision.kind is not None:
            GATE_REJECTIONS.labels(kind=decision.kind).inc()
        self._finish(Outcome.GATE_REJECTED)
        self._record(
            lambda audit: audit.log_gate_rejected(
                client,
                str(decision.kind),
                decision.retry_after_seconds,
                submitter_email,
            )
        )
        return gate_rejected_envelope(decision)

    def reject_malformed(self, reason: str, client: ClientContext | None) -> ResponseEnvelope:
        """Account for an unreadable request body and build its envelope."""
        self._finish(Outcome.MALFORMED)
        self._record(lambda audit: audit.log_malformed_request(client, reason))
        return malformed_envelope()

    def _reject_invalid(
        self,
        result: ValidationResult,
        client: ClientContext,
        submitter_email: str,
    ) -> ResponseEnvelope:
        if any(issue.code is ErrorCode.SPAM for issue in result.errors):
            logger.info("submission_spam_detected")
            self._finish(Outcome.SPAM_DETECTED)
            self._record(lambda audit: audit.log_spam_detected(client, submitter_email))
        else:
            codes = [str(issue.code) for issue in result.errors]
            logger.info("submission_validation_failed", error_codes=codes)
            self._finish(Outcome.VALIDATION_FAILED)
            self._record(
                lambda audit: audit.log_validation_failed(client, codes, submitter_email)
            )
        return validation_failed_envelope(result)

    @staticmethod
    def _finish(outcome: Outcome) -> None:
        SUBMISSIONS.labels(outcome=outcome).inc()

    def _record(self, write: Callable[[AuditLogger], int]) -> None:
        """Write one audit entry; a broken audit DB never changes the reply."""
        if self._audit is None:
            return
        try:
            write(self._audit)
        except sqlite3.Error:
            logger.exception("audit_write_failed")
