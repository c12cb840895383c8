"""Convenience class for inserting audit trail entries.

Each terminal outcome of the submission pipeline has one method that builds
a properly structured :class:`AuditEntry` and inserts it via
:func:`insert_audit_entry`.
"""

from __future__ import annotations

import sqlite3

from enquiry.audit.models import AuditEntry, EventType
from enquiry.audit.store import insert_audit_entry
from enquiry.domain.models import ClientContext
from enquiry.domain.types import Outcome


class AuditLogger:
    """Typed convenience API for inserting audit entries.

    Args:
        conn: An open SQLite connection to the audit database.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _insert(
        self,
        event_type: EventType,
        outcome: Outcome,
        client: ClientContext | None,
        submitter_email: str | None = None,
        detail: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> int:
        entry = AuditEntry(
            event_type=event_type,
            outcome=outcome,
            rate_key=client.rate_key if client else None,
            remote_ip=client.remote_ip if client else None,
            submitter_email=submitter_email or None,
            detail=detail,
            metadata=metadata,
        )
        return insert_audit_entry(self._conn, entry)

    def log_submission_sent(self, client: ClientContext, submitter_email: str) -> int:
        """Log a message that reached the mailbox.

        Args:
            client: Rate key and remote address of the submitter.
            submitter_email: The reply-to address of the enquiry.

        Returns:
            The row ID of the inserted audit entry.
        """
        return self._insert(EventType.SUBMISSION_SENT, Outcome.SENT, client, submitter_email)

    def log_gate_rejected(
        self,
        client: ClientContext,
        kind: str,
        retry_after_seconds: int | None = None,
        submitter_email: str | None = None,
    ) -> int:
        """Log an Abuse Gate or CSRF veto.

        Args:
            client: Rate key and remote address of the submitter.
            kind: The ``GateRejectionKind`` value.
            retry_after_seconds: Retry hint handed to the client, if any.
            submitter_email: Email field as submitted (unvalidated).

        Returns:
            The row ID of the inserted audit entry.
        """
        metadata = None
        if retry_after_seconds is not None:
            metadata = {"retry_after_seconds": str(retry_after_seconds)}
        return self._insert(
            EventType.GATE_REJECTED,
            Outcome.GATE_REJECTED,
            client,
            submitter_email,
            detail=kind,
            metadata=metadata,
        )

    def log_validation_failed(
        self,
        client: ClientContext,
        error_codes: list[str],
        submitter_email: str | None = None,
    ) -> int:
        """Log a submission rejected by field validation.

        Only the error codes are stored, never the offending values.
        """
        return self._insert(
            EventType.VALIDATION_FAILED,
            Outcome.VALIDATION_FAILED,
            client,
            submitter_email,
            detail=",".join(error_codes),
        )

    def log_spam_detected(self, client: ClientContext, submitter_email: str | None = None) -> int:
        """Log a submission matched by the spam scan."""
        return self._insert(
            EventType.SPAM_DETECTED, Outcome.SPAM_DETECTED, client, submitter_email
        )

    def log_send_failed(
        self,
        client: ClientContext,
        detail: str,
        submitter_email: str | None = None,
    ) -> int:
        """Log a transport failure or unexpected pipeline error.

        Args:
            client: Rate key and remote address of the submitter.
            detail: Server-side failure description (never shown to users).
            submitter_email: The reply-to address of the enquiry.

        Returns:
            The row ID of the inserted audit entry.
        """
        return self._insert(
            EventType.SEND_FAILED, Outcome.SEND_FAILED, client, submitter_email, detail=detail
        )

    def log_malformed_request(self, client: ClientContext | None, reason: str) -> int:
        """Log a request whose body could not be read as form data."""
        return self._insert(
            EventType.MALFORMED_REQUEST, Outcome.MALFORMED, client, detail=reason
        )
