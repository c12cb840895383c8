"""Tests for AuditLogger convenience methods."""

from __future__ import annotations

from pathlib import Path

import pytest

from enquiry.audit.logger import AuditLogger
from enquiry.audit.store import close_audit_db, init_audit_db, query_audit_trail
from enquiry.domain.models import ClientContext

CLIENT = ClientContext(rate_key="session:abc123", remote_ip="203.0.113.7")


class TestAuditLogger:
    """Each method writes one entry with the right event type and outcome."""

    @pytest.fixture
    def logger_and_conn(self, tmp_path: Path):
        conn = init_audit_db(tmp_path / "audit.db")
        yield AuditLogger(conn), conn
        close_audit_db(conn)

    def test_log_submission_sent(self, logger_and_conn) -> None:
        audit, conn = logger_and_conn
        audit.log_submission_sent(CLIENT, "jane@example.com")
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "submission_sent"
        assert row["outcome"] == "sent"
        assert row["rate_key"] == "session:abc123"
        assert row["remote_ip"] == "203.0.113.7"
        assert row["submitter_email"] == "jane@example.com"

    def test_log_gate_rejected_with_retry_hint(self, logger_and_conn) -> None:
        audit, conn = logger_and_conn
        audit.log_gate_rejected(CLIENT, "rate_limited", retry_after_seconds=42)
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "gate_rejected"
        assert row["detail"] == "rate_limited"
        assert row["metadata"] == {"retry_after_seconds": "42"}
        assert row["submitter_email"] is None

    def test_log_gate_rejected_without_retry_hint(self, logger_and_conn) -> None:
        audit, conn = logger_and_conn
        audit.log_gate_rejected(CLIENT, "captcha_failed", submitter_email="x@example.com")
        row = query_audit_trail(conn)[0]
        assert row["metadata"] is None
        assert row["submitter_email"] == "x@example.com"

    def test_log_validation_failed_stores_codes_only(self, logger_and_conn) -> None:
        audit, conn = logger_and_conn
        audit.log_validation_failed(CLIENT, ["required", "too_short"], "jane@example.com")
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "validation_failed"
        assert row["detail"] == "required,too_short"

    def test_log_spam_detected(self, logger_and_conn) -> None:
        audit, conn = logger_and_conn
        audit.log_spam_detected(CLIENT)
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "spam_detected"
        assert row["outcome"] == "spam_detected"

    def test_log_send_failed(self, logger_and_conn) -> None:
        audit, conn = logger_and_conn
        audit.log_send_failed(CLIENT, "timeout: SMTPTimeoutError", "jane@example.com")
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "send_failed"
        assert row["detail"] == "timeout: SMTPTimeoutError"

    def test_log_malformed_request_without_client(self, logger_and_conn) -> None:
        audit, conn = logger_and_conn
        audit.log_malformed_request(None, "Invalid JSON data")
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "malformed_request"
        assert row["outcome"] == "malformed"
        assert row["rate_key"] is None

    def test_all_methods_return_valid_row_id(self, logger_and_conn) -> None:
        audit, _ = logger_and_conn
        ids = [
            audit.log_submission_sent(CLIENT, "a@example.com"),
            audit.log_gate_rejected(CLIENT, "too_fast"),
            audit.log_validation_failed(CLIENT, ["required"]),
            audit.log_spam_detected(CLIENT),
            audit.log_send_failed(CLIENT, "rejected: SMTPRecipientsRefused"),
            audit.log_malformed_request(CLIENT, "No form data received"),
        ]
        assert ids == sorted(ids)
        assert len(set(ids)) == 6
