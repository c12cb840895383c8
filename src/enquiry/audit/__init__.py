"""Submission audit trail: SQLite store, typed logger, and query CLI."""

from enquiry.audit.logger import AuditLogger
from enquiry.audit.models import AuditEntry, EventType
from enquiry.audit.store import (
    close_audit_db,
    init_audit_db,
    insert_audit_entry,
    query_audit_trail,
)

__all__ = [
    "AuditEntry",
    "AuditLogger",
    "EventType",
    "close_audit_db",
    "init_audit_db",
    "insert_audit_entry",
    "query_audit_trail",
]
