"""SQLite-backed audit trail store with WAL mode and indexed queries.

One row per pipeline outcome.  Entries can be listed with filters or counted
per event and detail for a time window.  All values go through query
parameters; only fixed condition fragments are joined into SQL.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from enquiry.audit.models import AuditEntry

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    event_type TEXT NOT NULL,
    outcome TEXT,
    rate_key TEXT,
    remote_ip TEXT,
    submitter_email TEXT,
    detail TEXT,
    metadata TEXT
);
CREATE INDEX IF NOT EXISTS idx_audit_email ON audit_log (submitter_email);
CREATE INDEX IF NOT EXISTS idx_audit_event ON audit_log (event_type);
CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log (timestamp);
"""


def init_audit_db(db_path: Path | str) -> sqlite3.Connection:
    """Create and initialize the audit database with WAL mode and indexes.

    The connection is shared between the event loop and the threads the
    ASGI server may run handlers on, so same-thread checking is disabled.

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``.

    Returns:
        An open sqlite3.Connection with WAL mode enabled.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.executescript(_SCHEMA)
    return conn


def insert_audit_entry(conn: sqlite3.Connection, entry: AuditEntry) -> int:
    """Insert an audit entry into the database.

    Args:
        conn: An open database connection.
        entry: The audit entry to insert.

    Returns:
        The row ID of the inserted entry.
    """
    metadata_json: str | None = None
    if entry.metadata is not None:
        metadata_json = json.dumps(entry.metadata)

    timestamp = datetime.now(tz=UTC).strftime(_TIMESTAMP_FORMAT)

    cursor = conn.execute(
        """
        INSERT INTO audit_log (
            timestamp, event_type, outcome, rate_key, remote_ip,
            submitter_email, detail, metadata
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            timestamp,
            entry.event_type.value,
            entry.outcome,
            entry.rate_key,
            entry.remote_ip,
            entry.submitter_email,
            entry.detail,
            metadata_json,
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def query_audit_trail(
    conn: sqlite3.Connection,
    *,
    submitter_email: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    event_type: str | None = None,
    limit: int = 50,
) -> list[dict[str, Any]]:
    """Query the audit trail with flexible filtering.

    All filters are optional.  Results are ordered newest first.

    Args:
        conn: An open database connection.
        submitter_email: Filter by submitter email (case-insensitive).
        from_date: Filter entries on or after this ISO 8601 date.
        to_date: Filter entries on or before this ISO 8601 date.
        event_type: Filter by event type (exact match).
        limit: Maximum number of results to return (default 50).

    Returns:
        A list of dicts, one per matching audit entry, newest first.
    """
    conn.row_factory = sqlite3.Row

    conditions, params = _time_window(from_date, to_date)

    if submitter_email is not None:
        conditions.append("lower(submitter_email) = lower(?)")
        params.append(submitter_email)

    if event_type is not None:
        conditions.append("event_type = ?")
        params.append(event_type)

    query = (
        f"SELECT * FROM audit_log {_where(conditions)} "
        "ORDER BY timestamp DESC, id DESC LIMIT ?"
    )
    params.append(limit)

    rows = conn.execute(query, params).fetchall()

    results: list[dict[str, Any]] = []
    for row in rows:
        row_dict = dict(row)
        if row_dict.get("metadata") is not None:
            row_dict["metadata"] = json.loads(row_dict["metadata"])
        results.append(row_dict)

    return results


def summarize_audit_trail(
    conn: sqlite3.Connection,
    *,
    from_date: str | None = None,
    to_date: str | None = None,
) -> list[dict[str, Any]]:
    """Count entries per ``(event_type, detail)`` pair, most frequent first.

    Gate rejections store their kind in ``detail``, so the summary shows
    how many visitors were turned away for each reason.

    Args:
        conn: An open database connection.
        from_date: Count entries on or after this ISO 8601 date.
        to_date: Count entries on or before this ISO 8601 date.

    Returns:
        Dicts with ``event_type``, ``detail`` and ``count`` keys.
    """
    conn.row_factory = sqlite3.Row
    conditions, params = _time_window(from_date, to_date)
    rows = conn.execute(
        f"SELECT event_type, detail, COUNT(*) AS count FROM audit_log {_where(conditions)} "
        "GROUP BY event_type, detail ORDER BY count DESC, event_type, detail",
        params,
    ).fetchall()
    return [dict(row) for row in rows]


def _time_window(
    from_date: str | None, to_date: str | None
) -> tuple[list[str], list[str | int]]:
    conditions: list[str] = []
    params: list[str | int] = []
    if from_date is not None:
        conditions.append("timestamp >= ?")
        params.append(from_date)
    if to_date is not None:
        conditions.append("timestamp <= ?")
        params.append(to_date)
    return conditions, params


def _where(conditions: list[str]) -> str:
    return "WHERE " + " AND ".join(conditions) if conditions else ""


def close_audit_db(conn: sqlite3.Connection) -> None:
    """Close the audit database connection."""
    conn.close()
