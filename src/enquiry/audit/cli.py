"""Operator queries over the submission audit trail.

Two subcommands share the time-window options (``--from-date``,
``--to-date`` and the ``--last`` shorthand):

- ``list`` prints matching entries, newest first
- ``summary`` counts entries per event and detail, so a burst of
  ``gate_rejected / rate_limited`` stands out at a glance

Usage::

    python -m enquiry.audit.cli summary --last 24h
    python -m enquiry.audit.cli list --email jane@example.com --format json
"""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from enquiry.audit.models import EventType
from enquiry.audit.store import (
    close_audit_db,
    init_audit_db,
    query_audit_trail,
    summarize_audit_trail,
)

_DURATION_UNITS = {"d": "days", "h": "hours"}

LIST_COLUMNS = (
    ("Timestamp", "timestamp", 20),
    ("Event", "event_type", 18),
    ("Email", "submitter_email", 30),
    ("Rate key", "rate_key", 16),
    ("Detail", "detail", 30),
)
SUMMARY_COLUMNS = (
    ("Event", "event_type", 18),
    ("Detail", "detail", 30),
    ("Count", "count", 8),
)


def build_parser() -> argparse.ArgumentParser:
    """Create the parser with ``list`` and ``summary`` subcommands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--from-date", help="Start date (YYYY-MM-DD)")
    common.add_argument("--to-date", help="End date (YYYY-MM-DD)")
    common.add_argument("--last", help='Shorthand window, e.g. "7d" or "24h"')
    common.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        dest="output_format",
        help="Output format (default: table)",
    )
    common.add_argument(
        "--db",
        default="data/audit.db",
        help="Path to audit database (default: data/audit.db)",
    )

    parser = argparse.ArgumentParser(description="Query the contact-form audit trail")
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", parents=[common], help="List audit entries")
    list_cmd.add_argument("--email", help="Submitter email (case-insensitive)")
    list_cmd.add_argument(
        "--event-type",
        choices=[event.value for event in EventType],
        help="Only entries of this event type",
    )
    list_cmd.add_argument("--limit", type=int, default=50, help="Maximum rows (default: 50)")

    commands.add_parser("summary", parents=[common], help="Count entries per event and detail")

    return parser


def parse_last_duration(last: str, now: datetime | None = None) -> str:
    """Turn ``"7d"`` or ``"24h"`` into the ISO 8601 time that long ago.

    Raises:
        ValueError: If the unit is not ``d`` or ``h`` or the count is not an
            integer.
    """
    unit = _DURATION_UNITS.get(last[-1:])
    try:
        amount = int(last[:-1])
    except ValueError:
        unit = None
    if unit is None:
        msg = f"Unrecognized duration format: {last!r}. Use 'd' for days or 'h' for hours."
        raise ValueError(msg)

    start = (now or datetime.now(tz=UTC)) - timedelta(**{unit: amount})
    return start.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_table(
    rows: list[dict[str, Any]],
    columns: Sequence[tuple[str, str, int]] = LIST_COLUMNS,
) -> str:
    """Render rows as fixed-width columns, truncating long cells with ``...``."""
    if not rows:
        return "No results found."

    def cell(value: Any, width: int) -> str:
        text = "" if value is None else str(value)
        return text if len(text) <= width else text[: width - 3] + "..."

    header = "  ".join(title.ljust(width) for title, _, width in columns)
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append("  ".join(cell(row.get(key), width).ljust(width) for _, key, width in columns))
    return "\n".join(lines)


def format_json(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run the chosen query and print the result."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from_date = args.from_date
    if args.last:
        try:
            from_date = parse_last_duration(args.last)
        except ValueError as exc:
            parser.error(str(exc))

    db_path = Path(args.db)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = init_audit_db(db_path)

    try:
        if args.command == "summary":
            rows = summarize_audit_trail(conn, from_date=from_date, to_date=args.to_date)
            columns = SUMMARY_COLUMNS
        else:
            rows = query_audit_trail(
                conn,
                submitter_email=args.email,
                from_date=from_date,
                to_date=args.to_date,
                event_type=args.event_type,
                limit=args.limit,
            )
            columns = LIST_COLUMNS

        print(format_json(rows) if args.output_format == "json" else format_table(rows, columns))
    finally:
        close_audit_db(conn)


if __name__ == "__main__":
    main()
