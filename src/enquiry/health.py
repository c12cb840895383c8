"""Liveness and readiness probes.

``GET /health`` answers 200 while the process is up.  ``GET /ready`` runs
every readiness check and answers 503 if any of them reports ``fail``:

- ``audit_db``: the audit connection answers ``SELECT 1``
- ``mail_transport``: an SMTP host and sender address are configured
- ``captcha``: the verifier has a secret, or is explicitly ``disabled``
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

Check = Callable[[dict[str, Any]], Awaitable[str]]


async def check_audit_db(services: dict[str, Any]) -> str:
    conn = services.get("audit_conn")
    if conn is None:
        return "fail"
    try:
        await asyncio.to_thread(conn.execute, "SELECT 1")
    except sqlite3.Error:
        return "fail"
    return "ok"


async def check_mail_transport(services: dict[str, Any]) -> str:
    transport = services.get("transport")
    return "ok" if transport is not None and transport.configured else "fail"


async def check_captcha(services: dict[str, Any]) -> str:
    """A disabled verifier is reported but does not block readiness."""
    captcha = services.get("captcha")
    if captcha is None:
        return "fail"
    if not captcha.enabled:
        return "disabled"
    return "ok" if captcha.configured else "fail"


READINESS_CHECKS: dict[str, Check] = {
    "audit_db": check_audit_db,
    "mail_transport": check_mail_transport,
    "captcha": check_captcha,
}


def register_health_routes(app: FastAPI) -> None:
    """Attach ``/health`` and ``/ready`` to *app*."""

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        services: dict[str, Any] = request.app.state.services
        checks = {name: await check(services) for name, check in READINESS_CHECKS.items()}

        if any(result == "fail" for result in checks.values()):
            return JSONResponse({"status": "not_ready", "checks": checks}, status_code=503)
        return JSONResponse({"status": "ready", "checks": checks})
