"""HTTP endpoint for the website contact form.

``POST /contact`` accepts JSON or form-encoded bodies and always answers
HTTP 200 with a JSON ``ResponseEnvelope`` (plus ``Retry-After`` when rate
limited), since the browser client treats any non-2xx status as a network
failure.  ``GET /contact`` issues the per-session CSRF token.  ``OPTIONS``
answers 200; real CORS preflights are handled by ``CORSMiddleware`` before
they reach this router.
"""

from __future__ import annotations

import hmac
import json
import secrets
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from enquiry.domain.errors import MalformedRequestError
from enquiry.domain.models import ClientContext, GateDecision, ResponseEnvelope, SubmissionInput
from enquiry.domain.types import GateRejectionKind
from enquiry.submission.envelopes import post_only_envelope
from enquiry.submission.orchestrator import SubmissionOrchestrator

logger = structlog.get_logger()

router = APIRouter()

CSRF_SESSION_KEY = "csrf_token"
SESSION_ID_KEY = "sid"
CSRF_FAILED_MESSAGE = "Your session has expired. Please reload the page and try again."

# Server-owned fields a client must not be able to set.
_SERVER_FIELDS = ("received_at",)


async def read_form_body(request: Request) -> dict[str, Any]:
    """Read the request body as a flat mapping of form fields.

    Args:
        request: The incoming request.

    Returns:
        Field name to raw value.  Values are not yet coerced or trimmed.

    Raises:
        MalformedRequestError: If the body is invalid JSON, not a JSON
            object, an unparseable form, or carries no fields at all.
    """
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        raw = await request.body()
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedRequestError("Invalid JSON data") from exc
        if not isinstance(parsed, dict):
            raise MalformedRequestError("JSON body is not an object")
        data: dict[str, Any] = parsed
    else:
        try:
            form = await request.form()
        except (HTTPException, MultiPartException) as exc:
            raise MalformedRequestError("Unreadable form body") from exc
        data = {key: value for key, value in form.items() if isinstance(value, str)}

    if not data:
        raise MalformedRequestError("No form data received")

    for key in _SERVER_FIELDS:
        data.pop(key, None)
    return data


def client_context(request: Request) -> ClientContext:
    """Derive the rate-limit key: the session id if one was issued, else the IP."""
    remote_ip = request.client.host if request.client else None
    session_id = request.session.get(SESSION_ID_KEY)
    if session_id:
        return ClientContext(rate_key=f"session:{session_id}", remote_ip=remote_ip)
    return ClientContext(rate_key=f"ip:{remote_ip or 'unknown'}", remote_ip=remote_ip)


def issue_csrf_token(request: Request) -> str:
    """Return the session's CSRF token, creating it (and a session id) if absent."""
    request.session.setdefault(SESSION_ID_KEY, secrets.token_hex(16))
    token = request.session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_hex(32)
        request.session[CSRF_SESSION_KEY] = token
    return token


def csrf_token_valid(request: Request, submitted: str) -> bool:
    """Constant-time comparison of the submitted token with the session's."""
    expected = request.session.get(CSRF_SESSION_KEY)
    if not expected or not submitted:
        return False
    return hmac.compare_digest(expected.encode(), submitted.encode())


def envelope_response(envelope: ResponseEnvelope) -> JSONResponse:
    """Serialize an envelope as HTTP 200, adding ``Retry-After`` when present."""
    headers: dict[str, str] = {}
    if envelope.retry_after_seconds is not None:
        headers["Retry-After"] = str(envelope.retry_after_seconds)
    return JSONResponse(content=envelope.to_payload(), status_code=200, headers=headers)


@router.post("/contact")
async def submit_contact(request: Request) -> JSONResponse:
    """Run one submission through CSRF check and the orchestrator."""
    orchestrator: SubmissionOrchestrator = request.app.state.services["orchestrator"]
    csrf_enabled: bool = request.app.state.settings.csrf_enabled
    client = client_context(request)

    try:
        data = await read_form_body(request)
    except MalformedRequestError as exc:
        logger.warning("contact_body_unreadable", reason=exc.reason, exc_info=True)
        return envelope_response(orchestrator.reject_malformed(exc.reason, client))

    submission = SubmissionInput.model_validate(data)

    if csrf_enabled and not csrf_token_valid(request, submission.csrf_token):
        logger.info("gate_rejected", kind=GateRejectionKind.CSRF_FAILED)
        decision = GateDecision.reject(GateRejectionKind.CSRF_FAILED, CSRF_FAILED_MESSAGE)
        return envelope_response(
            orchestrator.reject_at_gate(decision, client, submission.email.strip())
        )

    envelope = await orchestrator.submit(submission, client)
    return envelope_response(envelope)


@router.get("/contact")
async def contact_info(request: Request) -> JSONResponse:
    """Static "POST only" reply carrying the session's CSRF token."""
    return envelope_response(post_only_envelope(issue_csrf_token(request)))


@router.options("/contact")
async def contact_options() -> Response:
    return Response(status_code=200)
