"""Request ID middleware for HTTP request tracing.

Every response carries an ``X-Request-ID`` header (echoed from the client or
generated here) and the same ID is bound into structlog contextvars, so all
log lines for one submission can be correlated with its audit entry.
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_MAX_REQUEST_ID_LENGTH = 128


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every HTTP request/response cycle."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Bind a request ID to structlog contextvars and echo it on the response.

        A client-supplied ``X-Request-ID`` longer than 128 characters is
        replaced with a fresh UUID4.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or route handler.

        Returns:
            The HTTP response with ``X-Request-ID`` header set.
        """
        request_id = request.headers.get("X-Request-ID", "")
        if not request_id or len(request_id) > _MAX_REQUEST_ID_LENGTH:
            request_id = str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, service="enquiry")
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
