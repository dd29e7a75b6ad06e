"""
CuriousDog Backend — Request ID Middleware
============================================

What:  Assigns a correlation id to every request and echoes it in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID (trimmed to 64 chars) or generates
       a short UUID, stores it in a ContextVar for loggers and error
       handlers, and sets the response header.
When:  Runs before request logging so every access line carries the id.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request id to the context, request.state, and the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client_id = request.headers.get("X-Request-ID", "").strip()
        rid = client_id[:MAX_CLIENT_ID_LENGTH] if client_id else uuid.uuid4().hex[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
