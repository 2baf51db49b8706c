"""
BlogQL — Request ID Middleware
===============================

What:  Assigns a short correlation ID to each request and echoes it back in
       the X-Request-ID response header.
Why:   The access log, resolver error logs and the client's error report can
       then be matched to one request.
How:   Uses the client's X-Request-ID when present, otherwise a fresh 8-char
       UUID prefix. Stored in a ContextVar (for loggers) and in request.state
       (for handlers).
When:  Outermost middleware, so everything downstream sees the ID.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests share the event loop thread
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
