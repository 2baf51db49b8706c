"""
BlogQL — Request Logging Middleware
====================================

What:  One structured access-log line per HTTP request.
Why:   GraphQL sends every operation to the same path, so the access log
       also records the operation name when the client supplies one.
How:   Measures duration around the downstream handler and picks the log
       level from the status code.
When:  After RequestIDMiddleware (uses the request ID for correlation).

Logged fields:
    request_id, method, path, status, duration_ms, client_ip
Never logged:
    request bodies (passwords, post content), the Authorization header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blogql.middleware.request_id import request_id_var

logger = logging.getLogger("blogql.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration for every request except /health.

    Level by status:
        5xx → ERROR, 4xx → WARNING, otherwise INFO

    GraphQL responses are 200 even when resolvers fail; their statuses live
    in the body's `errors` array and are logged by BlogSchema instead.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        # Probes hit this every few seconds
        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
