"""
HTMLVault Backend — Request Logging Middleware
================================================

What:  One access-log line per HTTP request.
How:   Times the downstream call and logs method, path, status, duration,
       request id and client IP on the `htmlvault.access` logger.

Log level follows the status class:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

An exception escaping the route is turned into a response by the app's
`Exception` handler here, so unhandled errors are logged (and tagged) too.

Request bodies are never logged; stored HTML can be arbitrarily large.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from htmlvault.middleware.request_id import request_id_var

logger = logging.getLogger("htmlvault.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its status and duration. Skips /health."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        # Probed every few seconds by orchestrators
        if path == "/health":
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception as exc:
            # Unhandled errors become the app's 500 here, inside RequestIDMiddleware
            handler = request.app.exception_handlers.get(Exception)
            if handler is None:
                raise
            response = await handler(request, exc)

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
