"""
HTMLVault Backend — Request Body Size Middleware
==================================================

What:  Rejects requests whose body exceeds `settings.max_body_size`.
How:   A declared Content-Length is checked before the route runs. A body
       sent without one (chunked or streamed) is read here chunk by chunk
       and counted; either way an oversized body answers 413 with the API's
       error body and never reaches a handler.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from htmlvault.config import settings

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH")


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Configuration:
        max_body_size: limit in bytes (default: settings.max_body_size, 10MB)
    """

    def __init__(self, app, max_body_size: Optional[int] = None, **kwargs):
        super().__init__(app, **kwargs)
        self.max_body_size = max_body_size or settings.max_body_size

    def _too_large(self, request: Request, size: int) -> JSONResponse:
        logger.warning(
            "Rejected %s %s: body of at least %d bytes exceeds limit of %d",
            request.method,
            request.url.path,
            size,
            self.max_body_size,
        )
        return JSONResponse(
            status_code=413,
            content={"error": "Request body too large"},
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")

        if declared is None:
            if request.method not in BODY_METHODS:
                return await call_next(request)

            chunks = []
            received = 0
            async for chunk in request.stream():
                received += len(chunk)
                if received > self.max_body_size:
                    return self._too_large(request, received)
                chunks.append(chunk)

            # Same cache Request.body() fills; the route reads the body from it
            request._body = b"".join(chunks)
            return await call_next(request)

        try:
            length = int(declared)
        except ValueError:
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid Content-Length header"},
            )

        if length > self.max_body_size:
            return self._too_large(request, length)

        return await call_next(request)
