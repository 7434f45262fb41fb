"""
HTTP middleware for shortlink.

- RequestIDMiddleware: reuse the caller's X-Request-ID or mint one, expose it
  on `request.state.request_id` and echo it in the response headers.
- LoggingMiddleware: one log line per request with method, path, status,
  duration and request id.
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request id to every request and response."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    def __init__(self, app, logger: logging.Logger = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortlink.http")

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        self.logger.info(
            "%s %s -> %d (%.2fms) request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            get_request_id(request),
        )
        return response
