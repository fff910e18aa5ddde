"""
FastAPI middleware for request tracing and correlation.

Each request gets an id that is returned to the client and bound into the
structlog context, so every log event emitted while handling the request
carries it.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add a request ID to each HTTP request.

    A caller-supplied X-Request-ID is reused so a front-end action can be
    traced into the back-office logs; otherwise a UUID4 is generated. The id:
    1. Is stored in request.state.request_id for route handlers
    2. Is bound as request_id in structlog's context variables
    3. Is returned in the X-Request-ID response header

    Example:
        >>> from hotel_backoffice.middleware import RequestIDMiddleware
        >>> app.add_middleware(RequestIDMiddleware)
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
