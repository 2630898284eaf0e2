"""HTTP middleware for request correlation and the one-time webhook init."""

from __future__ import annotations

from uuid import uuid4

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from hellobot.core.logging import bind_request_id

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


class RequestCorrelationMiddleware(BaseHTTPMiddleware):
    """Bind an ``X-Request-ID`` to the request context and echo it back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
        request_id = incoming[:MAX_REQUEST_ID_LENGTH] if incoming else str(uuid4())
        with bind_request_id(request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class WebhookInitMiddleware(BaseHTTPMiddleware):
    """Kick off the one-time webhook reset on the first request handled.

    Installed only when AUTO_WEBHOOK_INIT is enabled. The run is scheduled in
    the background and never delays the request.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        initializer = getattr(request.app.state, "webhook_initializer", None)
        if initializer is not None:
            initializer.ensure_started()
        return await call_next(request)
