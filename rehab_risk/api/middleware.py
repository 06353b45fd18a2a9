"""API middleware for request tracing and API-key authentication."""

import hmac
import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a correlation id.

    An incoming ``X-Request-ID`` is reused, otherwise a short id is generated.
    The id is stored on ``request.state`` and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            "[%s] %s %s client=%s",
            request_id,
            request.method,
            request.url.path,
            _client_host(request),
        )

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            "[%s] %s %s -> %s in %.3fs",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Require an API key on everything except health and docs.

    The key is accepted as ``Authorization: Bearer <key>`` or ``X-API-Key``.
    """

    public_paths = ("/health", "/health/ready", "/health/live", "/docs", "/openapi.json")

    def __init__(self, app, api_key: str):
        super().__init__(app)
        self.api_key = api_key

    def _provided_key(self, request: Request):
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            return auth_header[len("Bearer "):]
        return request.headers.get("X-API-Key")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.public_paths:
            return await call_next(request)

        provided_key = self._provided_key(request)
        if not provided_key or not hmac.compare_digest(provided_key, self.api_key):
            logger.warning(
                "Unauthorized request: %s %s client=%s",
                request.method,
                request.url.path,
                _client_host(request),
            )
            return Response(
                content='{"error": "Unauthorized", "detail": "Invalid or missing API key"}',
                status_code=401,
                media_type="application/json",
            )

        return await call_next(request)
