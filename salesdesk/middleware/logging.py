"""Structured request logging middleware.

Logs every request with method, path, status_code, duration_ms and
request_id. An incoming X-Request-ID is reused, otherwise one is generated;
either way it is echoed on the response.
"""

import time
import uuid

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Receive, Scope, Send

logger = structlog.get_logger()


class RequestLoggingMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        raw_id = headers.get(b"x-request-id")
        if raw_id:
            request_id = raw_id.decode("latin-1")
        else:
            request_id = str(uuid.uuid4())
            # Expose the generated id to exception handlers downstream
            scope["headers"] = [*scope.get("headers", []), (b"x-request-id", request_id.encode())]

        start_time = time.monotonic()
        status_code = 500

        async def _send(message: dict) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)["x-request-id"] = request_id
            await send(message)

        try:
            await self.app(scope, receive, _send)
        finally:
            duration_ms = round((time.monotonic() - start_time) * 1000, 2)
            log_method = logger.info if status_code < 400 else logger.warning
            if status_code >= 500:
                log_method = logger.error
            log_method(
                "request_completed",
                method=scope["method"],
                path=scope["path"],
                status_code=status_code,
                duration_ms=duration_ms,
                request_id=request_id,
            )
