"""Audit logging middleware.

Captures successful mutating HTTP operations (POST/PUT/PATCH/DELETE) and
emits one structlog ``audit`` event per operation.
"""

import structlog
from starlette.types import ASGIApp, Receive, Scope, Send

logger = structlog.get_logger()

AUDITED_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

AUDIT_EXEMPT_PATHS = frozenset({
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
})


class AuditMiddleware:
    """Pure ASGI middleware that logs mutating operations."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in AUDITED_METHODS:
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        if any(path.startswith(exempt) for exempt in AUDIT_EXEMPT_PATHS):
            await self.app(scope, receive, send)
            return

        response_status = 0

        async def capture_send(message: dict) -> None:
            nonlocal response_status
            if message["type"] == "http.response.start":
                response_status = message.get("status", 0)
            await send(message)

        await self.app(scope, receive, capture_send)

        if 200 <= response_status < 300:
            # get_current_user stores the caller on request.state
            user_id = scope.get("state", {}).get("user_id")
            logger.info(
                "audit",
                method=scope["method"],
                path=path,
                status_code=response_status,
                user_id=str(user_id) if user_id else None,
            )
