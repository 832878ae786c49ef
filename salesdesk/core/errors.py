"""Standardized error responses across all API endpoints."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

UNAUTHED_ERR_MSG = "Please login (10001)"
NOT_ADMIN_ERR_MSG = "You do not have required permission (10002)"


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"


class ConflictError(Exception):
    """The request collides with existing state (duplicate analysis, duplicate username)."""


logger = structlog.get_logger()


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "unknown")


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a consistent JSON envelope."""
    request_id = _request_id(request)

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred.",
            "request_id": request_id,
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Standardize HTTPException responses into the same JSON envelope."""
    if isinstance(exc.detail, dict):
        error = exc.detail.get("error", f"http_{exc.status_code}")
        message = exc.detail.get("message", str(exc.detail))
        detail: Any = exc.detail.get("detail")
    else:
        error = f"http_{exc.status_code}"
        message = str(exc.detail)
        detail = exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": error,
            "message": message,
            "detail": detail,
            "request_id": _request_id(request),
        },
        headers=dict(exc.headers or {}),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Input rejected by the request schemas, before any handler ran."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
            "request_id": _request_id(request),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
