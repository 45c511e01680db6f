"""Domain exceptions and the standard JSON error envelope."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"


class InvestorNotFoundError(LookupError):
    """The requested contact does not exist in the ERP."""

    def __init__(self, contact_id: int | None = None, email: str | None = None) -> None:
        self.contact_id = contact_id
        self.email = email
        who = f"id {contact_id}" if contact_id is not None else f"email {email!r}"
        super().__init__(f"Investor with {who} not found")


class ERPClientError(RuntimeError):
    """An upstream ERP request failed. Never retried inside the analytics core."""

    def __init__(self, message: str, path: str | None = None, status_code: int | None = None) -> None:
        self.path = path
        self.status_code = status_code
        super().__init__(message)


logger = structlog.get_logger()


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", "unknown")


async def investor_not_found_handler(request: Request, exc: InvestorNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "error": "investor_not_found",
            "message": str(exc),
            "detail": None,
            "request_id": _request_id(request),
        },
    )


async def erp_client_error_handler(request: Request, exc: ERPClientError) -> JSONResponse:
    """Upstream failures surface as 502 so callers know to retry upstream."""
    request_id = _request_id(request)
    logger.error(
        "erp_request_failed",
        error=str(exc),
        erp_path=exc.path,
        erp_status=exc.status_code,
        path=request.url.path,
        request_id=request_id,
    )
    sentry_sdk.capture_exception(exc)
    return JSONResponse(
        status_code=502,
        content={
            "error": "upstream_unavailable",
            "message": "The accounting system could not be reached. Please try again later.",
            "detail": None,
            "request_id": request_id,
        },
    )


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
            "message": "An unexpected error occurred. Our team has been notified.",
            "request_id": request_id,
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
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
