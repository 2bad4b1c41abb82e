"""Error Handlers — maps MerchStoreError, request validation and stray exceptions to JSON.

Invariants:
    - Every error body is {"error": {code, message, category, severity, ...}}
    - 401 responses carry `WWW-Authenticate: Bearer`
    - Retryable failures (balance conflict, persistence) carry `Retry-After`
    - Stray exceptions never leak internal details (500 INTERNAL_ERROR)

Design Decisions:
    - Business-rule rejections (insufficient coins, unknown item) are expected traffic:
      logged at WARNING; only 5xx are logged at ERROR
    - Validation field paths drop the leading "body"/"path" segment: clients see
      `amount`, not `body.amount`
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from merch_store.core.errors import (
    ErrorCategory, ErrorSeverity, MerchStoreError,
)

logger = logging.getLogger(__name__)

_REQUEST_LOCATIONS = {"body", "path", "query", "header"}
DEFAULT_RETRY_AFTER_SECONDS = 1


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain, validation and catch-all handlers."""
    app.add_exception_handler(MerchStoreError, handle_merch_store_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


async def handle_merch_store_error(
    request: Request, exc: MerchStoreError,
) -> JSONResponse:
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "account_id": exc.context.account_id,
            "item": exc.context.item,
        },
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=_headers_for(exc),
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": _field_path(e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request to {request.url.path}: "
        f"{', '.join(d['field'] for d in details)}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR,
            details=details,
        ),
    )


async def handle_unexpected_error(
    request: Request, exc: Exception,
) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}",
        exc_info=exc,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def _headers_for(exc: MerchStoreError) -> dict[str, str] | None:
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        return {"WWW-Authenticate": "Bearer"}
    if exc.retryable:
        retry_ms = exc.context.retry_after_ms
        seconds = (
            math.ceil(retry_ms / 1000) if retry_ms
            else DEFAULT_RETRY_AFTER_SECONDS
        )
        return {"Retry-After": str(seconds)}
    return None


def _field_path(loc: tuple) -> str:
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in _REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts)


def _envelope(
    code: str,
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }
