from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

MALFORMATTED_ID = "malformatted id"
DUPLICATE_KEY = "Duplicate key error - this resource already exists"
INTERNAL_ERROR = "Internal server error"


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _describe_validation_error(error: dict[str, Any]) -> str:
    location = error.get("loc") or ()
    if location and location[0] == "path":
        return MALFORMATTED_ID

    ctx = error.get("ctx") or {}
    nested = ctx.get("error")
    if isinstance(nested, Exception):
        return str(nested)

    message = str(error.get("msg", "invalid request"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    field = ".".join(str(part) for part in location[1:])
    return f"{field}: {message}" if field else message


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "invalid request"
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error(exc.status_code, detail, getattr(exc, "headers", None))


async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.info("integrity violation on %s", request.url.path)
    return _error(status.HTTP_409_CONFLICT, DUPLICATE_KEY)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled error",
        extra={"path": request.url.path, "method": request.method},
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": message}``."""

    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(IntegrityError, _handle_integrity_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


__all__ = [
    "DUPLICATE_KEY",
    "INTERNAL_ERROR",
    "MALFORMATTED_ID",
    "register_exception_handlers",
]
