"""Common exception handlers for API responses."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidsearch.api.response_utils import build_meta
from vidsearch.core.exceptions import (
    AuthenticationError,
    EmbeddingFailedError,
    JWTDecodeError,
    LLMError,
    RecordNotFoundError,
    StoreUnavailableError,
    UpstreamCriticalError,
    ValidationError,
    VidSearchException,
)
from vidsearch.core.logging import get_logger
from vidsearch.schemas.response import ResponseEnvelope, ResponseError

logger = get_logger(__name__)

# Checked in order; the first isinstance match wins.
EXCEPTION_RESPONSE_MAP: list[tuple[type[VidSearchException], int, str | None]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "ValidationError"),
    (EmbeddingFailedError, status.HTTP_503_SERVICE_UNAVAILABLE, "EmbeddingFailedError"),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "StoreUnavailableError"),
    (UpstreamCriticalError, status.HTTP_503_SERVICE_UNAVAILABLE, None),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND, "RecordNotFoundError"),
    (JWTDecodeError, status.HTTP_401_UNAUTHORIZED, "AuthenticationError"),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, "AuthenticationError"),
    (LLMError, status.HTTP_500_INTERNAL_SERVER_ERROR, None),
]
DEFAULT_ERROR_CODE = "INTERNAL.UNEXPECTED"

_HINTS: dict[int, str] = {
    status.HTTP_503_SERVICE_UNAVAILABLE: "Search is temporarily unavailable; retry shortly",
}


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that wrap exceptions in the common envelope."""

    app.add_exception_handler(VidSearchException, _vidsearch_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)


def resolve_status(exc: VidSearchException) -> tuple[int, str]:
    """HTTP status and error code for a domain exception."""

    for exc_type, status_code, code in EXCEPTION_RESPONSE_MAP:
        if isinstance(exc, exc_type):
            return status_code, code or exc.code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, DEFAULT_ERROR_CODE


def _envelope_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    hint: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    envelope = ResponseEnvelope[None](
        success=False,
        data=None,
        error=ResponseError(code=code, message=message, details=details, hint=hint),
        meta=build_meta(request),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope, by_alias=True),
        headers=headers,
    )


def _compress_detail(detail: Any) -> tuple[str, Any | None]:
    if isinstance(detail, dict):
        message = detail.get("message", str(detail))
        return message, detail.get("details") or detail

    return str(detail), None


def _format_validation_message(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Validation error"

    parts: list[str] = []
    for error in errors:
        loc = error.get("loc", [])
        msg = error.get("msg", "Validation error")
        loc_path = ".".join(str(item) for item in loc) if loc else None
        parts.append(f"{loc_path}: {msg}" if loc_path else msg)

    return "; ".join(parts)


async def _vidsearch_exception_handler(request: Request, exc: VidSearchException) -> JSONResponse:
    status_code, error_code = resolve_status(exc)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=error_code, error=exc.message)

    return _envelope_response(
        request,
        status_code=status_code,
        code=error_code,
        message=exc.message,
        details=getattr(exc, "details", None),
        hint=getattr(exc, "hint", None) or _HINTS.get(status_code),
    )


async def _request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors() or []
    return _envelope_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="ValidationError",
        message=_format_validation_message(errors),
        details={"errors": jsonable_encoder(errors)},
    )


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message, details = _compress_detail(exc.detail)
    return _envelope_response(
        request,
        status_code=exc.status_code,
        code=f"HTTP.{exc.status_code}",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error_type=type(exc).__name__)
    return _envelope_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=DEFAULT_ERROR_CODE,
        message="Unexpected server error.",
    )
