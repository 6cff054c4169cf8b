"""
===============================================================================
CRC CARD: api/exception_handlers.py (Centralized exception handling)
===============================================================================

Responsibilities:
  - Translate auth store errors into RFC 7807 HTTP responses.
  - Centralize error logging with request_id + error_id.
  - Never leak internals on unexpected exceptions.

Mapping:
  ValidationError  -> 400 VALIDATION_ERROR
  AuthError        -> 401 UNAUTHORIZED
  PermissionDenied -> 403 FORBIDDEN
  NotFoundError    -> 404 NOT_FOUND
  ConflictError    -> 409 CONFLICT
  request body     -> 422 VALIDATION_ERROR
  anything else    -> 500 INTERNAL_ERROR

Collaborators:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: AuthStoreError (error_code picks the status)
  - crosscutting.config.get_settings (detail level)
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
)
from ..crosscutting.exceptions import AuthStoreError
from ..crosscutting.logger import logger

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
}


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _resolve_status(exc: AuthStoreError) -> tuple[int, ErrorCode]:
    try:
        code = ErrorCode(exc.error_code)
    except ValueError:
        return 500, ErrorCode.INTERNAL_ERROR
    return _STATUS_BY_CODE.get(code, 500), code


async def auth_store_error_handler(
    request: Request, exc: AuthStoreError
) -> JSONResponse:
    status_code, code = _resolve_status(exc)

    log = logger.error if status_code >= 500 else logger.info
    log(
        "Auth store error",
        extra={
            "code": code.value,
            "error_id": exc.error_id,
            "status_code": status_code,
        },
    )

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=exc.message,
        errors=[{"error_id": exc.error_id}],
    )
    if status_code == 401:
        app_exc.headers = {"WWW-Authenticate": "Bearer"}
    return await app_exception_handler(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "msg": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    app_exc = AppHTTPException(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Request validation failed.",
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Fallback for untyped exceptions.

    - Full log (stacktrace).
    - Generic response outside development.
    """
    request_id = _request_id_from(request)

    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={"request_id": request_id, "error": str(exc)},
    )

    detail = str(exc) if not get_settings().is_production() else "Internal error."

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Register handlers on the FastAPI app.

    Exception is registered last as the fallback.
    """
    app.add_exception_handler(AuthStoreError, auth_store_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
