"""Domain error types and their application/problem+json rendering.

Every error raised by a service carries an HTTP status, a stable ``type``
slug the client can branch on, and a human-readable ``detail``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

BASE_ERROR_URI = "https://leavedesk.local/errors"

logger = logging.getLogger(__name__)


class AppException(Exception):
    status_code: int = 500
    error_type: str = "server-error"
    title: str = "Internal Server Error"

    def __init__(self, detail: str, errors: Optional[dict[str, Any]] = None) -> None:
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    """Unknown leave request or employee id."""

    status_code = 404
    error_type = "not-found"

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        self.title = f"{entity_type} Not Found"
        super().__init__(f"{entity_type} with id '{entity_id}' does not exist.")


class ConflictError(AppException):
    """The record's current state forbids the operation (already decided,
    not the caller's request, taken email)."""

    status_code = 409
    error_type = "conflict"
    title = "Conflict"


class DuplicateException(ConflictError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ForbiddenException(AppException):
    status_code = 403
    error_type = "forbidden"
    title = "Forbidden"

    def __init__(
        self, detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(detail)


class UnauthorizedException(AppException):
    status_code = 401
    error_type = "unauthorized"
    title = "Unauthorized"

    def __init__(self, detail: str = "Authentication required.") -> None:
        super().__init__(detail)


class ValidationException(AppException):
    """Leave rule violations, keyed by the field (or rule) that failed.

    ``detail`` is the first message so a client showing one line shows
    the guard that tripped first.
    """

    status_code = 422
    error_type = "validation-error"
    title = "Validation Error"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        first = next(iter(errors.values()), [])
        super().__init__(
            first[0] if first else "One or more fields failed validation.",
            errors=errors,
        )


def _problem(
    request: Request,
    *,
    status: int,
    error_type: str,
    title: str,
    detail: str,
    errors: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": str(request.url.path),
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(
        status_code=status,
        content=body,
        media_type="application/problem+json",
        headers=headers,
    )


async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    return _problem(
        request,
        status=exc.status_code,
        error_type=exc.error_type,
        title=exc.title,
        detail=exc.detail,
        errors=exc.errors,
        headers={"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None,
    )


async def _handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    # Body/query location prefix is dropped: ("body", "start_date") -> "start_date".
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        if len(loc) > 1:
            name = ".".join(str(p) for p in loc[1:])
        else:
            name = str(loc[0]) if loc else "unknown"
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return _problem(
        request,
        status=422,
        error_type="validation-error",
        title="Validation Error",
        detail="Request validation failed.",
        errors=field_errors,
    )


async def _handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return _problem(
        request,
        status=500,
        error_type="server-error",
        title="Internal Server Error",
        detail="The record store is unavailable. Please retry later.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, _handle_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _handle_storage_error)  # type: ignore[arg-type]
