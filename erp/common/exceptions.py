"""Application errors and the handlers that render them.

Every ``AppError`` becomes an ``application/problem+json`` body carrying
both the RFC 7807 fields and a flat ``error`` message the web client shows
as-is. Anything else that escapes a route is logged and answered with a
bare 500.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"
ERROR_TYPE_PREFIX = "about:blank#"


# ── Error classes ───────────────────────────────────────────────────

class AppError(Exception):
    """Base class; subclasses pin the status code and problem type."""

    status_code: ClassVar[int] = 400
    error_type: ClassVar[str] = "bad-request"
    default_title: ClassVar[str] = "Bad Request"

    def __init__(
        self,
        detail: str,
        *,
        title: Optional[str] = None,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.title = title or self.default_title
        self.errors = errors

    def to_problem(self, instance: str) -> dict[str, Any]:
        return _problem(
            self.status_code, self.error_type, self.title, self.detail, instance, self.errors,
        )


class BadRequestException(AppError):
    pass


class UnauthorizedException(AppError):
    status_code = 401
    error_type = "unauthorized"
    default_title = "Unauthorized"

    def __init__(self, detail: str = "Authentication required.") -> None:
        super().__init__(detail)


class ForbiddenException(AppError):
    status_code = 403
    error_type = "forbidden"
    default_title = "Forbidden"

    def __init__(
        self, detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(detail)


class NotFoundException(AppError):
    """Lookup by id came back empty, e.g. ``NotFoundException("Invoice", 7)``."""

    status_code = 404
    error_type = "not-found"

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(
            f"{entity} with id '{entity_id}' does not exist.",
            title=f"{entity} Not Found",
        )


class ConflictError(AppError):
    """A unique value (email, sku, attendance day) is already taken."""

    status_code = 409
    error_type = "conflict"
    default_title = "Conflict"

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


# ── Rendering ───────────────────────────────────────────────────────

def _problem(
    status: int,
    error_type: str,
    title: str,
    detail: str,
    instance: str,
    errors: Optional[dict[str, list[str]]] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{ERROR_TYPE_PREFIX}{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "error": detail,
        "instance": instance,
    }
    if errors:
        body["errors"] = errors
    return body


def _field_name(loc: tuple) -> str:
    # ("body", "email") -> "email"; ("query", "months") -> "months"
    parts = [str(p) for p in loc[1:]] or [str(p) for p in loc]
    return ".".join(parts) or "unknown"


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_problem(request.url.path),
        media_type=PROBLEM_JSON,
    )


async def _handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        errors.setdefault(_field_name(tuple(err.get("loc", ()))), []).append(
            err.get("msg", "Invalid value")
        )
    body = _problem(
        422, "validation-error", "Validation Error",
        "Request validation failed.", request.url.path, errors,
    )
    return JSONResponse(status_code=422, content=body, media_type=PROBLEM_JSON)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _handle_app_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected_error)
