"""Custom exception classes and handlers."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, IntegrityError

from src.core.config import settings
from src.core.logging import get_logger

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
SERIALIZATION_FAILURE = "40001"


class BusinessLogicError(Exception):
    """Raised for domain-specific validation errors."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, detail: str, status_code: int | None = None):
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail)

    def to_payload(self) -> dict[str, Any]:
        return {"success": False, "message": self.detail}


class ValidationError(BusinessLogicError):
    """One or more field-level problems with the submitted data."""

    def __init__(self, errors: list[dict[str, str]], detail: str = "Invalid input data"):
        self.errors = list(errors)
        super().__init__(detail)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = self.errors
        return payload


class BadRequestError(BusinessLogicError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(BusinessLogicError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(BusinessLogicError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BusinessLogicError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BusinessLogicError):
    status_code = status.HTTP_409_CONFLICT


class InternalError(BusinessLogicError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is None and orig is not None:
        # asyncpg errors arrive wrapped by the SQLAlchemy adapter
        code = getattr(getattr(orig, "__cause__", None), "sqlstate", None)
    return code


def is_serialization_failure(exc: DBAPIError) -> bool:
    return _sqlstate(exc) == SERIALIZATION_FAILURE


def constraint_name(exc: DBAPIError) -> str | None:
    """Name of the violated constraint when the driver reports one."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    return None


def translate_integrity_error(exc: IntegrityError) -> BusinessLogicError:
    """Map a storage constraint violation to a domain error."""
    code = _sqlstate(exc)
    message = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
    if code == UNIQUE_VIOLATION or "unique constraint" in message:
        return ConflictError("Record conflicts with existing data")
    if code == FOREIGN_KEY_VIOLATION or "foreign key constraint" in message:
        return ConflictError("Record is referenced by or references missing data")
    return ValidationError([], detail="Data violates a storage constraint")


REQUEST_LOCATIONS = ("body", "query", "path")
VALUE_ERROR_PREFIX = "Value error, "


def _field_name(loc: tuple[Any, ...]) -> str:
    for part in loc:
        if isinstance(part, str) and part not in REQUEST_LOCATIONS:
            return part
    return "body"


def field_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error records into `{field, message}` pairs."""
    records = []
    for error in errors:
        message = error["msg"]
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]
        records.append({"field": _field_name(tuple(error["loc"])), "message": message})
    return records


def register_exception_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI app."""

    @app.exception_handler(BusinessLogicError)
    async def _business_error_handler(_: Request, exc: BusinessLogicError):
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(_: Request, exc: RequestValidationError):
        error = ValidationError(field_errors(exc.errors()))
        return JSONResponse(error.to_payload(), status_code=error.status_code)

    @app.exception_handler(IntegrityError)
    async def _integrity_error_handler(_: Request, exc: IntegrityError):
        error = translate_integrity_error(exc)
        return JSONResponse(error.to_payload(), status_code=error.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        error = InternalError("Internal server error")
        payload = error.to_payload()
        if settings.is_development:
            payload["detail"] = f"{type(exc).__name__}: {exc}"
        return JSONResponse(payload, status_code=error.status_code)
