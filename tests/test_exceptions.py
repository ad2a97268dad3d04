import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import DBAPIError, IntegrityError

from src.core.config import settings
from src.core.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    constraint_name,
    field_errors,
    is_serialization_failure,
    register_exception_handlers,
    translate_integrity_error,
)


class _DriverError(Exception):
    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (ValidationError([]), 422),
        (BadRequestError("bad"), 400),
        (UnauthorizedError("who are you"), 401),
        (ForbiddenError("not yours"), 403),
        (NotFoundError("missing"), 404),
        (ConflictError("taken"), 409),
        (InternalError("oops"), 500),
    ],
)
def test_status_codes(error, status_code):
    assert error.status_code == status_code
    assert error.to_payload()["success"] is False


def test_validation_payload_lists_fields():
    error = ValidationError([{"field": "reason", "message": "reason is required"}])
    assert error.to_payload() == {
        "success": False,
        "message": "Invalid input data",
        "errors": [{"field": "reason", "message": "reason is required"}],
    }


def test_integrity_errors_translate_by_sqlstate_or_message():
    unique = IntegrityError("INSERT", {}, _DriverError("duplicate key", sqlstate="23505"))
    assert isinstance(translate_integrity_error(unique), ConflictError)

    sqlite_unique = IntegrityError("INSERT", {}, _DriverError("UNIQUE constraint failed: appointments.time_slot"))
    assert isinstance(translate_integrity_error(sqlite_unique), ConflictError)

    not_null = IntegrityError("INSERT", {}, _DriverError("NOT NULL constraint failed: appointments.reason"))
    assert type(translate_integrity_error(not_null)) is ValidationError


@pytest.mark.asyncio
async def test_handlers_render_envelopes():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("Slot taken")

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT", {}, _DriverError("dup", sqlstate="23505"))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/conflict")
        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Slot taken"}

        response = await client.get("/integrity")
        assert response.status_code == 409
        assert response.json()["success"] is False


def test_serialization_failure_is_detected_directly_or_through_the_cause():
    direct = DBAPIError("UPDATE", {}, _DriverError("could not serialize access", sqlstate="40001"))
    assert is_serialization_failure(direct)

    wrapped_driver = _DriverError("adapter error")
    wrapped_driver.__cause__ = _DriverError("could not serialize access", sqlstate="40001")
    assert is_serialization_failure(DBAPIError("UPDATE", {}, wrapped_driver))

    assert not is_serialization_failure(DBAPIError("UPDATE", {}, _DriverError("deadlock", sqlstate="40P01")))
    assert not is_serialization_failure(DBAPIError("UPDATE", {}, _DriverError("no code")))


def test_constraint_name_reads_the_driver_error():
    named = _DriverError("duplicate key", sqlstate="23505")
    named.constraint_name = "uq_appointments_date_order"
    assert constraint_name(IntegrityError("INSERT", {}, named)) == "uq_appointments_date_order"

    wrapped_driver = _DriverError("adapter error")
    wrapped_driver.__cause__ = named
    assert constraint_name(IntegrityError("INSERT", {}, wrapped_driver)) == "uq_appointments_date_order"

    assert constraint_name(IntegrityError("INSERT", {}, _DriverError("UNIQUE constraint failed"))) is None


def test_field_errors_use_the_field_name_and_strip_value_error_prefix():
    errors = [
        {"loc": ("body", "time_slot"), "msg": "Value error, time_slot must be HH:MM"},
        {"loc": ("query", "page"), "msg": "Input should be less than or equal to 100000"},
        {"loc": ("body", "items", 0, "quantity"), "msg": "Field required"},
        {"loc": ("body",), "msg": "Field required"},
    ]
    assert field_errors(errors) == [
        {"field": "time_slot", "message": "time_slot must be HH:MM"},
        {"field": "page", "message": "Input should be less than or equal to 100000"},
        {"field": "items", "message": "Field required"},
        {"field": "body", "message": "Field required"},
    ]


def _crashing_app():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/crash")
    async def crash():
        raise RuntimeError("password=hunter2")

    return app


@pytest.mark.asyncio
@pytest.mark.parametrize("environment", ["production", "staging", "test"])
async def test_unhandled_errors_hide_detail_outside_development(monkeypatch, environment):
    monkeypatch.setattr(settings, "environment", environment)
    transport = ASGITransport(app=_crashing_app(), raise_app_exceptions=False)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/crash")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
    assert "hunter2" not in response.text


@pytest.mark.asyncio
async def test_unhandled_errors_include_detail_in_development(monkeypatch):
    monkeypatch.setattr(settings, "environment", "development")
    transport = ASGITransport(app=_crashing_app(), raise_app_exceptions=False)

    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/crash")

    assert response.status_code == 500
    assert response.json()["detail"] == "RuntimeError: password=hunter2"
