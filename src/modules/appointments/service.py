"""Appointment service layer."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from functools import partial
from typing import Any, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError

from src.core.database import Database
from src.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationError,
    is_serialization_failure,
    translate_integrity_error,
)
from src.core.logging import get_logger
from src.modules.appointments import repository
from src.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentSearchParams,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from src.modules.appointments.validators import (
    build_search_criteria,
    clean_appointment_values,
    validate_create_appointment,
    validate_search_params,
    validate_status_update,
    validate_update_appointment,
)
from src.modules.patients.repository import patient_repository, staff_repository
from src.shared.enums import AppointmentStatus
from src.shared.pagination import paginate
from src.shared.schemas import Page
from src.shared.validators import field_error, parse_date

logger = get_logger(__name__)

T = TypeVar("T")

SLOT_TAKEN = "Doctor already has an appointment in this time slot"
BUSY = "Appointment could not be saved because of concurrent bookings, please retry"
SERIALIZABLE = "SERIALIZABLE"
MAX_WRITE_ATTEMPTS = 3


class AppointmentService:
    def __init__(self, db: Database):
        self.db = db
        self.repository = repository.appointment_repository(db)

    async def get_appointment(self, appointment_id: int) -> dict[str, Any]:
        appointment = await repository.get_detail(self.db, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment

    async def get_by_date(self, date_str: str) -> list[dict[str, Any]]:
        appointment_date = parse_date(date_str)
        if appointment_date is None:
            raise BadRequestError("Invalid date format. Use YYYY-MM-DD")
        return await repository.get_by_date(self.db, appointment_date)

    async def search(self, params: AppointmentSearchParams | Mapping[str, Any]) -> Page[Any]:
        errors = validate_search_params(params)
        if errors:
            raise ValidationError(errors)
        criteria, page, limit = build_search_criteria(params)
        return await paginate(
            partial(repository.search, self.db),
            partial(repository.count_search, self.db),
            criteria,
            page,
            limit,
        )

    async def create_appointment(self, data: AppointmentCreate | Mapping[str, Any]) -> dict[str, Any]:
        errors = validate_create_appointment(data)
        if errors:
            raise ValidationError(errors)
        values = clean_appointment_values(AppointmentCreate, data)

        async def write() -> dict[str, Any]:
            await self._ensure_participants(values)
            await self._ensure_slot_free(values["doctor_id"], values["appointment_date"], values["time_slot"])
            order_number = await repository.next_order_number(self.db, values["appointment_date"])
            return await self.repository.create({**values, "order_number": order_number})

        created = await self._write(write)
        logger.info(
            "appointment_created",
            appointment_id=created["id"],
            appointment_date=str(values["appointment_date"]),
            order_number=created["order_number"],
        )
        return await self.get_appointment(created["id"])

    async def update_appointment(
        self,
        appointment_id: int,
        data: AppointmentUpdate | Mapping[str, Any],
    ) -> dict[str, Any]:
        existing = await self._get_row(appointment_id)
        errors = validate_update_appointment(data)
        if errors:
            raise ValidationError(errors)
        values = clean_appointment_values(AppointmentUpdate, data)

        current = AppointmentStatus(existing["status"])
        target = values.get("status", current)
        self._ensure_transition(current, target)

        existing_date = parse_date(existing["appointment_date"])
        doctor_id = values.get("doctor_id", existing["doctor_id"])
        appointment_date = values.get("appointment_date", existing_date)
        time_slot = values.get("time_slot", existing["time_slot"])
        date_changed = appointment_date != existing_date
        slot_changed = (
            date_changed or doctor_id != existing["doctor_id"] or time_slot != existing["time_slot"]
        )

        async def write() -> None:
            await self._ensure_participants(values)
            if slot_changed and target.occupies_slot:
                await self._ensure_slot_free(doctor_id, appointment_date, time_slot, exclude_id=appointment_id)
            changes = dict(values)
            if date_changed:
                changes["order_number"] = await repository.next_order_number(self.db, appointment_date)
            await self.repository.update(appointment_id, changes)

        await self._write(write, appointment_id=appointment_id)
        logger.info("appointment_updated", appointment_id=appointment_id, fields=sorted(values))
        return await self.get_appointment(appointment_id)

    async def update_status(
        self,
        appointment_id: int,
        status: Any,
        notes: str | None = None,
    ) -> dict[str, Any]:
        existing = await self._get_row(appointment_id)
        data = {"status": status, "notes": notes}
        errors = validate_status_update(data)
        if errors:
            raise ValidationError(errors)
        payload = AppointmentStatusUpdate.model_validate(data)

        current = AppointmentStatus(existing["status"])
        target = payload.status
        self._ensure_transition(current, target)

        values: dict[str, Any] = {}
        if target != current:
            values["status"] = target
        if payload.notes is not None:
            values["notes"] = payload.notes
        if values:
            await self.repository.update(appointment_id, values)
            logger.info(
                "appointment_status_changed",
                appointment_id=appointment_id,
                from_status=current.value,
                to_status=target.value,
            )
        return await self.get_appointment(appointment_id)

    async def delete_appointment(self, appointment_id: int) -> None:
        await self._get_row(appointment_id)
        await self.repository.delete(appointment_id)
        logger.info("appointment_deleted", appointment_id=appointment_id)

    async def _write(self, operation: Callable[[], Awaitable[T]], appointment_id: int | None = None) -> T:
        """Run ``operation`` in a serializable transaction.

        Order-number collisions and serialization failures come from a
        concurrent booking on the same day and are retried; a taken slot is a
        conflict. Inside an outer transaction there is nothing to retry.
        """
        attempts = 1 if self.db.in_transaction else MAX_WRITE_ATTEMPTS
        for attempt in range(1, attempts + 1):
            try:
                async with self.db.transaction(isolation_level=SERIALIZABLE):
                    return await operation()
            except IntegrityError as exc:
                constraint = repository.violated_constraint(exc)
                if constraint == repository.ACTIVE_SLOT_INDEX:
                    logger.info("appointment_conflict", appointment_id=appointment_id, constraint=constraint)
                    raise ConflictError(SLOT_TAKEN) from exc
                if constraint != repository.DATE_ORDER_CONSTRAINT:
                    raise translate_integrity_error(exc) from exc
                failure: DBAPIError = exc
            except DBAPIError as exc:
                if not is_serialization_failure(exc):
                    raise
                failure = exc
            logger.warning(
                "appointment_write_retry",
                appointment_id=appointment_id,
                attempt=attempt,
                error=str(failure.orig),
            )
        raise ConflictError(BUSY) from failure

    async def _get_row(self, appointment_id: int) -> dict[str, Any]:
        row = await self.repository.find_by_id(appointment_id)
        if row is None:
            raise NotFoundError("Appointment not found")
        return row

    async def _ensure_participants(self, values: Mapping[str, Any]) -> None:
        errors = []
        if "patient_id" in values and await patient_repository(self.db).find_by_id(values["patient_id"]) is None:
            errors.append(field_error("patient_id", "Patient not found"))
        if "doctor_id" in values and await staff_repository(self.db).find_by_id(values["doctor_id"]) is None:
            errors.append(field_error("doctor_id", "Doctor not found"))
        if errors:
            raise ValidationError(errors)

    async def _ensure_slot_free(self, doctor_id, appointment_date, time_slot, exclude_id=None) -> None:
        conflict = await repository.find_slot_conflict(
            self.db, doctor_id, appointment_date, time_slot, exclude_id=exclude_id
        )
        if conflict is not None:
            logger.info(
                "appointment_conflict",
                doctor_id=doctor_id,
                appointment_date=str(appointment_date),
                time_slot=time_slot,
                conflicting_id=conflict["id"],
            )
            raise ConflictError(SLOT_TAKEN)

    @staticmethod
    def _ensure_transition(current: AppointmentStatus, target: AppointmentStatus) -> None:
        if not current.can_transition_to(target):
            if current.is_terminal:
                message = f"Appointment is already {current.value} and can no longer change"
            else:
                message = f"Cannot change status from {current.value} to {target.value}"
            raise ValidationError(
                [field_error("status", message)],
                detail="Invalid status transition",
            )
