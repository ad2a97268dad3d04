"""Validation entry points for appointment payloads and search parameters.

Each ``validate_*`` function runs the matching pydantic model and returns the
full list of field errors, empty when the payload is acceptable.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from src.shared.enums import AppointmentStatus
from src.shared.validators import FieldError, parse_model

from .schemas import (
    STATUS_ALL,
    AppointmentCreate,
    AppointmentSearchParams,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)


def validate_create_appointment(data: Any) -> list[FieldError]:
    return parse_model(AppointmentCreate, data)[1]


def validate_update_appointment(data: Any) -> list[FieldError]:
    return parse_model(AppointmentUpdate, data)[1]


def validate_status_update(data: Any) -> list[FieldError]:
    return parse_model(AppointmentStatusUpdate, data)[1]


def validate_search_params(params: Any) -> list[FieldError]:
    return parse_model(AppointmentSearchParams, params)[1]


def clean_appointment_values(
    model: type[AppointmentCreate] | type[AppointmentUpdate],
    data: Any,
) -> dict[str, Any]:
    """Column values from an already validated payload.

    Partial updates only carry the fields the caller actually sent.
    """
    payload = data if isinstance(data, model) else model.model_validate(data)
    return payload.model_dump(exclude_unset=model is AppointmentUpdate)


@dataclass(frozen=True)
class AppointmentSearchCriteria:
    patient_id: int | None = None
    doctor_id: int | None = None
    status: AppointmentStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    keyword: str | None = None


def build_search_criteria(
    params: AppointmentSearchParams | Mapping[str, Any],
) -> tuple[AppointmentSearchCriteria, int, int]:
    """Turn validated parameters into criteria plus ``(page, limit)``.

    ``date`` is shorthand for an identical start and end date.
    """
    if not isinstance(params, AppointmentSearchParams):
        params = AppointmentSearchParams.model_validate(params)
    start_date, end_date = params.start_date, params.end_date
    if params.date is not None:
        start_date = end_date = params.date

    criteria = AppointmentSearchCriteria(
        patient_id=params.patient_id,
        doctor_id=params.doctor_id,
        status=AppointmentStatus(params.status) if params.status and params.status != STATUS_ALL else None,
        start_date=start_date,
        end_date=end_date,
        keyword=params.keyword or None,
    )
    return criteria, params.page, params.limit
