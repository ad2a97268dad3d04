"""Appointments schemas."""

import re
from datetime import date, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, PositiveInt, field_validator

from src.shared.enums import AppointmentStatus
from src.shared.validators import DateRangeParams, IsoDate, PageParams, RequestModel

_TIME = r"([01]?\d|2[0-3]):([0-5]\d)"
TIME_SLOT_PATTERN = re.compile(rf"^{_TIME}(?:-{_TIME})?$")

REASON_MAX_LENGTH = 500
NOTES_MAX_LENGTH = 1000
KEYWORD_MAX_LENGTH = 100
INITIAL_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)
STATUS_ALL = "all"


def normalize_time_slot(value: Any) -> str | None:
    """Return the zero-padded form of ``HH:MM`` or ``HH:MM-HH:MM``.

    Ranges must end after they start; anything else yields None.
    """
    if not isinstance(value, str):
        return None
    match = TIME_SLOT_PATTERN.match(value.strip())
    if match is None:
        return None
    start_hour, start_minute, end_hour, end_minute = match.groups()
    start = f"{int(start_hour):02d}:{start_minute}"
    if end_hour is None:
        return start
    end = f"{int(end_hour):02d}:{end_minute}"
    if end <= start:
        return None
    return f"{start}-{end}"


def _time_slot(value: str) -> str:
    normalized = normalize_time_slot(value)
    if normalized is None:
        raise ValueError("time_slot must be HH:MM or HH:MM-HH:MM with the end after the start")
    return normalized


TimeSlot = Annotated[str, AfterValidator(_time_slot)]
Reason = Annotated[str, Field(min_length=1, max_length=REASON_MAX_LENGTH)]
Notes = Annotated[str, Field(max_length=NOTES_MAX_LENGTH)]

DOCTOR_ID = AliasChoices("doctor_id", "staff_id")
TIME_SLOT = AliasChoices("time_slot", "appointment_time")


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    time_slot: str
    order_number: int
    reason: str
    status: AppointmentStatus
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # joined display fields
    patient_name: str | None = None
    gender: str | None = None
    birth_year: int | None = None
    phone: str | None = None
    doctor_name: str | None = None


class AppointmentCreate(RequestModel):
    patient_id: PositiveInt
    doctor_id: PositiveInt = Field(validation_alias=DOCTOR_ID)
    appointment_date: IsoDate
    time_slot: TimeSlot = Field(validation_alias=TIME_SLOT)
    reason: Reason
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Notes | None = None

    @field_validator("status")
    @classmethod
    def _initial_status(cls, value: AppointmentStatus) -> AppointmentStatus:
        if value not in INITIAL_STATUSES:
            raise ValueError("new appointments must start as PENDING or CONFIRMED")
        return value


class AppointmentUpdate(RequestModel):
    """Partial update; only the fields sent are written."""

    patient_id: PositiveInt | None = None
    doctor_id: PositiveInt | None = Field(None, validation_alias=DOCTOR_ID)
    appointment_date: IsoDate | None = None
    time_slot: TimeSlot | None = Field(None, validation_alias=TIME_SLOT)
    reason: Reason | None = None
    status: AppointmentStatus | None = None
    notes: Notes | None = None

    @field_validator("patient_id", "doctor_id", "appointment_date", "time_slot", "reason", "status", mode="before")
    @classmethod
    def _not_null(cls, value: Any, info) -> Any:
        if value is None:
            raise ValueError(f"{info.field_name} cannot be empty")
        return value


class AppointmentStatusUpdate(RequestModel):
    status: AppointmentStatus
    notes: Notes | None = None


class AppointmentSearchParams(DateRangeParams, PageParams):
    date: IsoDate | None = None
    patient_id: PositiveInt | None = None
    doctor_id: PositiveInt | None = None
    status: str | None = None
    keyword: str | None = Field(None, max_length=KEYWORD_MAX_LENGTH)

    @field_validator("status")
    @classmethod
    def _known_status(cls, value: str | None) -> str | None:
        allowed = [*(member.value for member in AppointmentStatus), STATUS_ALL]
        if value is not None and value not in allowed:
            raise ValueError(f"status must be one of: {', '.join(allowed)}")
        return value
