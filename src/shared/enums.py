"""Shared enumerations used across modules."""

from __future__ import annotations

from enum import StrEnum
from typing import Iterable, TypeVar

EnumType = TypeVar("EnumType", bound=StrEnum)


def enum_values(enum_cls: Iterable[EnumType]) -> list[str]:
    """Return the .value for each enum member (used by SQLAlchemy)."""
    return [member.value for member in enum_cls]


class StaffRole(StrEnum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    RECEPTIONIST = "receptionist"
    CASHIER = "cashier"


class AppointmentStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_terminal(self) -> bool:
        return not APPOINTMENT_TRANSITIONS[self]

    @property
    def occupies_slot(self) -> bool:
        return self is not AppointmentStatus.CANCELLED

    def can_transition_to(self, target: AppointmentStatus) -> bool:
        return target == self or target in APPOINTMENT_TRANSITIONS[self]


APPOINTMENT_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}


class InvoiceStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
