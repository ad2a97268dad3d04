"""Appointment ORM model."""

from __future__ import annotations

from datetime import date

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base
from src.shared.enums import AppointmentStatus, enum_values
from src.shared.models import IntegerIdMixin, TimestampMixin

ACTIVE_SLOT_PREDICATE = "status <> 'CANCELLED'"


class Appointment(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("appointment_date", "order_number", name="uq_appointments_date_order"),
        Index(
            "uq_appointments_active_doctor_slot",
            "doctor_id",
            "appointment_date",
            "time_slot",
            unique=True,
            postgresql_where=text(ACTIVE_SLOT_PREDICATE),
            sqlite_where=text(ACTIVE_SLOT_PREDICATE),
        ),
        Index("ix_appointments_patient_date", "patient_id", "appointment_date"),
        Index("ix_appointments_status", "status"),
        CheckConstraint("order_number > 0", name="ck_appointments_order_positive"),
    )

    patient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )
    doctor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("staff.id", ondelete="RESTRICT"),
        nullable=False,
    )
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    time_slot: Mapped[str] = mapped_column(String(11), nullable=False)
    order_number: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            values_callable=enum_values,
            validate_strings=True,
            name="appointmentstatus",
        ),
        nullable=False,
        server_default=AppointmentStatus.PENDING.value,
    )
    notes: Mapped[str | None] = mapped_column(Text)
