"""ORM models for patients and clinic staff."""

from __future__ import annotations

from sqlalchemy import Boolean, Enum, Integer, String, true
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base
from src.shared.enums import StaffRole, enum_values
from src.shared.models import IntegerIdMixin, TimestampMixin


class Patient(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "patients"

    full_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    gender: Mapped[str | None] = mapped_column(String(10))
    birth_year: Mapped[int | None] = mapped_column(Integer)
    phone: Mapped[str | None] = mapped_column(String(20), index=True)
    address: Mapped[str | None] = mapped_column(String(255))


class Staff(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "staff"

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[StaffRole] = mapped_column(
        Enum(
            StaffRole,
            values_callable=enum_values,
            validate_strings=True,
            name="staffrole",
        ),
        nullable=False,
        server_default=StaffRole.DOCTOR.value,
    )
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(100), unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default=true(), nullable=False)
