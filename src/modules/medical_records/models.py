"""ORM models for examinations, their catalogues and prescriptions."""

from __future__ import annotations

from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base
from src.shared.models import IntegerIdMixin, TimestampMixin


class DiseaseType(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "disease_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)


class Medicine(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "medicines"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_medicines_price_non_negative"),)

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    # whole currency units
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class MedicalRecord(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "medical_records"

    patient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    staff_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("staff.id", ondelete="RESTRICT"),
        nullable=False,
    )
    disease_type_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("disease_types.id", ondelete="SET NULL"),
    )
    examination_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    symptoms: Mapped[str | None] = mapped_column(Text)
    diagnosis: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)


class Prescription(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "prescriptions"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_prescriptions_quantity_positive"),)

    medical_record_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("medical_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    medicine_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("medicines.id", ondelete="RESTRICT"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    usage: Mapped[str | None] = mapped_column(String(255))
