"""Invoice and clinic setting ORM models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base
from src.shared.enums import InvoiceStatus, enum_values
from src.shared.models import IntegerIdMixin, TimestampMixin


class Invoice(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "invoices"

    medical_record_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("medical_records.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    examination_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    medicine_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(
            InvoiceStatus,
            values_callable=enum_values,
            validate_strings=True,
            name="invoicestatus",
        ),
        nullable=False,
        server_default=InvoiceStatus.PENDING.value,
    )
    payment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class ClinicSetting(Base, IntegerIdMixin, TimestampMixin):
    """Key/value configuration editable at runtime, e.g. ``examination_fee``."""

    __tablename__ = "settings"

    setting_key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    setting_value: Mapped[str | None] = mapped_column(String(255))
