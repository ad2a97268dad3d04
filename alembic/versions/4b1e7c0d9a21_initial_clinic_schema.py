"""Initial schema for the clinic backend.

Revision ID: 4b1e7c0d9a21
Revises:
Create Date: 2026-10-18 09:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4b1e7c0d9a21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

staff_role = sa.Enum("admin", "doctor", "receptionist", "cashier", name="staffrole")
appointment_status = sa.Enum(
    "PENDING", "CONFIRMED", "COMPLETED", "CANCELLED", "NO_SHOW", name="appointmentstatus"
)
invoice_status = sa.Enum("pending", "paid", "cancelled", name="invoicestatus")

ACTIVE_SLOT_PREDICATE = sa.text("status <> 'CANCELLED'")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("gender", sa.String(length=10)),
        sa.Column("birth_year", sa.Integer()),
        sa.Column("phone", sa.String(length=20)),
        sa.Column("address", sa.String(length=255)),
        *_timestamps(),
    )
    op.create_index("ix_patients_full_name", "patients", ["full_name"])
    op.create_index("ix_patients_phone", "patients", ["phone"])

    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("role", staff_role, nullable=False, server_default="doctor"),
        sa.Column("phone", sa.String(length=20)),
        sa.Column("email", sa.String(length=100), unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("doctor_id", sa.Integer(), sa.ForeignKey("staff.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("time_slot", sa.String(length=11), nullable=False),
        sa.Column("order_number", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=False),
        sa.Column("status", appointment_status, nullable=False, server_default="PENDING"),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.UniqueConstraint("appointment_date", "order_number", name="uq_appointments_date_order"),
        sa.CheckConstraint("order_number > 0", name="ck_appointments_order_positive"),
    )
    op.create_index(
        "uq_appointments_active_doctor_slot",
        "appointments",
        ["doctor_id", "appointment_date", "time_slot"],
        unique=True,
        postgresql_where=ACTIVE_SLOT_PREDICATE,
        sqlite_where=ACTIVE_SLOT_PREDICATE,
    )
    op.create_index("ix_appointments_patient_date", "appointments", ["patient_id", "appointment_date"])
    op.create_index("ix_appointments_status", "appointments", ["status"])

    op.create_table(
        "disease_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        *_timestamps(),
    )

    op.create_table(
        "medicines",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_medicines_price_non_negative"),
    )
    op.create_index("ix_medicines_name", "medicines", ["name"])

    op.create_table(
        "medical_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("disease_type_id", sa.Integer(), sa.ForeignKey("disease_types.id", ondelete="SET NULL")),
        sa.Column("examination_date", sa.Date(), nullable=False),
        sa.Column("symptoms", sa.Text()),
        sa.Column("diagnosis", sa.Text()),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_medical_records_patient_id", "medical_records", ["patient_id"])
    op.create_index("ix_medical_records_examination_date", "medical_records", ["examination_date"])

    op.create_table(
        "prescriptions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "medical_record_id",
            sa.Integer(),
            sa.ForeignKey("medical_records.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("medicine_id", sa.Integer(), sa.ForeignKey("medicines.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("usage", sa.String(length=255)),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="ck_prescriptions_quantity_positive"),
    )
    op.create_index("ix_prescriptions_medical_record_id", "prescriptions", ["medical_record_id"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "medical_record_id",
            sa.Integer(),
            sa.ForeignKey("medical_records.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("examination_fee", sa.Integer(), nullable=False),
        sa.Column("medicine_fee", sa.Integer(), nullable=False),
        sa.Column("total_fee", sa.Integer(), nullable=False),
        sa.Column("status", invoice_status, nullable=False, server_default="pending"),
        sa.Column("payment_date", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("setting_key", sa.String(length=100), nullable=False, unique=True),
        sa.Column("setting_value", sa.String(length=255)),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_table("invoices")
    op.drop_index("ix_prescriptions_medical_record_id", table_name="prescriptions")
    op.drop_table("prescriptions")
    op.drop_index("ix_medical_records_examination_date", table_name="medical_records")
    op.drop_index("ix_medical_records_patient_id", table_name="medical_records")
    op.drop_table("medical_records")
    op.drop_index("ix_medicines_name", table_name="medicines")
    op.drop_table("medicines")
    op.drop_table("disease_types")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_patient_date", table_name="appointments")
    op.drop_index("uq_appointments_active_doctor_slot", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("staff")
    op.drop_index("ix_patients_phone", table_name="patients")
    op.drop_index("ix_patients_full_name", table_name="patients")
    op.drop_table("patients")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        invoice_status.drop(bind, checkfirst=True)
        appointment_status.drop(bind, checkfirst=True)
        staff_role.drop(bind, checkfirst=True)
