"""Patient and staff queries."""

from __future__ import annotations

from typing import Any

from src.core.database import Database
from src.modules.appointments import repository as appointment_queries
from src.modules.appointments.validators import AppointmentSearchCriteria
from src.modules.medical_records import repository as medical_record_queries
from src.modules.medical_records.validators import MedicalRecordSearchCriteria
from src.shared.query_builder import (
    build_order_by_clause,
    build_pagination_clause,
    build_where_clause,
    compose,
)
from src.shared.repository import Repository

NAME_ORDER = {"full_name": "ASC", "id": "ASC"}


def patient_repository(db: Database) -> Repository:
    return Repository(db, "patients")


def staff_repository(db: Database) -> Repository:
    return Repository(db, "staff")


def _name_filter(name: str | None) -> dict[str, Any]:
    return {"full_name": {"like": name}} if name else {}


async def search_by_name(db: Database, name: str | None, limit: int, page: int) -> list[dict[str, Any]]:
    where = build_where_clause(_name_filter(name))
    paging = build_pagination_clause(limit, page, where.next_index)
    sql = compose("SELECT * FROM patients", where.text, build_order_by_clause(NAME_ORDER), paging.text)
    return await db.query(sql, where.params + paging.params)


async def count_by_name(db: Database, name: str | None) -> int:
    where = build_where_clause(_name_filter(name))
    return int(await db.scalar(compose("SELECT COUNT(*) FROM patients", where.text), where.params) or 0)


async def medical_history(db: Database, patient_id: int) -> list[dict[str, Any]]:
    """Every medical record of the patient, newest examination first."""
    return await medical_record_queries.search(db, MedicalRecordSearchCriteria(patient_id=patient_id))


async def appointments(db: Database, patient_id: int) -> list[dict[str, Any]]:
    """Every appointment of the patient, latest date first."""
    return await appointment_queries.search(db, AppointmentSearchCriteria(patient_id=patient_id))
