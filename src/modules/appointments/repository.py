"""Appointment queries.

Plain CRUD goes through the generic ``Repository``; the joined, range and
keyword queries below are free functions over the same ``Database`` handle.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.exc import IntegrityError

from src.core.database import Database, placeholder
from src.core.exceptions import constraint_name
from src.shared.enums import AppointmentStatus
from src.shared.query_builder import (
    SqlFragment,
    build_keyword_clause,
    build_limit_offset_clause,
    build_order_by_clause,
    build_predicates,
    compose,
    where_all,
)
from src.shared.repository import Repository

from .validators import AppointmentSearchCriteria

TABLE = "appointments"

ACTIVE_SLOT_INDEX = "uq_appointments_active_doctor_slot"
DATE_ORDER_CONSTRAINT = "uq_appointments_date_order"

# SQLite reports the violated columns instead of the constraint name
_CONSTRAINT_COLUMNS = {
    ACTIVE_SLOT_INDEX: "appointments.doctor_id, appointments.appointment_date, appointments.time_slot",
    DATE_ORDER_CONSTRAINT: "appointments.appointment_date, appointments.order_number",
}

SELECT_DETAIL = """
    SELECT a.*,
           p.full_name AS patient_name, p.gender, p.birth_year, p.phone,
           s.full_name AS doctor_name
    FROM appointments a
    JOIN patients p ON a.patient_id = p.id
    LEFT JOIN staff s ON a.doctor_id = s.id
"""

SELECT_COUNT = """
    SELECT COUNT(*) AS total
    FROM appointments a
    JOIN patients p ON a.patient_id = p.id
"""

SEARCH_ORDER = {"a.appointment_date": "DESC", "a.order_number": "ASC", "a.id": "ASC"}
KEYWORD_COLUMNS = ("p.full_name", "p.phone", "a.notes")


def appointment_repository(db: Database) -> Repository:
    return Repository(db, TABLE)


async def get_detail(db: Database, appointment_id: int) -> dict[str, Any] | None:
    sql = compose(SELECT_DETAIL, f"WHERE a.id = {placeholder(1)}")
    return await db.query_one(sql, [appointment_id])


async def get_by_date(db: Database, appointment_date: date) -> list[dict[str, Any]]:
    sql = compose(
        SELECT_DETAIL,
        f"WHERE a.appointment_date = {placeholder(1)}",
        build_order_by_clause("a.order_number", "ASC"),
    )
    return await db.query(sql, [appointment_date])


def search_filters(criteria: AppointmentSearchCriteria, start_index: int = 1) -> SqlFragment:
    """WHERE clause shared by ``search`` and ``count_search``."""
    predicates = build_predicates(
        {
            "a.patient_id": criteria.patient_id,
            "a.doctor_id": criteria.doctor_id,
            "a.status": criteria.status,
            "a.appointment_date": {"gte": criteria.start_date, "lte": criteria.end_date},
        },
        start_index=start_index,
    )
    keyword = build_keyword_clause(KEYWORD_COLUMNS, criteria.keyword, predicates.next_index)
    return where_all(predicates, keyword)


async def search(
    db: Database,
    criteria: AppointmentSearchCriteria,
    limit: int | None = None,
    offset: int = 0,
) -> list[dict[str, Any]]:
    where = search_filters(criteria)
    paging = build_limit_offset_clause(limit, offset, where.next_index)
    sql = compose(SELECT_DETAIL, where.text, build_order_by_clause(SEARCH_ORDER), paging.text)
    return await db.query(sql, where.params + paging.params)


async def count_search(db: Database, criteria: AppointmentSearchCriteria) -> int:
    where = search_filters(criteria)
    total = await db.scalar(compose(SELECT_COUNT, where.text), where.params)
    return int(total or 0)


async def next_order_number(db: Database, appointment_date: date) -> int:
    sql = f"SELECT COALESCE(MAX(order_number), 0) + 1 FROM appointments WHERE appointment_date = {placeholder(1)}"
    return int(await db.scalar(sql, [appointment_date]))


async def find_slot_conflict(
    db: Database,
    doctor_id: int,
    appointment_date: date,
    time_slot: str,
    exclude_id: int | None = None,
) -> dict[str, Any] | None:
    """Return an active appointment holding the doctor's slot, if any."""
    predicates = build_predicates(
        {"doctor_id": doctor_id, "appointment_date": appointment_date, "time_slot": time_slot}
    )
    clauses = [predicates.text, f"status <> {placeholder(predicates.next_index)}"]
    params = [*predicates.params, AppointmentStatus.CANCELLED]
    if exclude_id is not None:
        clauses.append(f"id <> {placeholder(predicates.next_index + 1)}")
        params.append(exclude_id)
    sql = compose(f"SELECT id, order_number, status FROM {TABLE}", "WHERE", " AND ".join(clauses), "LIMIT 1")
    return await db.query_one(sql, params)


def violated_constraint(exc: IntegrityError) -> str | None:
    """Which appointment uniqueness guard ``exc`` tripped, if any."""
    name = constraint_name(exc)
    if name in _CONSTRAINT_COLUMNS:
        return name
    message = str(exc.orig)
    for constraint, columns in _CONSTRAINT_COLUMNS.items():
        if constraint in message or columns in message:
            return constraint
    return None
