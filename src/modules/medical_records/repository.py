"""Medical record queries."""

from __future__ import annotations

from typing import Any

from src.core.database import Database, placeholder
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

from .validators import MedicalRecordSearchCriteria

SELECT_DETAIL = """
    SELECT mr.*,
           p.full_name AS patient_name,
           s.full_name AS doctor_name,
           dt.name AS disease_name
    FROM medical_records mr
    LEFT JOIN patients p ON mr.patient_id = p.id
    LEFT JOIN staff s ON mr.staff_id = s.id
    LEFT JOIN disease_types dt ON mr.disease_type_id = dt.id
"""

SELECT_COUNT = """
    SELECT COUNT(*)
    FROM medical_records mr
    LEFT JOIN patients p ON mr.patient_id = p.id
    LEFT JOIN disease_types dt ON mr.disease_type_id = dt.id
"""

SELECT_PRESCRIPTIONS = """
    SELECT pr.*,
           m.name AS medicine_name,
           m.unit AS medicine_unit,
           m.price AS medicine_price
    FROM prescriptions pr
    JOIN medicines m ON pr.medicine_id = m.id
"""

SEARCH_ORDER = {"mr.examination_date": "DESC", "mr.id": "DESC"}
KEYWORD_COLUMNS = ("p.full_name", "mr.symptoms", "mr.diagnosis", "dt.name")


def medical_record_repository(db: Database) -> Repository:
    return Repository(db, "medical_records")


def prescription_repository(db: Database) -> Repository:
    return Repository(db, "prescriptions")


def disease_type_repository(db: Database) -> Repository:
    return Repository(db, "disease_types")


def medicine_repository(db: Database) -> Repository:
    return Repository(db, "medicines")


async def get_detail(db: Database, record_id: int) -> dict[str, Any] | None:
    return await db.query_one(compose(SELECT_DETAIL, f"WHERE mr.id = {placeholder(1)}"), [record_id])


async def get_prescriptions(db: Database, record_id: int) -> list[dict[str, Any]]:
    sql = compose(
        SELECT_PRESCRIPTIONS,
        f"WHERE pr.medical_record_id = {placeholder(1)}",
        build_order_by_clause("pr.id"),
    )
    return await db.query(sql, [record_id])


async def get_invoice(db: Database, record_id: int) -> dict[str, Any] | None:
    return await db.query_one(f"SELECT * FROM invoices WHERE medical_record_id = {placeholder(1)}", [record_id])


def search_filters(criteria: MedicalRecordSearchCriteria, start_index: int = 1) -> SqlFragment:
    predicates = build_predicates(
        {
            "mr.patient_id": criteria.patient_id,
            "mr.staff_id": criteria.staff_id,
            "mr.disease_type_id": criteria.disease_type_id,
            "mr.examination_date": {"gte": criteria.start_date, "lte": criteria.end_date},
        },
        start_index=start_index,
    )
    keyword = build_keyword_clause(KEYWORD_COLUMNS, criteria.keyword, predicates.next_index)
    return where_all(predicates, keyword)


async def search(
    db: Database,
    criteria: MedicalRecordSearchCriteria,
    limit: int | None = None,
    offset: int = 0,
) -> list[dict[str, Any]]:
    where = search_filters(criteria)
    paging = build_limit_offset_clause(limit, offset, where.next_index)
    sql = compose(SELECT_DETAIL, where.text, build_order_by_clause(SEARCH_ORDER), paging.text)
    return await db.query(sql, where.params + paging.params)


async def count_search(db: Database, criteria: MedicalRecordSearchCriteria) -> int:
    where = search_filters(criteria)
    total = await db.scalar(compose(SELECT_COUNT, where.text), where.params)
    return int(total or 0)
