"""Invoice queries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.core.database import Database, placeholder
from src.shared.query_builder import (
    build_order_by_clause,
    build_pagination_clause,
    build_where_clause,
    compose,
)
from src.shared.repository import Repository

EXAMINATION_FEE_KEY = "examination_fee"

SELECT_SUMMARY = """
    SELECT i.*,
           m.patient_id,
           p.full_name AS patient_name, p.gender, p.birth_year,
           m.symptoms,
           d.name AS disease_name
    FROM invoices i
    JOIN medical_records m ON i.medical_record_id = m.id
    JOIN patients p ON m.patient_id = p.id
    LEFT JOIN disease_types d ON m.disease_type_id = d.id
"""

SELECT_COUNT = """
    SELECT COUNT(*)
    FROM invoices i
    JOIN medical_records m ON i.medical_record_id = m.id
"""

LIST_ORDER = {"i.payment_date": "DESC", "i.id": "DESC"}


def invoice_repository(db: Database) -> Repository:
    return Repository(db, "invoices")


async def get_summary(db: Database, invoice_id: int) -> dict[str, Any] | None:
    return await db.query_one(compose(SELECT_SUMMARY, f"WHERE i.id = {placeholder(1)}"), [invoice_id])


async def get_items(db: Database, medical_record_id: int) -> list[dict[str, Any]]:
    sql = f"""
        SELECT med.name AS medicine_name,
               pr.quantity,
               med.price AS unit_price,
               med.price * pr.quantity AS total_price
        FROM prescriptions pr
        JOIN medicines med ON pr.medicine_id = med.id
        WHERE pr.medical_record_id = {placeholder(1)}
        ORDER BY pr.id
    """
    return await db.query(sql, [medical_record_id])


async def find_by_medical_record(db: Database, medical_record_id: int) -> dict[str, Any] | None:
    return await db.query_one(
        f"SELECT id FROM invoices WHERE medical_record_id = {placeholder(1)}",
        [medical_record_id],
    )


async def medicine_fee(db: Database, medical_record_id: int) -> int:
    sql = f"""
        SELECT COALESCE(SUM(m.price * p.quantity), 0)
        FROM prescriptions p
        JOIN medicines m ON p.medicine_id = m.id
        WHERE p.medical_record_id = {placeholder(1)}
    """
    return int(await db.scalar(sql, [medical_record_id]) or 0)


async def setting_value(db: Database, key: str) -> str | None:
    return await db.scalar(f"SELECT setting_value FROM settings WHERE setting_key = {placeholder(1)}", [key])


async def list_invoices(
    db: Database,
    criteria: Mapping[str, Any],
    limit: int | None = None,
    page: int | None = 1,
) -> list[dict[str, Any]]:
    where = build_where_clause(criteria)
    paging = build_pagination_clause(limit, page, where.next_index)
    sql = compose(SELECT_SUMMARY, where.text, build_order_by_clause(LIST_ORDER), paging.text)
    return await db.query(sql, where.params + paging.params)


async def count_invoices(db: Database, criteria: Mapping[str, Any]) -> int:
    where = build_where_clause(criteria)
    return int(await db.scalar(compose(SELECT_COUNT, where.text), where.params) or 0)
