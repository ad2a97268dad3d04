"""Aggregate reporting queries over invoices, records and prescriptions."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from src.core.database import Database
from src.shared.enums import InvoiceStatus
from src.shared.query_builder import build_order_by_clause, build_where_clause, compose

PERIOD_FORMATS = {
    "postgresql": {"day": "YYYY-MM-DD", "month": "YYYY-MM", "year": "YYYY"},
    "sqlite": {"day": "%Y-%m-%d", "month": "%Y-%m", "year": "%Y"},
}


def period_expression(dialect: str, column: str, group_by: str) -> str:
    """SQL rendering ``column`` as a day, month or year label."""
    if dialect == "postgresql":
        return f"TO_CHAR({column}, '{PERIOD_FORMATS[dialect][group_by]}')"
    return f"strftime('{PERIOD_FORMATS['sqlite'][group_by]}', {column})"


def _utc_day_start(day: date | None) -> datetime | None:
    if day is None:
        return None
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


async def revenue(db: Database, group_by: str, start: date | None, end: date | None) -> list[dict[str, Any]]:
    period = period_expression(db.dialect_name, "payment_date", group_by)
    end_exclusive = end + timedelta(days=1) if end is not None else None
    where = build_where_clause(
        {
            "status": InvoiceStatus.PAID,
            "payment_date": {"gte": _utc_day_start(start), "lt": _utc_day_start(end_exclusive)},
        }
    )
    sql = compose(
        f"""
        SELECT {period} AS time_period,
               COUNT(id) AS total_invoices,
               SUM(examination_fee) AS total_examination_fee,
               SUM(medicine_fee) AS total_medicine_fee,
               SUM(total_fee) AS total_revenue
        FROM invoices
        """,
        where.text,
        f"GROUP BY {period}",
        build_order_by_clause("time_period", "DESC"),
    )
    return await db.query(sql, where.params)


async def patient_visits(db: Database, group_by: str, start: date | None, end: date | None) -> list[dict[str, Any]]:
    period = period_expression(db.dialect_name, "examination_date", group_by)
    where = build_where_clause({"examination_date": {"gte": start, "lte": end}})
    sql = compose(
        f"""
        SELECT {period} AS time_period,
               COUNT(DISTINCT patient_id) AS unique_patients,
               COUNT(*) AS total_visits
        FROM medical_records
        """,
        where.text,
        f"GROUP BY {period}",
        build_order_by_clause("time_period", "DESC"),
    )
    return await db.query(sql, where.params)


async def disease_counts(db: Database, start: date | None, end: date | None) -> list[dict[str, Any]]:
    where = build_where_clause({"m.examination_date": {"gte": start, "lte": end}})
    sql = compose(
        """
        SELECT d.name AS disease_name,
               COUNT(*) AS total_cases,
               COUNT(DISTINCT m.patient_id) AS unique_patients
        FROM medical_records m
        JOIN disease_types d ON m.disease_type_id = d.id
        """,
        where.text,
        "GROUP BY d.id, d.name",
        build_order_by_clause({"total_cases": "DESC", "disease_name": "ASC"}),
    )
    return await db.query(sql, where.params)


async def medicine_usage(db: Database, start: date | None, end: date | None) -> list[dict[str, Any]]:
    where = build_where_clause({"mr.examination_date": {"gte": start, "lte": end}})
    sql = compose(
        """
        SELECT med.name AS medicine_name,
               SUM(p.quantity) AS total_quantity,
               COUNT(DISTINCT mr.patient_id) AS unique_patients,
               SUM(med.price * p.quantity) AS total_revenue
        FROM prescriptions p
        JOIN medicines med ON p.medicine_id = med.id
        JOIN medical_records mr ON p.medical_record_id = mr.id
        """,
        where.text,
        "GROUP BY med.id, med.name",
        build_order_by_clause({"total_quantity": "DESC", "medicine_name": "ASC"}),
    )
    return await db.query(sql, where.params)
