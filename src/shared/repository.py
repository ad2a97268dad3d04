"""Table-parameterized CRUD built on the query builder."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.core.database import Database, placeholder
from src.shared.query_builder import (
    build_order_by_clause,
    build_limit_offset_clause,
    build_where_clause,
    column_ref,
    compose,
)


def _equality_only(criteria: Mapping[str, Any] | None) -> dict[str, Any]:
    criteria = dict(criteria or {})
    for key, value in criteria.items():
        if isinstance(value, (Mapping, list, tuple, set, frozenset)):
            raise TypeError(f"Repository criteria only support equality; got {type(value).__name__} for {key!r}")
    return criteria


class Repository:
    """Equality-only CRUD over a single table.

    Entities that need range or keyword search keep their own query functions
    next to this class and run them through the same ``Database`` handle.
    """

    def __init__(self, db: Database, table: str, timestamps: bool = True):
        self.db = db
        self.table = column_ref(table)
        self.timestamps = timestamps

    async def find_all(
        self,
        limit: int | None = None,
        offset: int = 0,
        order_by: str = "id",
        order: str = "ASC",
        where: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        where_clause = build_where_clause(_equality_only(where))
        paging = build_limit_offset_clause(limit, max(offset, 0), where_clause.next_index)
        sql = compose(
            f"SELECT * FROM {self.table}",
            where_clause.text,
            build_order_by_clause(order_by, order),
            paging.text,
        )
        return await self.db.query(sql, where_clause.params + paging.params)

    async def find_by_id(self, record_id: int) -> dict[str, Any] | None:
        return await self.db.query_one(f"SELECT * FROM {self.table} WHERE id = {placeholder(1)}", [record_id])

    async def find_by(self, criteria: Mapping[str, Any]) -> list[dict[str, Any]]:
        where_clause = build_where_clause(_equality_only(criteria))
        return await self.db.query(f"SELECT * FROM {self.table} {where_clause.text}", where_clause.params)

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        if not data:
            raise ValueError("create() requires at least one column")
        columns = [column_ref(key) for key in data]
        markers = ", ".join(placeholder(index) for index in range(1, len(columns) + 1))
        sql = f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({markers}) RETURNING *"
        async with self.db.transaction():
            rows = await self.db.query(sql, list(data.values()))
        return rows[0]

    async def update(self, record_id: int, data: Mapping[str, Any]) -> dict[str, Any] | None:
        if not data:
            return await self.find_by_id(record_id)
        assignments = [f"{column_ref(key)} = {placeholder(index)}" for index, key in enumerate(data, start=1)]
        if self.timestamps and "updated_at" not in data:
            assignments.append("updated_at = CURRENT_TIMESTAMP")
        params = list(data.values())
        params.append(record_id)
        sql = f"UPDATE {self.table} SET {', '.join(assignments)} WHERE id = {placeholder(len(params))} RETURNING *"
        async with self.db.transaction():
            rows = await self.db.query(sql, params)
        return rows[0] if rows else None

    async def delete(self, record_id: int) -> bool:
        async with self.db.transaction():
            affected = await self.db.execute(f"DELETE FROM {self.table} WHERE id = {placeholder(1)}", [record_id])
        return affected > 0

    async def count(self, criteria: Mapping[str, Any] | None = None) -> int:
        where_clause = build_where_clause(_equality_only(criteria))
        total = await self.db.scalar(f"SELECT COUNT(*) FROM {self.table} {where_clause.text}", where_clause.params)
        return int(total or 0)
