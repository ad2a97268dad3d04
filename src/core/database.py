"""Database engine, session helpers and the data-access handle."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any

from fastapi import Depends
from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.engine import make_url
from sqlalchemy.engine.url import URL
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql.elements import BindParameter, TextClause

from .config import settings
from .logging import get_logger

logger = get_logger(__name__)

SUPPORTED_ASYNC_DIALECTS = {"postgresql+asyncpg", "sqlite+aiosqlite"}
DRIVER_COERCIONS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}
PARAM_PREFIX = "p"


def resolve_async_database_url(raw_url: str) -> str:
    """Ensure the configured DATABASE_URL uses an async-capable driver."""
    url = make_url(raw_url)
    drivername = url.drivername.lower()
    if drivername in SUPPORTED_ASYNC_DIALECTS:
        return raw_url

    base_driver = drivername.split("+", 1)[0]
    target_driver = DRIVER_COERCIONS.get(base_driver)
    if not target_driver:
        raise ValueError(
            f"Unsupported database dialect '{url.drivername}'. "
            "The clinic backend supports PostgreSQL (asyncpg) "
            "or SQLite with aiosqlite for testing."
        )

    coerced_url: URL = url.set(drivername=target_driver)
    return coerced_url.render_as_string(hide_password=False)


class Base(DeclarativeBase):
    """Base declarative class with common metadata."""


DATABASE_URL = resolve_async_database_url(settings.database_url)

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.debug,
    future=True,
)
AsyncSessionLocal = async_sessionmaker(
    engine,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async session."""
    async with AsyncSessionLocal() as session:
        yield session


def placeholder(index: int) -> str:
    """Return the bind marker for the 1-based positional parameter ``index``."""
    return f":{PARAM_PREFIX}{index}"


def _bind_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _bind(index: int, value: Any) -> BindParameter:
    name = f"{PARAM_PREFIX}{index}"
    if isinstance(value, datetime) and value.tzinfo is not None:
        return bindparam(name, value, type_=DateTime(timezone=True))
    return bindparam(name, _bind_value(value))


def compile_statement(sql: str, params: Sequence[Any] = ()) -> TextClause:
    """Attach positional ``params`` to the ``:p1..:pN`` markers of ``sql``."""
    statement = text(sql)
    if params:
        statement = statement.bindparams(*(_bind(index, value) for index, value in enumerate(params, start=1)))
    return statement


class Database:
    """Data-access handle over a single AsyncSession.

    Every repository and service receives one of these explicitly. Writes go
    through ``transaction()``, which commits on success and rolls back on any
    exception; nested blocks join the outermost one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._depth = 0

    async def _run(self, sql: str, params: Sequence[Any]):
        started = time.perf_counter()
        try:
            result = await self.session.execute(compile_statement(sql, params))
        except Exception:
            logger.error(
                "query_failed",
                sql=" ".join(sql.split()),
                elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
            )
            raise
        logger.debug(
            "query",
            sql=" ".join(sql.split()),
            params=list(params),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        return result

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        result = await self._run(sql, params)
        return [dict(row) for row in result.mappings().all()]

    async def query_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        rows = await self.query(sql, params)
        return rows[0] if rows else None

    async def scalar(self, sql: str, params: Sequence[Any] = ()) -> Any:
        result = await self._run(sql, params)
        return result.scalar()

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        result = await self._run(sql, params)
        return result.rowcount

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @property
    def dialect_name(self) -> str:
        bind = self.session.get_bind()
        return bind.dialect.name

    @asynccontextmanager
    async def transaction(self, isolation_level: str | None = None) -> AsyncIterator[Database]:
        """Commit on success, roll back on error.

        ``isolation_level`` only takes effect on PostgreSQL when the session
        has not started a transaction yet.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        if isolation_level and self.dialect_name == "postgresql" and not self.session.in_transaction():
            await self.session.connection(execution_options={"isolation_level": isolation_level})

        self._depth = 1
        try:
            yield self
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise
        finally:
            self._depth = 0


async def get_database(session: AsyncSession = Depends(get_db)) -> Database:
    """FastAPI dependency wrapping the request session in a Database handle."""
    return Database(session)
