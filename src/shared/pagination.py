"""Compose repository search/count pairs into pages."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from src.shared.schemas import Page, PaginationMeta

CriteriaT = TypeVar("CriteriaT")

FetchPage = Callable[[CriteriaT, int, int], Awaitable[list[Any]]]
CountMatches = Callable[[CriteriaT], Awaitable[int]]


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit if page > 1 else 0


async def paginate(
    fetch: FetchPage[CriteriaT],
    count: CountMatches[CriteriaT],
    criteria: CriteriaT,
    page: int,
    limit: int,
) -> Page[Any]:
    """Run ``fetch`` and ``count`` against the same criteria object.

    ``fetch`` receives ``(criteria, limit, offset)``; ``count`` receives only
    the criteria so both see an identical filter set.
    """
    rows = await fetch(criteria, limit, page_offset(page, limit))
    total = await count(criteria)
    return Page[Any](data=rows, pagination=PaginationMeta(total=total, page=page, limit=limit))
