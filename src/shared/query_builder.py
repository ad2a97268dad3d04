"""Translate criteria mappings into parameterized SQL fragments.

Placeholders are numbered from a caller-supplied index so that several
fragments (WHERE, extra predicates, LIMIT/OFFSET) can be concatenated into one
statement sharing a single positional parameter list.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from src.core.database import placeholder

ALWAYS_TRUE = "1=1"
LIKE_ESCAPE = "\\"
ALWAYS_FALSE = "1 = 0"
SORT_DIRECTIONS = {"ASC", "DESC"}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


@dataclass(frozen=True)
class SqlFragment:
    text: str
    params: list[Any] = field(default_factory=list)
    next_index: int = 1


def column_ref(key: str, table_alias: str = "") -> str:
    """Qualify ``key`` with ``table_alias`` unless it is already qualified."""
    if not _IDENTIFIER.match(key):
        raise ValueError(f"Invalid column reference: {key!r}")
    if table_alias and "." not in key:
        return f"{table_alias}.{key}"
    return key


class _ParamCounter:
    def __init__(self, start: int):
        self.index = start
        self.params: list[Any] = []

    def add(self, value: Any) -> str:
        marker = placeholder(self.index)
        self.index += 1
        self.params.append(value)
        return marker


def like_pattern(value: Any) -> str:
    """Substring pattern for ``value`` with LIKE wildcards taken literally."""
    escaped = str(value).replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
    for wildcard in ("%", "_"):
        escaped = escaped.replace(wildcard, LIKE_ESCAPE + wildcard)
    return f"%{escaped}%"


def _operator_predicates(column: str, operators: Mapping[str, Any], counter: _ParamCounter) -> list[str]:
    predicates: list[str] = []
    for operator, value in operators.items():
        if value is None:
            continue
        if operator == "lt":
            predicates.append(f"{column} < {counter.add(value)}")
        elif operator == "lte":
            predicates.append(f"{column} <= {counter.add(value)}")
        elif operator == "gt":
            predicates.append(f"{column} > {counter.add(value)}")
        elif operator == "gte":
            predicates.append(f"{column} >= {counter.add(value)}")
        elif operator == "like":
            predicates.append(f"LOWER({column}) LIKE LOWER({counter.add(like_pattern(value))}) ESCAPE '{LIKE_ESCAPE}'")
        elif operator == "between":
            start, end = value
            predicates.append(f"{column} BETWEEN {counter.add(start)} AND {counter.add(end)}")
    return predicates


def build_predicates(criteria: Mapping[str, Any], table_alias: str = "", start_index: int = 1) -> SqlFragment:
    """Return the AND-joined predicates for ``criteria`` without the WHERE keyword.

    The fragment text is empty when no predicate applies.
    """
    counter = _ParamCounter(start_index)
    clauses: list[str] = []

    for key, value in criteria.items():
        if value is None:
            continue
        column = column_ref(key, table_alias)
        if isinstance(value, (list, tuple, set, frozenset)):
            values = list(value)
            if not values:
                clauses.append(ALWAYS_FALSE)
                continue
            markers = ", ".join(counter.add(item) for item in values)
            clauses.append(f"{column} IN ({markers})")
        elif isinstance(value, Mapping):
            clauses.extend(_operator_predicates(column, value, counter))
        else:
            clauses.append(f"{column} = {counter.add(value)}")

    return SqlFragment(" AND ".join(clauses), counter.params, counter.index)


def build_where_clause(criteria: Mapping[str, Any], table_alias: str = "", start_index: int = 1) -> SqlFragment:
    """Build a ``WHERE`` clause; with no predicates it is ``WHERE 1=1``."""
    predicates = build_predicates(criteria, table_alias, start_index)
    return SqlFragment(
        f"WHERE {predicates.text or ALWAYS_TRUE}",
        predicates.params,
        predicates.next_index,
    )


def build_keyword_clause(columns: Sequence[str], keyword: str | None, start_index: int = 1) -> SqlFragment:
    """Case-insensitive substring match of one keyword against any of ``columns``.

    A single placeholder is shared by every column.
    """
    if not keyword:
        return SqlFragment("", [], start_index)
    marker = placeholder(start_index)
    matches = " OR ".join(f"LOWER({column_ref(column)}) LIKE {marker} ESCAPE '{LIKE_ESCAPE}'" for column in columns)
    return SqlFragment(f"({matches})", [like_pattern(keyword.lower())], start_index + 1)


def where_all(*fragments: SqlFragment) -> SqlFragment:
    """AND together predicate fragments that were numbered consecutively."""
    clauses = [fragment.text for fragment in fragments if fragment.text]
    params = [param for fragment in fragments for param in fragment.params]
    next_index = fragments[-1].next_index if fragments else 1
    return SqlFragment(f"WHERE {' AND '.join(clauses) or ALWAYS_TRUE}", params, next_index)


def _direction(value: str) -> str:
    direction = value.upper()
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Invalid sort direction: {value!r}")
    return direction


def build_order_by_clause(
    sort: str | Mapping[str, str] | None,
    direction: str = "ASC",
    table_alias: str = "",
) -> str:
    if not sort:
        return ""
    if isinstance(sort, str):
        return f"ORDER BY {column_ref(sort, table_alias)} {_direction(direction)}"
    fields = ", ".join(f"{column_ref(column, table_alias)} {_direction(order)}" for column, order in sort.items())
    return f"ORDER BY {fields}"


def build_limit_offset_clause(limit: int | None, offset: int = 0, start_index: int = 1) -> SqlFragment:
    if not limit:
        return SqlFragment("", [], start_index)
    return SqlFragment(
        f"LIMIT {placeholder(start_index)} OFFSET {placeholder(start_index + 1)}",
        [limit, offset],
        start_index + 2,
    )


def build_pagination_clause(limit: int | None, page: int | None = 1, start_index: int = 1) -> SqlFragment:
    """LIMIT/OFFSET for a 1-based page; omitted entirely when limit is falsy."""
    offset = (page - 1) * limit if limit and page and page > 1 else 0
    return build_limit_offset_clause(limit, offset, start_index)


def compose(*parts: str) -> str:
    """Join non-empty SQL parts with single spaces."""
    return " ".join(part.strip() for part in parts if part and part.strip())
