"""Helpers for building safe, reusable SQL filter fragments."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def build_optional_equals_where(
    filters: Mapping[str, Any],
) -> tuple[list[str], dict[str, Any]]:
    """Build `column = :column` predicates for the filter values that are set.

    Column names must be static (owned by application code), never user
    input. `None` and blank strings are skipped.
    """
    conditions: list[str] = []
    params: dict[str, Any] = {}

    for column, value in filters.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        conditions.append(f"{column} = :{column}")
        params[column] = value

    return conditions, params


def build_in_condition(column: str, values: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """Build `column IN (:column_0, :column_1, ...)` with one bound param per value."""
    if not values:
        return "FALSE", {}
    params = {f"{column}_{i}": value for i, value in enumerate(values)}
    placeholders = ", ".join(f":{name}" for name in params)
    return f"{column} IN ({placeholders})", params


def join_where(conditions: Sequence[str]) -> str:
    return " AND ".join(conditions) if conditions else "TRUE"


def page_params(page: int, limit: int) -> dict[str, int]:
    """LIMIT/OFFSET params for a 1-based page number."""
    page = max(page, 1)
    limit = max(limit, 1)
    return {"limit": limit, "offset": (page - 1) * limit}


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return -(-total // limit)
