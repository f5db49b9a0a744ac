"""Hackathon repository - CRUD for hackathons."""

import json
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.base import row_to_dict
from app.persistence.query_builder import (
    build_in_condition,
    build_optional_equals_where,
    join_where,
    page_params,
)
from app.utils.clock import utc_now

JSON_COLUMNS = frozenset(
    {
        "timeline",
        "participation_rules",
        "submission_requirements",
        "communication_resources",
        "prize_rewards",
        "settings",
    }
)

UPDATABLE_COLUMNS = frozenset(
    {"title", "problem_statement", "mode", "banner_url", "logo_url", "status"} | JSON_COLUMNS
)

_SELECT_COLUMNS = """
    id, organizer_id, title, problem_statement, mode, banner_url, logo_url,
    timeline, participation_rules, submission_requirements, communication_resources,
    prize_rewards, settings, status, created_at, updated_at
"""


def _to_row(row: Any) -> dict[str, Any]:
    return row_to_dict(row, JSON_COLUMNS)


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _bind_value(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS:
        return json.dumps(value or {})
    return value


class HackathonRepository:
    """CRUD operations for the hackathons table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, organizer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        now = utc_now()
        params = {
            "id": str(uuid.uuid4()),
            "organizer_id": organizer_id,
            "title": data["title"],
            "problem_statement": data["problem_statement"],
            "mode": data["mode"],
            "banner_url": data.get("banner_url"),
            "logo_url": data.get("logo_url"),
            "status": data.get("status") or "draft",
            "created_at": now,
            "updated_at": now,
        }
        for column in JSON_COLUMNS:
            params[column] = _bind_value(column, data.get(column))

        query = text(f"""
            INSERT INTO hackathons
                (id, organizer_id, title, problem_statement, mode, banner_url, logo_url,
                 timeline, participation_rules, submission_requirements, communication_resources,
                 prize_rewards, settings, status, created_at, updated_at)
            VALUES
                (:id, :organizer_id, :title, :problem_statement, :mode, :banner_url, :logo_url,
                 CAST(:timeline AS JSONB), CAST(:participation_rules AS JSONB),
                 CAST(:submission_requirements AS JSONB), CAST(:communication_resources AS JSONB),
                 CAST(:prize_rewards AS JSONB), CAST(:settings AS JSONB),
                 :status, :created_at, :updated_at)
            RETURNING {_SELECT_COLUMNS}
        """)
        result = await self.session.execute(query, params)
        return _to_row(result.fetchone())

    async def get(self, hackathon_id: str) -> dict[str, Any] | None:
        if not _is_uuid(hackathon_id):
            return None
        query = text(f"SELECT {_SELECT_COLUMNS} FROM hackathons WHERE id = :id")
        result = await self.session.execute(query, {"id": hackathon_id})
        row = result.fetchone()
        if row is None:
            return None
        return _to_row(row)

    async def get_by_title(self, title: str) -> dict[str, Any] | None:
        query = text(f"""
            SELECT {_SELECT_COLUMNS} FROM hackathons
            WHERE title = :title
            ORDER BY created_at DESC
            LIMIT 1
        """)
        result = await self.session.execute(query, {"title": title})
        row = result.fetchone()
        if row is None:
            return None
        return _to_row(row)

    async def list_page(
        self,
        *,
        page: int,
        limit: int,
        status: str | None = None,
        organizer_id: str | None = None,
        statuses: Sequence[str] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of hackathons, newest first, and the total match count."""
        conditions, params = build_optional_equals_where(
            {"status": status, "organizer_id": organizer_id}
        )
        if statuses is not None:
            in_condition, in_params = build_in_condition("status", statuses)
            conditions.append(in_condition)
            params.update(in_params)
        where_clause = join_where(conditions)

        count_result = await self.session.execute(
            text(f"SELECT COUNT(*) FROM hackathons WHERE {where_clause}"), params
        )
        total = int(count_result.scalar_one())

        query = text(f"""
            SELECT {_SELECT_COLUMNS} FROM hackathons
            WHERE {where_clause}
            ORDER BY created_at DESC
            LIMIT :limit OFFSET :offset
        """)
        result = await self.session.execute(query, {**params, **page_params(page, limit)})
        return [_to_row(row) for row in result.fetchall()], total

    async def update(self, hackathon_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        if not _is_uuid(hackathon_id):
            return None
        columns = [column for column in changes if column in UPDATABLE_COLUMNS]
        assignments = [
            f"{column} = CAST(:{column} AS JSONB)"
            if column in JSON_COLUMNS
            else f"{column} = :{column}"
            for column in columns
        ]
        assignments.append("updated_at = :updated_at")
        params = {column: _bind_value(column, changes[column]) for column in columns}
        params.update({"id": hackathon_id, "updated_at": utc_now()})

        query = text(f"""
            UPDATE hackathons
            SET {", ".join(assignments)}
            WHERE id = :id
            RETURNING {_SELECT_COLUMNS}
        """)
        result = await self.session.execute(query, params)
        row = result.fetchone()
        if row is None:
            return None
        return _to_row(row)

    async def delete(self, hackathon_id: str) -> bool:
        if not _is_uuid(hackathon_id):
            return False
        result = await self.session.execute(
            text("DELETE FROM hackathons WHERE id = :id RETURNING id"), {"id": hackathon_id}
        )
        return result.fetchone() is not None

    async def count_related(self, hackathon_id: str) -> dict[str, int]:
        """Team and submission counts for a hackathon."""
        query = text("""
            SELECT
                (SELECT COUNT(*) FROM teams WHERE hackathon_id = :id) AS total_teams,
                (SELECT COUNT(*) FROM submissions WHERE hackathon_id = :id) AS total_submissions
        """)
        result = await self.session.execute(query, {"id": hackathon_id})
        row = result.fetchone()
        if row is None:
            return {"total_teams": 0, "total_submissions": 0}
        counts = dict(row._mapping)
        return {
            "total_teams": int(counts["total_teams"] or 0),
            "total_submissions": int(counts["total_submissions"] or 0),
        }
