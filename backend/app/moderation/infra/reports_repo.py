"""Postgres-backed report storage."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from app.infra.postgres import get_pool
from app.moderation.domain.models import Report

_COLUMNS = (
    "id, reporter_id, reported_user_id, reported_message_id, reason, details, "
    "status, admin_notes, created_at, resolved_at, resolved_by"
)


class PostgresReportRepository:
    async def create(
        self,
        *,
        reporter_id: int,
        reported_user_id: Optional[int],
        reported_message_id: Optional[int],
        reason: str,
        details: Optional[str],
    ) -> Report:
        pool = await get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO reports (reporter_id, reported_user_id, reported_message_id, reason, details)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {_COLUMNS}
                """,
                reporter_id,
                reported_user_id,
                reported_message_id,
                reason,
                details,
            )
        return Report.from_record(row)

    async def list(self, status: Optional[str] = None) -> List[Report]:
        pool = await get_pool()
        async with pool.acquire() as conn:
            if status:
                rows = await conn.fetch(
                    f"SELECT {_COLUMNS} FROM reports WHERE status = $1 ORDER BY created_at DESC, id DESC",
                    status,
                )
            else:
                rows = await conn.fetch(f"SELECT {_COLUMNS} FROM reports ORDER BY created_at DESC, id DESC")
        return [Report.from_record(row) for row in rows]

    async def pending_count(self) -> int:
        pool = await get_pool()
        async with pool.acquire() as conn:
            count = await conn.fetchval("SELECT COUNT(*) FROM reports WHERE status = 'pending'")
        return int(count or 0)

    async def update(
        self,
        report_id: int,
        *,
        status: Optional[str] = None,
        admin_notes: Optional[str] = None,
        notes_set: bool = False,
        resolved_at: Optional[datetime] = None,
        resolved_by: Optional[int] = None,
    ) -> Optional[Report]:
        assignments: list[str] = []
        params: list[object] = [report_id]
        if status is not None:
            params.append(status)
            assignments.append(f"status = ${len(params)}")
            # a status change always rewrites the resolution stamp; None clears it
            params.append(resolved_at)
            assignments.append(f"resolved_at = ${len(params)}")
            params.append(resolved_by)
            assignments.append(f"resolved_by = ${len(params)}")
        if notes_set:
            params.append(admin_notes)
            assignments.append(f"admin_notes = ${len(params)}")
        pool = await get_pool()
        async with pool.acquire() as conn:
            if not assignments:
                row = await conn.fetchrow(f"SELECT {_COLUMNS} FROM reports WHERE id = $1", report_id)
            else:
                row = await conn.fetchrow(
                    f"UPDATE reports SET {', '.join(assignments)} WHERE id = $1 RETURNING {_COLUMNS}",
                    *params,
                )
        return Report.from_record(row) if row else None
