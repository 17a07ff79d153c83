"""Postgres access for status updates."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from app.infra.postgres import get_pool

from .models import StatusUpdate

_COLUMNS = "id, user_id, content, created_at, expires_at"


class StatusRepository:
	async def replace(self, user_id: int, content: str, created_at: datetime, expires_at: datetime) -> StatusUpdate:
		"""Drop the user's current status and store the new one atomically."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				await conn.execute("DELETE FROM status_updates WHERE user_id = $1", user_id)
				row = await conn.fetchrow(
					f"""
					INSERT INTO status_updates (user_id, content, created_at, expires_at)
					VALUES ($1, $2, $3, $4)
					RETURNING {_COLUMNS}
					""",
					user_id,
					content,
					created_at,
					expires_at,
				)
		return StatusUpdate.from_record(row)

	async def purge_expired(self, now: datetime) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			result = await conn.execute("DELETE FROM status_updates WHERE expires_at <= $1", now)
		return int(result.split()[-1]) if result else 0

	async def list_active(self, now: datetime) -> List[StatusUpdate]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"SELECT {_COLUMNS} FROM status_updates WHERE expires_at > $1 ORDER BY created_at DESC, id DESC",
				now,
			)
		return [StatusUpdate.from_record(row) for row in rows]

	async def get_active_for_user(self, user_id: int, now: datetime) -> Optional[StatusUpdate]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				SELECT {_COLUMNS} FROM status_updates
				WHERE user_id = $1 AND expires_at > $2
				ORDER BY created_at DESC
				LIMIT 1
				""",
				user_id,
				now,
			)
		return StatusUpdate.from_record(row) if row else None

	async def delete_for_user(self, user_id: int) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			result = await conn.execute("DELETE FROM status_updates WHERE user_id = $1", user_id)
		return int(result.split()[-1]) if result else 0
