"""Postgres access for profile pictures."""

from __future__ import annotations

from typing import List

from app.infra.postgres import get_pool

from .models import ProfilePicture

_COLUMNS = "id, user_id, object_path, display_order, created_at"


class PictureRepository:
	async def list_for_user(self, user_id: int) -> List[ProfilePicture]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"SELECT {_COLUMNS} FROM profile_pictures WHERE user_id = $1 ORDER BY display_order ASC, id ASC",
				user_id,
			)
		return [ProfilePicture.from_record(row) for row in rows]

	async def count_for_user(self, user_id: int) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			count = await conn.fetchval("SELECT COUNT(*) FROM profile_pictures WHERE user_id = $1", user_id)
		return int(count or 0)

	async def add(self, user_id: int, object_path: str, display_order: int) -> ProfilePicture:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				INSERT INTO profile_pictures (user_id, object_path, display_order)
				VALUES ($1, $2, $3)
				RETURNING {_COLUMNS}
				""",
				user_id,
				object_path,
				display_order,
			)
		return ProfilePicture.from_record(row)

	async def delete_owned(self, picture_id: int, user_id: int) -> bool:
		pool = await get_pool()
		async with pool.acquire() as conn:
			deleted = await conn.fetchval(
				"DELETE FROM profile_pictures WHERE id = $1 AND user_id = $2 RETURNING id",
				picture_id,
				user_id,
			)
		return deleted is not None
