"""Postgres access for users and password reset tokens."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from app.domain.identity.models import MATCH_QUESTION_FIELDS, PasswordResetToken, User
from app.infra.postgres import get_pool

USER_COLUMNS: tuple[str, ...] = (
	"id",
	"username",
	"email",
	"password_hash",
	"role",
	"location",
	"subregion",
	"region",
	"bio",
	"profile_picture",
	"banner_picture",
	"connection_goal",
	"age",
	"is_18_plus",
	"has_agreed_to_rules",
	"is_shadow_banned",
	"first_message_filter_enabled",
	"is_verified",
	"is_admin",
	"email_on_message",
	"created_at",
) + MATCH_QUESTION_FIELDS

# Columns a caller may write through create()/update(); anything else is dropped.
WRITABLE_COLUMNS = frozenset(USER_COLUMNS) - {"id", "created_at"}

_SELECT = f"SELECT {', '.join(USER_COLUMNS)} FROM users"
_RETURNING = f"RETURNING {', '.join(USER_COLUMNS)}"


def _writable(values: Mapping[str, Any]) -> dict[str, Any]:
	return {key: value for key, value in values.items() if key in WRITABLE_COLUMNS}


def _rows_to_users(rows: Iterable[Mapping[str, Any]]) -> List[User]:
	return [User.from_record(row) for row in rows]


def like_pattern(query: str) -> str:
	"""Substring ILIKE pattern with the query's wildcards matched literally (ESCAPE '\\')."""
	escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
	return f"%{escaped}%"


class UserRepository:
	"""asyncpg-backed user storage."""

	async def get(self, user_id: int) -> Optional[User]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"{_SELECT} WHERE id = $1", user_id)
		return User.from_record(row) if row else None

	async def get_many(self, user_ids: Iterable[int]) -> dict[int, User]:
		ids = sorted({int(uid) for uid in user_ids})
		if not ids:
			return {}
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"{_SELECT} WHERE id = ANY($1::int[])", ids)
		return {user.id: user for user in _rows_to_users(rows)}

	async def get_by_username(self, username: str) -> Optional[User]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"{_SELECT} WHERE username = $1", username)
		return User.from_record(row) if row else None

	async def get_by_email(self, email: str) -> Optional[User]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"{_SELECT} WHERE lower(email) = lower($1)", email)
		return User.from_record(row) if row else None

	async def create(self, values: Mapping[str, Any]) -> User:
		data = _writable(values)
		columns = list(data.keys())
		placeholders = ", ".join(f"${idx}" for idx in range(1, len(columns) + 1))
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"INSERT INTO users ({', '.join(columns)}) VALUES ({placeholders}) {_RETURNING}",
				*data.values(),
			)
		return User.from_record(row)

	async def update(self, user_id: int, updates: Mapping[str, Any]) -> Optional[User]:
		data = _writable(updates)
		if not data:
			return await self.get(user_id)
		assignments = ", ".join(f"{column} = ${idx}" for idx, column in enumerate(data.keys(), start=2))
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"UPDATE users SET {assignments} WHERE id = $1 {_RETURNING}",
				user_id,
				*data.values(),
			)
		return User.from_record(row) if row else None

	async def list_visible(self, *, role: Optional[str] = None, location: Optional[str] = None) -> List[User]:
		"""Default listing: shadow-banned users never appear."""
		conditions = ["is_shadow_banned = FALSE"]
		params: List[object] = []
		if role:
			params.append(role)
			conditions.append(f"role = ${len(params)}")
		if location:
			params.append(location)
			conditions.append(f"location = ${len(params)}")
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"{_SELECT} WHERE {' AND '.join(conditions)} ORDER BY created_at DESC, id DESC",
				*params,
			)
		return _rows_to_users(rows)

	async def search(self, query: str, *, include_shadow_banned: bool = False) -> List[User]:
		pattern = like_pattern(query)
		sql = (
			f"{_SELECT} WHERE (username ILIKE $1 ESCAPE '\\'"
			" OR bio ILIKE $1 ESCAPE '\\' OR location ILIKE $1 ESCAPE '\\')"
		)
		if not include_shadow_banned:
			sql += " AND is_shadow_banned = FALSE"
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"{sql} ORDER BY username", pattern)
		return _rows_to_users(rows)

	async def list_all(self) -> List[User]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"{_SELECT} ORDER BY created_at DESC, id DESC")
		return _rows_to_users(rows)

	async def list_admins(self) -> List[User]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"{_SELECT} WHERE is_admin = TRUE")
		return _rows_to_users(rows)

	async def delete(self, user_id: int) -> bool:
		"""Delete a user together with everything that references them."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				await conn.execute("DELETE FROM profile_pictures WHERE user_id = $1", user_id)
				await conn.execute("DELETE FROM status_updates WHERE user_id = $1", user_id)
				await conn.execute(
					"UPDATE reports SET reported_message_id = NULL WHERE reported_message_id IN "
					"(SELECT id FROM messages WHERE sender_id = $1 OR receiver_id = $1)",
					user_id,
				)
				await conn.execute("DELETE FROM messages WHERE sender_id = $1 OR receiver_id = $1", user_id)
				await conn.execute("DELETE FROM password_reset_tokens WHERE user_id = $1", user_id)
				await conn.execute("UPDATE reports SET reporter_id = NULL WHERE reporter_id = $1", user_id)
				await conn.execute("UPDATE reports SET reported_user_id = NULL WHERE reported_user_id = $1", user_id)
				await conn.execute("UPDATE reports SET resolved_by = NULL WHERE resolved_by = $1", user_id)
				deleted = await conn.fetchval("DELETE FROM users WHERE id = $1 RETURNING id", user_id)
		return deleted is not None

	# Password reset tokens

	async def create_reset_token(self, user_id: int, hashed_token: str, expires_at: datetime) -> PasswordResetToken:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				"""
				INSERT INTO password_reset_tokens (user_id, hashed_token, expires_at)
				VALUES ($1, $2, $3)
				RETURNING id, user_id, hashed_token, expires_at, used_at, created_at
				""",
				user_id,
				hashed_token,
				expires_at,
			)
		return PasswordResetToken.from_record(row)

	async def consume_reset_token(
		self,
		hashed_token: str,
		password_hash: str,
		*,
		now: Optional[datetime] = None,
	) -> Optional[int]:
		"""Claim an unused, unexpired token and set the new password in one transaction.

		Returns the owner's id, or None when no usable token matched. Only one
		concurrent caller can claim a given token.
		"""
		now = now or datetime.now(timezone.utc)
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				user_id = await conn.fetchval(
					"""
					UPDATE password_reset_tokens
					SET used_at = $2
					WHERE hashed_token = $1 AND used_at IS NULL AND expires_at > $2
					RETURNING user_id
					""",
					hashed_token,
					now,
				)
				if user_id is None:
					return None
				await conn.execute("UPDATE users SET password_hash = $2 WHERE id = $1", user_id, password_hash)
		return int(user_id)
