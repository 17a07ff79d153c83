"""Message storage: asyncpg when a pool is available, in-memory otherwise."""

from __future__ import annotations

import asyncio
import itertools
from datetime import datetime
from typing import List, Optional

from app.infra.postgres import get_pool

from .conversations import newest_first_key, sort_newest_first
from .models import Message

_COLUMNS = "id, sender_id, receiver_id, content, is_read, created_at"


class _InMemoryStore:
	"""Fallback store used in tests when Postgres is unavailable."""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self._messages: List[Message] = []
		self._ids = itertools.count(1)

	async def create_message(self, sender_id: int, receiver_id: int, content: str, created_at: datetime) -> Message:
		async with self._lock:
			message = Message(
				id=next(self._ids),
				sender_id=sender_id,
				receiver_id=receiver_id,
				content=content,
				created_at=created_at,
				is_read=False,
			)
			self._messages.append(message)
			return message

	async def get_message(self, message_id: int) -> Optional[Message]:
		async with self._lock:
			for message in self._messages:
				if message.id == message_id:
					return message
			return None

	async def list_for_user(self, user_id: int) -> List[Message]:
		async with self._lock:
			return sort_newest_first(m for m in self._messages if m.involves(user_id))

	async def thread(self, user_id: int, partner_id: int) -> List[Message]:
		async with self._lock:
			pair = {user_id, partner_id}
			# a self-thread is never created, so set equality is enough
			matching = [m for m in self._messages if {m.sender_id, m.receiver_id} == pair]
			return sorted(matching, key=newest_first_key)

	async def mark_read(self, receiver_id: int, sender_id: int) -> int:
		async with self._lock:
			updated = 0
			for message in self._messages:
				if message.sender_id == sender_id and message.receiver_id == receiver_id and not message.is_read:
					message.is_read = True
					updated += 1
			return updated

	async def unread_count(self, user_id: int) -> int:
		async with self._lock:
			return sum(1 for m in self._messages if m.receiver_id == user_id and not m.is_read)

	async def reset(self) -> None:
		async with self._lock:
			self._messages.clear()
			self._ids = itertools.count(1)


_MEMORY_STORE = _InMemoryStore()


async def reset_memory_store() -> None:
	await _MEMORY_STORE.reset()


class ChatRepository:
	"""Repository backed by asyncpg with an in-memory fallback."""

	def __init__(self) -> None:
		self._pool_checked = False
		self._pool = None

	async def _pool_or_none(self):
		if self._pool_checked:
			return self._pool
		self._pool_checked = True
		try:
			pool = await get_pool()
		except AssertionError:
			pool = None
		self._pool = pool
		return pool

	async def create_message(self, sender_id: int, receiver_id: int, content: str, created_at: datetime) -> Message:
		pool = await self._pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.create_message(sender_id, receiver_id, content, created_at)
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				INSERT INTO messages (sender_id, receiver_id, content, is_read, created_at)
				VALUES ($1, $2, $3, FALSE, $4)
				RETURNING {_COLUMNS}
				""",
				sender_id,
				receiver_id,
				content,
				created_at,
			)
		return Message.from_record(row)

	async def get_message(self, message_id: int) -> Optional[Message]:
		pool = await self._pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.get_message(message_id)
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"SELECT {_COLUMNS} FROM messages WHERE id = $1", message_id)
		return Message.from_record(row) if row else None

	async def list_for_user(self, user_id: int) -> List[Message]:
		"""Every message the user sent or received, newest first."""
		pool = await self._pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.list_for_user(user_id)
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_COLUMNS}
				FROM messages
				WHERE sender_id = $1 OR receiver_id = $1
				ORDER BY created_at DESC, id DESC
				""",
				user_id,
			)
		return [Message.from_record(row) for row in rows]

	async def thread(self, user_id: int, partner_id: int) -> List[Message]:
		"""Messages between two users, oldest first."""
		pool = await self._pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.thread(user_id, partner_id)
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_COLUMNS}
				FROM messages
				WHERE (sender_id = $1 AND receiver_id = $2)
				   OR (sender_id = $2 AND receiver_id = $1)
				ORDER BY created_at ASC, id ASC
				""",
				user_id,
				partner_id,
			)
		return [Message.from_record(row) for row in rows]

	async def mark_read(self, receiver_id: int, sender_id: int) -> int:
		"""Flag messages from sender to receiver as read. The reverse direction is untouched."""
		pool = await self._pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.mark_read(receiver_id, sender_id)
		async with pool.acquire() as conn:
			result = await conn.execute(
				"""
				UPDATE messages
				SET is_read = TRUE
				WHERE sender_id = $1 AND receiver_id = $2 AND is_read = FALSE
				""",
				sender_id,
				receiver_id,
			)
		# asyncpg returns the command tag, e.g. "UPDATE 3"
		return int(result.split()[-1]) if result else 0

	async def unread_count(self, user_id: int) -> int:
		pool = await self._pool_or_none()
		if pool is None:
			return await _MEMORY_STORE.unread_count(user_id)
		async with pool.acquire() as conn:
			count = await conn.fetchval(
				"SELECT COUNT(*) FROM messages WHERE receiver_id = $1 AND is_read = FALSE",
				user_id,
			)
		return int(count or 0)
