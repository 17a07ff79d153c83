"""Domain models for direct messages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping


@dataclass(slots=True)
class Message:
	"""A stored direct message. Only is_read changes after creation."""

	id: int
	sender_id: int
	receiver_id: int
	content: str
	created_at: datetime
	is_read: bool = False

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "Message":
		return cls(
			id=int(record["id"]),
			sender_id=int(record["sender_id"]),
			receiver_id=int(record["receiver_id"]),
			content=record["content"],
			created_at=record["created_at"],
			is_read=bool(record["is_read"]),
		)

	def partner_of(self, user_id: int) -> int:
		return self.receiver_id if self.sender_id == user_id else self.sender_id

	def involves(self, user_id: int) -> bool:
		return user_id in (self.sender_id, self.receiver_id)


@dataclass(slots=True)
class Conversation:
	"""Derived per-partner summary; never persisted."""

	partner_id: int
	last_message: Message
