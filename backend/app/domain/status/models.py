"""Domain models for short-lived status updates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping


@dataclass(slots=True)
class StatusUpdate:
	id: int
	user_id: int
	content: str
	created_at: datetime
	expires_at: datetime

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "StatusUpdate":
		return cls(
			id=int(record["id"]),
			user_id=int(record["user_id"]),
			content=record["content"],
			created_at=record["created_at"],
			expires_at=record["expires_at"],
		)

	def is_active(self, now: datetime) -> bool:
		return self.expires_at > now
