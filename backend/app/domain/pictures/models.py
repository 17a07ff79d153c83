"""Gallery pictures attached to a profile."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass(slots=True)
class ProfilePicture:
	id: int
	user_id: int
	object_path: str
	display_order: int = 0
	created_at: Optional[datetime] = None

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "ProfilePicture":
		return cls(
			id=int(record["id"]),
			user_id=int(record["user_id"]),
			object_path=record["object_path"],
			display_order=int(record["display_order"]),
			created_at=record.get("created_at"),
		)
