"""Pydantic schemas for status updates."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.domain.identity.models import User
from app.domain.identity.schemas import UserPublic

from .models import StatusUpdate


class StatusCreateRequest(BaseModel):
	content: str


class StatusOut(BaseModel):
	id: int
	user_id: int
	content: str
	created_at: datetime
	expires_at: datetime
	user: Optional[UserPublic] = None

	@classmethod
	def from_model(cls, status: StatusUpdate, *, author: Optional[User] = None) -> "StatusOut":
		return cls(
			id=status.id,
			user_id=status.user_id,
			content=status.content,
			created_at=status.created_at,
			expires_at=status.expires_at,
			user=UserPublic.from_model(author) if author else None,
		)
