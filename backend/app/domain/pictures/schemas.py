"""Pydantic schemas for profile pictures."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .models import ProfilePicture


class PictureCreateRequest(BaseModel):
	object_path: str = Field(..., min_length=1, max_length=512)


class PictureOut(BaseModel):
	id: int
	user_id: int
	object_path: str
	display_order: int
	created_at: Optional[datetime] = None

	@classmethod
	def from_model(cls, picture: ProfilePicture) -> "PictureOut":
		return cls(
			id=picture.id,
			user_id=picture.user_id,
			object_path=picture.object_path,
			display_order=picture.display_order,
			created_at=picture.created_at,
		)
