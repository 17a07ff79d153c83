"""Profile picture gallery management."""

from __future__ import annotations

from typing import List, Optional

from app.settings import settings

from .exceptions import PictureLimitReached, PictureNotFound
from .models import ProfilePicture
from .repo import PictureRepository


class PictureService:
	def __init__(self, repository: Optional[PictureRepository] = None) -> None:
		self._repo = repository or PictureRepository()

	async def list_for_user(self, user_id: int) -> List[ProfilePicture]:
		return await self._repo.list_for_user(user_id)

	async def add(self, user_id: int, object_path: str) -> ProfilePicture:
		count = await self._repo.count_for_user(user_id)
		if count >= settings.max_profile_pictures:
			raise PictureLimitReached()
		# New pictures go to the end of the gallery
		return await self._repo.add(user_id, object_path, count)

	async def remove(self, user_id: int, picture_id: int) -> None:
		if not await self._repo.delete_owned(picture_id, user_id):
			raise PictureNotFound()


_SERVICE = PictureService()


def get_service() -> PictureService:
	return _SERVICE
