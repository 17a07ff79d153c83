"""Profile picture errors."""

from __future__ import annotations


class PictureError(Exception):
	reason: str = "picture_error"
	status_code: int = 400

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class PictureLimitReached(PictureError):
	reason = "picture_limit_reached"


class PictureNotFound(PictureError):
	reason = "picture_not_found"
	status_code = 404
