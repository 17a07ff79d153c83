"""Status update errors."""

from __future__ import annotations


class StatusError(Exception):
	reason: str = "invalid_status"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason
