"""Chat errors surfaced to the API layer."""

from __future__ import annotations


class ChatError(Exception):
	reason: str = "chat_error"
	status_code: int = 400

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class CannotMessageSelf(ChatError):
	reason = "cannot_message_self"


class InvalidMessage(ChatError):
	reason = "invalid_message"


class RecipientNotFound(ChatError):
	reason = "recipient_not_found"
	status_code = 404
