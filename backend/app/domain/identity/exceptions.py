"""Domain-level exceptions for accounts and profiles."""

from __future__ import annotations


class IdentityError(Exception):
	"""Base class for identity feature errors."""

	reason: str = "unknown"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class UserNotFound(IdentityError):
	reason = "user_not_found"


class UsernameTaken(IdentityError):
	reason = "username_taken"


class EmailTaken(IdentityError):
	reason = "email_taken"


class InvalidCredentials(IdentityError):
	reason = "invalid_credentials"


class InvalidResetToken(IdentityError):
	reason = "invalid_or_expired_token"
