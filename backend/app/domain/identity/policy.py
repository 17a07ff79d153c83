"""Policy guards and validation helpers for identity flows."""

from __future__ import annotations

import re

from app.infra import rate_limit
from app.obs import metrics as obs_metrics

USERNAME_REGEX = re.compile(r"^[a-z0-9_]+$")
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 30
PASSWORD_MIN_LEN = 6
CONNECTION_GOAL_MIN_LEN = 10
MIN_AGE = 18

LOGIN_PER_MINUTE = 12
PWRESET_PER_HOUR = 5


class IdentityPolicyError(ValueError):
	"""Raised when a policy constraint is violated."""

	def __init__(self, reason: str):
		super().__init__(reason)
		self.reason = reason


def normalise_username(value: str) -> str:
	return value.strip().lower()


def normalise_email(value: str) -> str:
	return value.strip().lower()


def guard_username(value: str) -> str:
	"""Normalise a username and enforce the character and length rules."""
	username = normalise_username(value)
	if len(username) < USERNAME_MIN_LEN:
		raise IdentityPolicyError("username_too_short")
	if len(username) > USERNAME_MAX_LEN:
		raise IdentityPolicyError("username_too_long")
	if not USERNAME_REGEX.match(username):
		raise IdentityPolicyError("username_invalid_chars")
	return username


async def enforce_login_rate(username: str) -> None:
	if not await rate_limit.allow("login", username, limit=LOGIN_PER_MINUTE, window_seconds=60):
		obs_metrics.inc_rate_limited("login")
		raise IdentityPolicyError("rate_limited")


async def enforce_pwreset_request_rate(email: str) -> None:
	if not await rate_limit.allow("pwreset", email, limit=PWRESET_PER_HOUR, window_seconds=3600):
		obs_metrics.inc_rate_limited("pwreset")
		raise IdentityPolicyError("rate_limited")
