"""Password reset flows."""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.domain.identity import mailer, policy
from app.domain.identity.exceptions import InvalidResetToken
from app.domain.identity.repo import UserRepository
from app.infra.password import hash_password
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32
RESET_REQUEST_MESSAGE = "If an account exists with that email, a password reset link has been sent."


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _expiry() -> datetime:
	return _now() + timedelta(minutes=settings.password_reset_ttl_minutes)


def hash_token(token: str) -> str:
	return hashlib.sha256(token.encode("utf-8")).hexdigest()


class PasswordRecovery:
	"""Issues and consumes single-use reset tokens. Only token hashes are stored."""

	def __init__(self, repository: Optional[UserRepository] = None) -> None:
		self._repo = repository or UserRepository()

	async def accept_request(self, email: str) -> str:
		"""Normalise and rate-limit a reset request. Does not look the address up."""
		normalised = policy.normalise_email(email)
		await policy.enforce_pwreset_request_rate(normalised)
		obs_metrics.inc_pwreset_request()
		return normalised

	async def issue_token(self, email: str) -> Optional[str]:
		"""Issue a reset token and mail it when the address belongs to an account.

		Returns the raw token or None. The API schedules this after the response
		has been sent.
		"""
		user = await self._repo.get_by_email(email)
		if user is None:
			logger.info("pwreset_request_unknown", extra={"email_hash": mailer.mask_email(email)})
			return None
		token = secrets.token_hex(RESET_TOKEN_BYTES)
		await self._repo.create_reset_token(user.id, hash_token(token), _expiry())
		link = f"{settings.public_base_url}/reset-password?token={token}"
		await mailer.send_quietly(mailer.send_password_reset(user.email, link))
		logger.info("pwreset_request", extra={"user_id": user.id})
		return token

	async def request_reset(self, email: str) -> Optional[str]:
		return await self.issue_token(await self.accept_request(email))

	async def confirm_reset(self, token: str, new_password: str) -> None:
		user_id = await self._repo.consume_reset_token(hash_token(token), hash_password(new_password), now=_now())
		if user_id is None:
			obs_metrics.inc_pwreset_consume("invalid")
			raise InvalidResetToken()
		obs_metrics.inc_pwreset_consume("ok")
		logger.info("pwreset_success", extra={"user_id": user_id})


_RECOVERY = PasswordRecovery()


async def accept_password_reset(email: str) -> str:
	return await _RECOVERY.accept_request(email)


async def issue_password_reset(email: str) -> None:
	await _RECOVERY.issue_token(email)


async def confirm_password_reset(token: str, new_password: str) -> None:
	await _RECOVERY.confirm_reset(token, new_password)
