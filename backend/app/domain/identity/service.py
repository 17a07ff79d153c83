"""Service layer for registration, login, and profile management."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from app.domain.identity import policy, schemas
from app.domain.identity.exceptions import (
	EmailTaken,
	IdentityError,
	InvalidCredentials,
	UsernameTaken,
	UserNotFound,
)
from app.domain.identity.models import User
from app.domain.identity.repo import UserRepository
from app.infra.auth import issue_access_token
from app.infra.password import check_needs_rehash, hash_password, verify_password
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

SEARCH_MIN_LEN = 2


class IdentityService:
	"""Account lifecycle on top of a user repository."""

	def __init__(self, repository: Optional[UserRepository] = None) -> None:
		self._repo = repository or UserRepository()

	@property
	def repository(self) -> UserRepository:
		return self._repo

	async def register(self, payload: schemas.RegisterRequest) -> tuple[User, str]:
		if await self._repo.get_by_username(payload.username):
			obs_metrics.inc_identity_reject("username_taken")
			raise UsernameTaken()
		if await self._repo.get_by_email(payload.email):
			obs_metrics.inc_identity_reject("email_taken")
			raise EmailTaken()
		values = payload.model_dump(exclude={"password"})
		values["password_hash"] = hash_password(payload.password)
		values["is_18_plus"] = payload.age >= policy.MIN_AGE
		user = await self._repo.create(values)
		obs_metrics.inc_identity_register()
		logger.info("user_registered", extra={"user_id": user.id})
		return user, issue_access_token(user.id, username=user.username)

	async def login(self, payload: schemas.LoginRequest) -> tuple[User, str]:
		username = policy.normalise_username(payload.username)
		await policy.enforce_login_rate(username)
		user = await self._repo.get_by_username(username)
		# Same reason for unknown user and wrong password
		if user is None or not verify_password(user.password_hash, payload.password):
			obs_metrics.inc_identity_login("failed")
			raise InvalidCredentials()
		if check_needs_rehash(user.password_hash):
			await self._repo.update(user.id, {"password_hash": hash_password(payload.password)})
		obs_metrics.inc_identity_login("ok")
		return user, issue_access_token(user.id, username=user.username)

	async def get_user(self, user_id: int) -> User:
		user = await self._repo.get(user_id)
		if user is None:
			raise UserNotFound()
		return user

	async def get_many(self, user_ids: Iterable[int]) -> dict[int, User]:
		return await self._repo.get_many(user_ids)

	async def update_profile(self, user_id: int, payload: schemas.ProfileUpdateRequest) -> User:
		current = await self.get_user(user_id)
		updates = payload.model_dump(exclude_unset=True)
		if "username" in updates:
			if updates["username"] is None:
				updates.pop("username")
			else:
				username = policy.guard_username(updates["username"])
				if username != current.username:
					existing = await self._repo.get_by_username(username)
					if existing is not None and existing.id != user_id:
						raise UsernameTaken()
				updates["username"] = username
		for flag in ("email_on_message", "first_message_filter_enabled"):
			if flag in updates and updates[flag] is None:
				updates.pop(flag)
		updated = await self._repo.update(user_id, updates)
		if updated is None:
			raise UserNotFound()
		obs_metrics.inc_profile_update()
		return updated

	async def delete_account(self, user_id: int) -> None:
		if not await self._repo.delete(user_id):
			raise UserNotFound()
		logger.info("account_deleted", extra={"user_id": user_id})

	async def list_users(self, *, role: Optional[str] = None, location: Optional[str] = None) -> List[User]:
		return await self._repo.list_visible(role=role, location=location)

	async def search_users(self, viewer_id: int, query: str) -> List[User]:
		term = (query or "").strip()
		if len(term) < SEARCH_MIN_LEN:
			raise IdentityError("query_too_short")
		viewer = await self.get_user(viewer_id)
		return await self._repo.search(term, include_shadow_banned=viewer.is_admin)


_SERVICE = IdentityService()


def get_service() -> IdentityService:
	return _SERVICE


async def register(payload: schemas.RegisterRequest) -> tuple[User, str]:
	return await _SERVICE.register(payload)


async def login(payload: schemas.LoginRequest) -> tuple[User, str]:
	return await _SERVICE.login(payload)


async def get_user(user_id: int) -> User:
	return await _SERVICE.get_user(user_id)


async def update_profile(user_id: int, payload: schemas.ProfileUpdateRequest) -> User:
	return await _SERVICE.update_profile(user_id, payload)


async def delete_account(user_id: int) -> None:
	await _SERVICE.delete_account(user_id)


async def list_users(*, role: Optional[str] = None, location: Optional[str] = None) -> List[User]:
	return await _SERVICE.list_users(role=role, location=location)


async def search_users(viewer_id: int, query: str) -> List[User]:
	return await _SERVICE.search_users(viewer_id, query)
