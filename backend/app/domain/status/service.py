"""Status updates: one active post per user, expiring after a fixed TTL."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from app.domain.identity.models import User
from app.domain.identity.repo import UserRepository
from app.obs import metrics as obs_metrics
from app.settings import settings

from .exceptions import StatusError
from .models import StatusUpdate
from .repo import StatusRepository

logger = logging.getLogger(__name__)


def _now() -> datetime:
	return datetime.now(timezone.utc)


class StatusService:
	def __init__(
		self,
		repository: Optional[StatusRepository] = None,
		users: Optional[UserRepository] = None,
	) -> None:
		self._repo = repository or StatusRepository()
		self._users = users or UserRepository()

	async def post(self, user_id: int, content: str, *, now: Optional[datetime] = None) -> StatusUpdate:
		if not isinstance(content, str) or not content.strip():
			raise StatusError("status_required")
		if len(content) > settings.status_max_length:
			raise StatusError("status_too_long")
		created_at = now or _now()
		expires_at = created_at + timedelta(hours=settings.status_ttl_hours)
		status = await self._repo.replace(user_id, content.strip(), created_at, expires_at)
		obs_metrics.inc_status_posted()
		return status

	async def list_active(self, *, now: Optional[datetime] = None) -> List[Tuple[StatusUpdate, Optional[User]]]:
		"""Purge expired posts, then return the live ones newest first with their authors."""
		moment = now or _now()
		purged = await self._repo.purge_expired(moment)
		if purged:
			obs_metrics.inc_status_purged(purged)
			logger.info("status_purged", extra={"count": purged})
		statuses = await self._repo.list_active(moment)
		authors = await self._users.get_many(s.user_id for s in statuses)
		return [(status, authors.get(status.user_id)) for status in statuses]

	async def mine(self, user_id: int, *, now: Optional[datetime] = None) -> Optional[StatusUpdate]:
		return await self._repo.get_active_for_user(user_id, now or _now())

	async def clear(self, user_id: int) -> None:
		await self._repo.delete_for_user(user_id)


_SERVICE = StatusService()


def get_service() -> StatusService:
	return _SERVICE
