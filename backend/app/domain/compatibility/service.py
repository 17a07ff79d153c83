"""Compatibility lookups for the signed-in viewer."""

from __future__ import annotations

from typing import Optional

from app.domain.compatibility.engine import CompatibilityResult, compute_compatibility
from app.domain.identity.exceptions import UserNotFound
from app.domain.identity.repo import UserRepository
from app.obs import metrics as obs_metrics


class CompatibilityService:
	def __init__(self, repository: Optional[UserRepository] = None) -> None:
		self._users = repository or UserRepository()

	async def for_viewer(self, viewer_id: int, target_id: int) -> CompatibilityResult:
		"""Score target against the viewer's current answers.

		The viewer is loaded fresh on every call so answer edits show up
		immediately.
		"""
		viewer = await self._users.get(viewer_id)
		if viewer is None:
			raise UserNotFound()
		if viewer_id == target_id:
			target = viewer
		else:
			target = await self._users.get(target_id)
			if target is None:
				raise UserNotFound()
		result = compute_compatibility(viewer, target)
		obs_metrics.inc_compatibility(result.any_fields_answered)
		return result


_SERVICE = CompatibilityService()


async def get_compatibility(viewer_id: int, target_id: int) -> CompatibilityResult:
	return await _SERVICE.for_viewer(viewer_id, target_id)
