"""Admin operations over users and reports."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Tuple

from app.domain.identity import mailer
from app.domain.identity.models import User
from app.domain.identity.repo import UserRepository
from app.moderation.domain.exceptions import (
    AdminRequired,
    CannotTargetSelf,
    InvalidReport,
    ReportNotFound,
    TargetNotFound,
)
from app.moderation.domain.models import REPORT_STATUSES, ReminderSummary, Report
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

_UNSET = object()


class AdminReportRepository(Protocol):
    async def list(self, status: Optional[str] = None) -> List[Report]: ...

    async def pending_count(self) -> int: ...

    async def update(
        self,
        report_id: int,
        *,
        status: Optional[str] = None,
        admin_notes: Optional[str] = None,
        notes_set: bool = False,
        resolved_at: Optional[datetime] = None,
        resolved_by: Optional[int] = None,
    ) -> Optional[Report]: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AdminService:
    def __init__(self, *, users: UserRepository, reports: AdminReportRepository) -> None:
        self._users = users
        self._reports = reports

    async def require_admin(self, user_id: int) -> User:
        """Admin rights come from the stored record so revocation applies immediately."""
        user = await self._users.get(user_id)
        if user is None or not user.is_admin:
            raise AdminRequired()
        return user

    async def list_users(self) -> List[User]:
        return await self._users.list_all()

    async def set_shadow_ban(self, actor_id: int, target_id: int, banned: bool) -> User:
        if actor_id == target_id:
            raise CannotTargetSelf("cannot_shadow_ban_self")
        user = await self._users.update(target_id, {"is_shadow_banned": bool(banned)})
        if user is None:
            raise TargetNotFound()
        obs_metrics.inc_admin_action("shadow_ban" if banned else "shadow_unban")
        logger.info("admin_shadow_ban", extra={"target_id": target_id, "banned": bool(banned)})
        return user

    async def set_admin(self, actor_id: int, target_id: int, is_admin: bool) -> User:
        if actor_id == target_id:
            raise CannotTargetSelf("cannot_change_own_admin")
        user = await self._users.update(target_id, {"is_admin": bool(is_admin)})
        if user is None:
            raise TargetNotFound()
        obs_metrics.inc_admin_action("grant_admin" if is_admin else "revoke_admin")
        logger.info("admin_set_admin", extra={"target_id": target_id, "is_admin": bool(is_admin)})
        return user

    async def delete_user(self, actor_id: int, target_id: int) -> bool:
        """Delete a member. Returns True when the admin removed their own account."""
        if not await self._users.delete(target_id):
            raise TargetNotFound()
        obs_metrics.inc_admin_action("delete_user")
        logger.info("admin_delete_user", extra={"target_id": target_id})
        return actor_id == target_id

    async def send_profile_picture_reminders(self, *, cutoff: Optional[datetime] = None) -> ReminderSummary:
        limit = _as_utc(cutoff or settings.profile_pic_reminder_cutoff)
        candidates = [
            user
            for user in await self._users.list_all()
            if not user.profile_picture and user.created_at is not None and _as_utc(user.created_at) < limit
        ]
        summary = ReminderSummary(total=len(candidates))
        for user in candidates:
            try:
                await mailer.send_profile_picture_reminder(user.email, user.username)
            except mailer.EmailDeliveryError as exc:
                summary.failed += 1
                logger.warning("profile_pic_reminder_failed", extra={"target_id": user.id, "error": str(exc)})
            else:
                summary.sent += 1
        obs_metrics.inc_admin_action("profile_pic_reminders")
        return summary

    async def list_reports(self, status: Optional[str] = None) -> List[Tuple[Report, Optional[User], Optional[User]]]:
        reports = await self._reports.list(status)
        ids = {r.reporter_id for r in reports if r.reporter_id} | {r.reported_user_id for r in reports if r.reported_user_id}
        people = await self._users.get_many(ids)
        return [
            (report, people.get(report.reporter_id or 0), people.get(report.reported_user_id or 0))
            for report in reports
        ]

    async def pending_report_count(self) -> int:
        return await self._reports.pending_count()

    async def update_report(
        self,
        actor_id: int,
        report_id: int,
        *,
        status: Optional[str] = None,
        admin_notes: object = _UNSET,
    ) -> Report:
        if status is not None and status not in REPORT_STATUSES:
            raise InvalidReport("invalid_status")
        # moving back to pending clears resolved_at/resolved_by
        resolved_at = _now() if status and status != "pending" else None
        report = await self._reports.update(
            report_id,
            status=status or None,
            admin_notes=None if admin_notes is _UNSET else admin_notes,
            notes_set=admin_notes is not _UNSET,
            resolved_at=resolved_at,
            resolved_by=actor_id if resolved_at else None,
        )
        if report is None:
            raise ReportNotFound()
        obs_metrics.inc_admin_action("update_report")
        return report
