"""Member-facing report submission."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from app.domain.chat.repo import ChatRepository
from app.domain.identity import mailer
from app.domain.identity.repo import UserRepository
from app.infra import rate_limit
from app.moderation.domain.exceptions import InvalidReport, ReportLimitExceeded
from app.moderation.domain.models import REPORT_REASONS, Report
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

REPORTS_PER_HOUR = 20


class ReportRepository(Protocol):
    async def create(
        self,
        *,
        reporter_id: int,
        reported_user_id: Optional[int],
        reported_message_id: Optional[int],
        reason: str,
        details: Optional[str],
    ) -> Report: ...


class ReportService:
    def __init__(
        self,
        *,
        reports: ReportRepository,
        users: UserRepository,
        messages: ChatRepository,
    ) -> None:
        self._reports = reports
        self._users = users
        self._messages = messages

    async def submit(
        self,
        *,
        reporter_id: int,
        reason: str,
        reported_user_id: Optional[int] = None,
        reported_message_id: Optional[int] = None,
        details: Optional[str] = None,
    ) -> Report:
        if reason not in REPORT_REASONS:
            raise InvalidReport("invalid_reason")
        if reported_user_id is None and reported_message_id is None:
            raise InvalidReport("report_target_required")
        if reported_user_id is not None and await self._users.get(reported_user_id) is None:
            raise InvalidReport("reported_user_not_found")
        if reported_message_id is not None:
            message = await self._messages.get_message(reported_message_id)
            # Members may only report messages they took part in
            if message is None or not message.involves(reporter_id):
                raise InvalidReport("reported_message_not_found")
        if not await rate_limit.allow("report", reporter_id, limit=REPORTS_PER_HOUR, window_seconds=3600):
            obs_metrics.inc_rate_limited("report")
            raise ReportLimitExceeded()
        report = await self._reports.create(
            reporter_id=reporter_id,
            reported_user_id=reported_user_id,
            reported_message_id=reported_message_id,
            reason=reason,
            details=(details or "").strip() or None,
        )
        obs_metrics.inc_report(reason)
        logger.info("report_filed", extra={"report_id": report.id, "reason": reason})
        return report

    async def notify_admins(self, report: Report) -> None:
        """Email every admin about a new report. Delivery errors are logged only."""
        admins = await self._users.list_admins()
        if not admins:
            return
        reporter = await self._users.get(report.reporter_id) if report.reporter_id else None
        reported = await self._users.get(report.reported_user_id) if report.reported_user_id else None
        for admin in admins:
            await mailer.send_quietly(
                mailer.send_report_notification(
                    admin.email,
                    reporter_name=reporter.username if reporter else "Unknown",
                    reason=report.reason,
                    reported_name=reported.username if reported else None,
                    details=report.details,
                )
            )
