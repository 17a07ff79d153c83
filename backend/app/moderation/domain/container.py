"""Lightweight service container shared by moderation modules."""

from __future__ import annotations

from typing import Optional

from app.domain.chat.repo import ChatRepository
from app.domain.identity.repo import UserRepository
from app.moderation.domain.admin_service import AdminReportRepository, AdminService
from app.moderation.domain.reports_service import ReportRepository, ReportService
from app.moderation.infra.reports_repo import PostgresReportRepository

_users: UserRepository = UserRepository()
_reports: PostgresReportRepository = PostgresReportRepository()
_messages: ChatRepository = ChatRepository()
_report_service = ReportService(reports=_reports, users=_users, messages=_messages)
_admin_service = AdminService(users=_users, reports=_reports)


def configure(
    *,
    users: Optional[UserRepository] = None,
    reports: Optional[ReportRepository | AdminReportRepository] = None,
    messages: Optional[ChatRepository] = None,
) -> None:
    """Swap repositories (tests, tooling) and rebuild the services on top of them."""
    global _users, _reports, _messages, _report_service, _admin_service
    if users is not None:
        _users = users
    if reports is not None:
        _reports = reports
    if messages is not None:
        _messages = messages
    _report_service = ReportService(reports=_reports, users=_users, messages=_messages)
    _admin_service = AdminService(users=_users, reports=_reports)


def reset() -> None:
    configure(users=UserRepository(), reports=PostgresReportRepository(), messages=ChatRepository())


def get_report_service() -> ReportService:
    return _report_service


def get_admin_service() -> AdminService:
    return _admin_service
