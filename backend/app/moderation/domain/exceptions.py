"""Moderation errors mapped to HTTP responses by the routers."""

from __future__ import annotations


class ModerationError(Exception):
    reason: str = "moderation_error"
    status_code: int = 400

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class AdminRequired(ModerationError):
    reason = "admin_required"
    status_code = 403


class CannotTargetSelf(ModerationError):
    reason = "cannot_target_self"


class InvalidReport(ModerationError):
    reason = "invalid_report"


class ReportNotFound(ModerationError):
    reason = "report_not_found"
    status_code = 404


class TargetNotFound(ModerationError):
    reason = "user_not_found"
    status_code = 404


class ReportLimitExceeded(ModerationError):
    reason = "report_limit_exceeded"
    status_code = 429
