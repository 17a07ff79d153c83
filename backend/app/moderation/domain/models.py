"""Moderation records: user-filed reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

REPORT_REASONS: tuple[str, ...] = (
    "Harassment",
    "Inappropriate Content",
    "Fake Profile",
    "Spam",
    "Underage User",
    "Threatening Behavior",
    "Other",
)

REPORT_STATUSES: tuple[str, ...] = ("pending", "reviewed", "resolved", "dismissed")


@dataclass(slots=True)
class Report:
    id: int
    reporter_id: Optional[int]
    reported_user_id: Optional[int]
    reported_message_id: Optional[int]
    reason: str
    details: Optional[str] = None
    status: str = "pending"
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Report":
        def _opt_int(key: str) -> Optional[int]:
            value = record.get(key)
            return int(value) if value is not None else None

        return cls(
            id=int(record["id"]),
            reporter_id=_opt_int("reporter_id"),
            reported_user_id=_opt_int("reported_user_id"),
            reported_message_id=_opt_int("reported_message_id"),
            reason=record["reason"],
            details=record.get("details"),
            status=record.get("status") or "pending",
            admin_notes=record.get("admin_notes"),
            created_at=record.get("created_at"),
            resolved_at=record.get("resolved_at"),
            resolved_by=_opt_int("resolved_by"),
        )


@dataclass(slots=True)
class ReminderSummary:
    sent: int = 0
    failed: int = 0
    total: int = 0
