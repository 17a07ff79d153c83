"""Member-facing report submission."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import BaseModel, Field

from app.infra.auth import AuthenticatedUser, get_current_user
from app.moderation.domain.container import get_report_service
from app.moderation.domain.exceptions import ModerationError
from app.moderation.domain.models import REPORT_REASONS, Report
from app.moderation.domain.reports_service import ReportService

router = APIRouter(prefix="/api", tags=["reports"])


class ReportIn(BaseModel):
    reported_user_id: Optional[int] = Field(default=None, gt=0)
    reported_message_id: Optional[int] = Field(default=None, gt=0)
    reason: str
    details: Optional[str] = Field(default=None, max_length=2000)


class ReportOut(BaseModel):
    id: int
    reporter_id: Optional[int]
    reported_user_id: Optional[int]
    reported_message_id: Optional[int]
    reason: str
    details: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None

    @classmethod
    def from_report(cls, report: Report) -> "ReportOut":
        return cls(
            id=report.id,
            reporter_id=report.reporter_id,
            reported_user_id=report.reported_user_id,
            reported_message_id=report.reported_message_id,
            reason=report.reason,
            details=report.details,
            status=report.status,
            admin_notes=report.admin_notes,
            created_at=report.created_at,
            resolved_at=report.resolved_at,
            resolved_by=report.resolved_by,
        )


def get_report_service_dep() -> ReportService:
    return get_report_service()


@router.get("/reports/reasons", response_model=List[str])
async def list_report_reasons() -> List[str]:
    return list(REPORT_REASONS)


@router.post("/reports", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportIn,
    background_tasks: BackgroundTasks,
    service: ReportService = Depends(get_report_service_dep),
    reporter: AuthenticatedUser = Depends(get_current_user),
) -> ReportOut:
    try:
        report = await service.submit(
            reporter_id=reporter.id,
            reason=payload.reason,
            reported_user_id=payload.reported_user_id,
            reported_message_id=payload.reported_message_id,
            details=payload.details,
        )
    except ModerationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.reason) from exc
    background_tasks.add_task(service.notify_admins, report)
    return ReportOut.from_report(report)
