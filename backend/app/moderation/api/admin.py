"""Admin endpoints for member management and report review."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.domain.identity.models import User
from app.domain.identity.schemas import UserAdminView, UserPublic
from app.infra.auth import AuthenticatedUser, get_current_user
from app.moderation.api.reports import ReportOut
from app.moderation.domain.admin_service import AdminService
from app.moderation.domain.container import get_admin_service
from app.moderation.domain.exceptions import ModerationError

router = APIRouter(prefix="/api/admin", tags=["admin"])


class ShadowBanIn(BaseModel):
    banned: bool


class SetAdminIn(BaseModel):
    is_admin: bool


class ReportUpdateIn(BaseModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = Field(default=None, max_length=4000)


class ReportWithPeopleOut(ReportOut):
    reporter: Optional[UserPublic] = None
    reported_user: Optional[UserPublic] = None


class DeleteUserOut(BaseModel):
    success: bool = True
    self_deleted: bool = False


class ReminderOut(BaseModel):
    message: str
    sent: int
    failed: int
    total: int


class CountOut(BaseModel):
    count: int


def get_admin_service_dep() -> AdminService:
    return get_admin_service()


def _raise(exc: ModerationError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=exc.reason) from exc


async def get_admin_user(
    auth_user: AuthenticatedUser = Depends(get_current_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> User:
    try:
        return await service.require_admin(auth_user.id)
    except ModerationError as exc:
        _raise(exc)


@router.get("/users", response_model=List[UserAdminView])
async def list_users(
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> List[UserAdminView]:
    users = await service.list_users()
    return [UserAdminView.from_model(user) for user in users]


@router.post("/users/{user_id}/shadow-ban", response_model=UserAdminView)
async def shadow_ban_user(
    user_id: int,
    payload: ShadowBanIn,
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> UserAdminView:
    try:
        user = await service.set_shadow_ban(admin.id, user_id, payload.banned)
    except ModerationError as exc:
        _raise(exc)
    return UserAdminView.from_model(user)


@router.post("/users/{user_id}/set-admin", response_model=UserAdminView)
async def set_admin(
    user_id: int,
    payload: SetAdminIn,
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> UserAdminView:
    try:
        user = await service.set_admin(admin.id, user_id, payload.is_admin)
    except ModerationError as exc:
        _raise(exc)
    return UserAdminView.from_model(user)


@router.delete("/users/{user_id}", response_model=DeleteUserOut)
async def delete_user(
    user_id: int,
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> DeleteUserOut:
    try:
        self_deleted = await service.delete_user(admin.id, user_id)
    except ModerationError as exc:
        _raise(exc)
    return DeleteUserOut(self_deleted=self_deleted)


@router.post("/send-profile-pic-reminders", response_model=ReminderOut)
async def send_profile_pic_reminders(
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> ReminderOut:
    summary = await service.send_profile_picture_reminders()
    return ReminderOut(
        message=f"Sent {summary.sent} reminder emails ({summary.failed} failed)",
        sent=summary.sent,
        failed=summary.failed,
        total=summary.total,
    )


@router.get("/reports", response_model=List[ReportWithPeopleOut])
async def list_reports(
    status: Optional[str] = Query(default=None),
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> List[ReportWithPeopleOut]:
    rows = await service.list_reports(status)
    return [
        ReportWithPeopleOut(
            **ReportOut.from_report(report).model_dump(),
            reporter=UserPublic.from_model(reporter) if reporter else None,
            reported_user=UserPublic.from_model(reported) if reported else None,
        )
        for report, reporter, reported in rows
    ]


@router.get("/reports/count", response_model=CountOut)
async def pending_reports_count(
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> CountOut:
    return CountOut(count=await service.pending_report_count())


@router.patch("/reports/{report_id}", response_model=ReportOut)
async def update_report(
    report_id: int,
    payload: ReportUpdateIn,
    admin: User = Depends(get_admin_user),
    service: AdminService = Depends(get_admin_service_dep),
) -> ReportOut:
    kwargs = {}
    if "admin_notes" in payload.model_fields_set:
        kwargs["admin_notes"] = payload.admin_notes
    try:
        report = await service.update_report(admin.id, report_id, status=payload.status, **kwargs)
    except ModerationError as exc:
        _raise(exc)
    return ReportOut.from_report(report)
