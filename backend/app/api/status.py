"""Status update endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.domain.status import service as status_service
from app.domain.status.exceptions import StatusError
from app.domain.status.schemas import StatusCreateRequest, StatusOut
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api/status", tags=["status"])


@router.post("", response_model=StatusOut)
async def post_status(
	payload: StatusCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> StatusOut:
	try:
		update = await status_service.get_service().post(auth_user.id, payload.content)
	except StatusError as exc:
		raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=exc.reason) from None
	return StatusOut.from_model(update)


@router.get("", response_model=List[StatusOut])
async def list_statuses(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[StatusOut]:
	rows = await status_service.get_service().list_active()
	return [StatusOut.from_model(update, author=author) for update, author in rows]


@router.get("/mine", response_model=Optional[StatusOut])
async def my_status(auth_user: AuthenticatedUser = Depends(get_current_user)) -> Optional[StatusOut]:
	update = await status_service.get_service().mine(auth_user.id)
	return StatusOut.from_model(update) if update else None


@router.delete("")
async def clear_status(auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict[str, bool]:
	await status_service.get_service().clear(auth_user.id)
	return {"success": True}
