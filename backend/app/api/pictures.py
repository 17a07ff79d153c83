"""Profile picture gallery endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.domain.pictures import service as pictures_service
from app.domain.pictures.exceptions import PictureError
from app.domain.pictures.schemas import PictureCreateRequest, PictureOut
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api/profile-pictures", tags=["pictures"])


@router.post("", response_model=PictureOut, status_code=status.HTTP_201_CREATED)
async def add_picture(
	payload: PictureCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> PictureOut:
	try:
		picture = await pictures_service.get_service().add(auth_user.id, payload.object_path)
	except PictureError as exc:
		raise HTTPException(status_code=exc.status_code, detail=exc.reason) from None
	return PictureOut.from_model(picture)


@router.delete("/{picture_id}")
async def delete_picture(picture_id: int, auth_user: AuthenticatedUser = Depends(get_current_user)) -> dict[str, bool]:
	try:
		await pictures_service.get_service().remove(auth_user.id, picture_id)
	except PictureError as exc:
		raise HTTPException(status_code=exc.status_code, detail=exc.reason) from None
	return {"success": True}
