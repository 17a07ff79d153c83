"""Profile browsing, search, and compatibility endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.domain.compatibility import service as compatibility_service
from app.domain.compatibility.schemas import CompatibilityOut
from app.domain.identity import schemas, service
from app.domain.identity.exceptions import IdentityError, UserNotFound
from app.domain.pictures import service as pictures_service
from app.domain.pictures.schemas import PictureOut
from app.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api/users", tags=["users"])


def _not_found() -> HTTPException:
	return HTTPException(status.HTTP_404_NOT_FOUND, detail=UserNotFound.reason)


@router.get("", response_model=List[schemas.UserPublic])
async def list_users(
	role: Optional[str] = Query(default=None),
	location: Optional[str] = Query(default=None),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[schemas.UserPublic]:
	users = await service.list_users(role=role or None, location=location or None)
	return [schemas.UserPublic.from_model(user) for user in users]


@router.get("/search", response_model=List[schemas.UserPublic])
async def search_users(
	q: str = Query(default=""),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[schemas.UserPublic]:
	try:
		users = await service.search_users(auth_user.id, q)
	except UserNotFound:
		raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="not_authenticated") from None
	except IdentityError as exc:
		raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=exc.reason) from None
	return [schemas.UserPublic.from_model(user) for user in users]


@router.get("/{user_id}", response_model=schemas.UserPublic)
async def get_user(user_id: int, auth_user: AuthenticatedUser = Depends(get_current_user)) -> schemas.UserPublic:
	try:
		user = await service.get_user(user_id)
	except UserNotFound:
		raise _not_found() from None
	return schemas.UserPublic.from_model(user)


@router.get("/{user_id}/compatibility", response_model=CompatibilityOut)
async def get_compatibility(
	user_id: int,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> CompatibilityOut:
	try:
		result = await compatibility_service.get_compatibility(auth_user.id, user_id)
	except UserNotFound:
		raise _not_found() from None
	return CompatibilityOut.from_result(result)


@router.get("/{user_id}/pictures", response_model=List[PictureOut])
async def list_pictures(user_id: int, auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[PictureOut]:
	pictures = await pictures_service.get_service().list_for_user(user_id)
	return [PictureOut.from_model(picture) for picture in pictures]
