"""Registration, login, account, and password reset endpoints."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from app.domain.identity import policy, recovery, schemas, service
from app.domain.identity.exceptions import IdentityError, UserNotFound
from app.infra.auth import AuthenticatedUser, get_current_user
from app.obs import metrics as obs_metrics

router = APIRouter(prefix="/api", tags=["auth"])


def _map_policy_error(exc: policy.IdentityPolicyError) -> HTTPException:
	obs_metrics.inc_identity_reject(exc.reason)
	if exc.reason == "rate_limited":
		return HTTPException(status.HTTP_429_TOO_MANY_REQUESTS, detail=exc.reason)
	return HTTPException(status.HTTP_400_BAD_REQUEST, detail=exc.reason)


def _map_identity_error(exc: IdentityError) -> HTTPException:
	if isinstance(exc, UserNotFound):
		return HTTPException(status.HTTP_404_NOT_FOUND, detail=exc.reason)
	if exc.reason == "invalid_credentials":
		return HTTPException(status.HTTP_401_UNAUTHORIZED, detail=exc.reason)
	return HTTPException(status.HTTP_400_BAD_REQUEST, detail=exc.reason)


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: schemas.RegisterRequest) -> schemas.AuthResponse:
	try:
		user, token = await service.register(payload)
	except policy.IdentityPolicyError as exc:
		raise _map_policy_error(exc) from None
	except IdentityError as exc:
		raise _map_identity_error(exc) from None
	return schemas.AuthResponse(access_token=token, user=schemas.UserSelf.from_model(user))


@router.post("/login", response_model=schemas.AuthResponse)
async def login(payload: schemas.LoginRequest) -> schemas.AuthResponse:
	try:
		user, token = await service.login(payload)
	except policy.IdentityPolicyError as exc:
		raise _map_policy_error(exc) from None
	except IdentityError as exc:
		raise _map_identity_error(exc) from None
	return schemas.AuthResponse(access_token=token, user=schemas.UserSelf.from_model(user))


@router.post("/logout")
async def logout() -> dict[str, bool]:
	# Tokens are stateless; the client drops its copy.
	return {"ok": True}


@router.get("/user", response_model=schemas.UserSelf)
async def get_me(auth_user: AuthenticatedUser = Depends(get_current_user)) -> schemas.UserSelf:
	try:
		user = await service.get_user(auth_user.id)
	except IdentityError as exc:
		raise _map_identity_error(exc) from None
	return schemas.UserSelf.from_model(user)


@router.patch("/user", response_model=schemas.UserSelf)
async def update_me(
	payload: schemas.ProfileUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.UserSelf:
	try:
		user = await service.update_profile(auth_user.id, payload)
	except policy.IdentityPolicyError as exc:
		raise _map_policy_error(exc) from None
	except IdentityError as exc:
		raise _map_identity_error(exc) from None
	return schemas.UserSelf.from_model(user)


@router.delete("/account", response_model=schemas.MessageOut)
async def delete_account(auth_user: AuthenticatedUser = Depends(get_current_user)) -> schemas.MessageOut:
	try:
		await service.delete_account(auth_user.id)
	except IdentityError as exc:
		raise _map_identity_error(exc) from None
	return schemas.MessageOut(message="Your account has been deleted")


@router.post("/auth/password-reset/request", response_model=schemas.MessageOut)
async def password_reset_request(
	payload: schemas.PasswordResetRequest,
	background_tasks: BackgroundTasks,
) -> schemas.MessageOut:
	try:
		email = await recovery.accept_password_reset(payload.email)
	except policy.IdentityPolicyError as exc:
		raise _map_policy_error(exc) from None
	# Lookup and mail happen after the response, whether or not the account exists
	background_tasks.add_task(recovery.issue_password_reset, email)
	return schemas.MessageOut(message=recovery.RESET_REQUEST_MESSAGE)


@router.post("/auth/password-reset/confirm", response_model=schemas.MessageOut)
async def password_reset_confirm(payload: schemas.PasswordResetConfirm) -> schemas.MessageOut:
	try:
		await recovery.confirm_password_reset(payload.token, payload.password)
	except IdentityError as exc:
		raise _map_identity_error(exc) from None
	return schemas.MessageOut(message="Password has been reset successfully")
