"""Authentication helpers for FastAPI endpoints.

- Bearer JWT (HS256) signed with settings.secret_key.
- The X-User-Id dev header is only respected in development.

Role checks (admin) are made against the stored user record, not token claims,
so revoking admin takes effect on the next request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.infra import jwt as jwt_helper
from app.obs import logging as obs_logging
from app.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: int
	username: Optional[str] = None


_bearer_scheme = HTTPBearer(auto_error=False)


def issue_access_token(user_id: int, *, username: str | None = None) -> str:
	payload: dict[str, object] = {"sub": str(user_id)}
	if username:
		payload["usr"] = username
	return jwt_helper.encode_access(payload)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
		user_id = int(str(payload.get("sub")))
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token") from None
	username = payload.get("usr")
	return AuthenticatedUser(id=user_id, username=str(username) if username is not None else None)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user.

	In development we allow the X-User-Id header. In all other environments it is
	ignored and a valid Bearer JWT is required.
	"""
	user: AuthenticatedUser | None = None
	if credentials and credentials.scheme.lower() == "bearer":
		user = verify_access_jwt(credentials.credentials)
	elif settings.is_dev() and x_user_id:
		try:
			user = AuthenticatedUser(id=int(x_user_id))
		except ValueError:
			raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token") from None
	if user is None:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="not_authenticated")
	obs_logging.bind_context(user_id=str(user.id))
	return user
