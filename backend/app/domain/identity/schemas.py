"""Pydantic schemas for identity and profile flows."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.domain.identity import policy
from app.domain.identity.models import MATCH_QUESTION_FIELDS, ROLES, User

Answer = Optional[Annotated[str, Field(max_length=200)]]


class MatchAnswers(BaseModel):
	seeking_type: Answer = None
	games_playing: Answer = None
	ideal_first_date: Answer = None
	cat_or_dog: Answer = None
	gaming_platform: Answer = None
	relationship_type: Answer = None
	drinking: Answer = None
	smoking: Answer = None
	phone_preference: Answer = None
	coke_or_pepsi: Answer = None
	input_preference: Answer = None
	meeting_preference: Answer = None
	about_me: Optional[Annotated[str, Field(max_length=2000)]] = None


class RegisterRequest(MatchAnswers):
	username: str
	email: EmailStr
	password: Annotated[str, Field(min_length=policy.PASSWORD_MIN_LEN)]
	role: str
	location: str = Field(..., min_length=1)
	region: str = "NA"
	subregion: str = ""
	bio: str = ""
	connection_goal: Annotated[str, Field(min_length=policy.CONNECTION_GOAL_MIN_LEN)]
	age: Annotated[int, Field(ge=policy.MIN_AGE)]
	has_agreed_to_rules: bool

	@field_validator("username")
	@classmethod
	def _check_username(cls, value: str) -> str:
		return policy.guard_username(value)

	@field_validator("email")
	@classmethod
	def _lower_email(cls, value: str) -> str:
		return policy.normalise_email(value)

	@field_validator("role")
	@classmethod
	def _check_role(cls, value: str) -> str:
		if value not in ROLES:
			raise ValueError("unknown_role")
		return value

	@field_validator("has_agreed_to_rules")
	@classmethod
	def _must_agree(cls, value: bool) -> bool:
		if value is not True:
			raise ValueError("rules_not_accepted")
		return value


class LoginRequest(BaseModel):
	username: str
	password: str


class ProfileUpdateRequest(MatchAnswers):
	username: Optional[str] = None
	bio: Optional[Annotated[str, Field(max_length=1000)]] = None
	profile_picture: Optional[str] = None
	banner_picture: Optional[str] = None
	email_on_message: Optional[bool] = None
	first_message_filter_enabled: Optional[bool] = None


class PasswordResetRequest(BaseModel):
	email: str


class PasswordResetConfirm(BaseModel):
	token: str = Field(..., min_length=1)
	password: Annotated[str, Field(min_length=policy.PASSWORD_MIN_LEN)]


class UserPublic(MatchAnswers):
	"""Profile projection visible to any signed-in member."""

	id: int
	username: str
	role: str
	location: str
	region: str
	subregion: str = ""
	bio: str = ""
	profile_picture: Optional[str] = None
	banner_picture: Optional[str] = None
	connection_goal: str
	age: int
	is_verified: bool = False
	is_admin: bool = False
	created_at: Optional[datetime] = None

	@classmethod
	def from_model(cls, user: User) -> "UserPublic":
		return cls(
			id=user.id,
			username=user.username,
			role=user.role,
			location=user.location,
			region=user.region,
			subregion=user.subregion,
			bio=user.bio,
			profile_picture=user.profile_picture,
			banner_picture=user.banner_picture,
			connection_goal=user.connection_goal,
			age=user.age,
			is_verified=user.is_verified,
			is_admin=user.is_admin,
			created_at=user.created_at,
			**{name: getattr(user, name) for name in MATCH_QUESTION_FIELDS},
		)


class UserSelf(UserPublic):
	"""The signed-in user's own account, including private settings."""

	email: str
	has_agreed_to_rules: bool = False
	first_message_filter_enabled: bool = False
	email_on_message: bool = True

	@classmethod
	def from_model(cls, user: User) -> "UserSelf":
		base = UserPublic.from_model(user).model_dump()
		return cls(
			**base,
			email=user.email,
			has_agreed_to_rules=user.has_agreed_to_rules,
			first_message_filter_enabled=user.first_message_filter_enabled,
			email_on_message=user.email_on_message,
		)


class UserAdminView(UserSelf):
	is_shadow_banned: bool = False

	@classmethod
	def from_model(cls, user: User) -> "UserAdminView":
		base = UserSelf.from_model(user).model_dump()
		return cls(**base, is_shadow_banned=user.is_shadow_banned)


class AuthResponse(BaseModel):
	access_token: str
	token_type: Literal["bearer"] = "bearer"
	user: UserSelf


class MessageOut(BaseModel):
	message: str
