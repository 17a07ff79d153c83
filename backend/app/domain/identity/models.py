"""Domain models for users and their questionnaire answers."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Mapping, Optional

RecordLike = Mapping[str, Any]

# Optional questionnaire answers, unset until the user fills the match questions.
MATCH_QUESTION_FIELDS: tuple[str, ...] = (
	"seeking_type",
	"games_playing",
	"ideal_first_date",
	"cat_or_dog",
	"gaming_platform",
	"relationship_type",
	"drinking",
	"smoking",
	"phone_preference",
	"coke_or_pepsi",
	"input_preference",
	"meeting_preference",
	"about_me",
)

ROLES: tuple[str, ...] = ("Femboy", "Male", "Female", "Non-Binary")


@dataclass(slots=True)
class User:
	id: int
	username: str
	email: str
	password_hash: str
	role: str
	location: str
	connection_goal: str
	age: int
	region: str = "NA"
	subregion: str = ""
	bio: str = ""
	profile_picture: Optional[str] = None
	banner_picture: Optional[str] = None
	is_18_plus: bool = True
	has_agreed_to_rules: bool = False
	is_shadow_banned: bool = False
	first_message_filter_enabled: bool = False
	is_verified: bool = False
	is_admin: bool = False
	email_on_message: bool = True
	created_at: Optional[datetime] = None
	seeking_type: Optional[str] = None
	games_playing: Optional[str] = None
	ideal_first_date: Optional[str] = None
	cat_or_dog: Optional[str] = None
	gaming_platform: Optional[str] = None
	relationship_type: Optional[str] = None
	drinking: Optional[str] = None
	smoking: Optional[str] = None
	phone_preference: Optional[str] = None
	coke_or_pepsi: Optional[str] = None
	input_preference: Optional[str] = None
	meeting_preference: Optional[str] = None
	about_me: Optional[str] = None

	@classmethod
	def from_record(cls, record: RecordLike) -> "User":
		names = {f.name for f in fields(cls)}
		values = {key: record[key] for key in record.keys() if key in names}
		values["id"] = int(values["id"])
		values["bio"] = values.get("bio") or ""
		values["subregion"] = values.get("subregion") or ""
		return cls(**values)

	def answers(self) -> dict[str, Optional[str]]:
		return {name: getattr(self, name) for name in MATCH_QUESTION_FIELDS}


@dataclass(slots=True)
class PasswordResetToken:
	id: int
	user_id: int
	hashed_token: str
	expires_at: datetime
	used_at: Optional[datetime] = None
	created_at: Optional[datetime] = None

	@classmethod
	def from_record(cls, record: RecordLike) -> "PasswordResetToken":
		return cls(
			id=int(record["id"]),
			user_id=int(record["user_id"]),
			hashed_token=record["hashed_token"],
			expires_at=record["expires_at"],
			used_at=record.get("used_at"),
			created_at=record.get("created_at"),
		)
