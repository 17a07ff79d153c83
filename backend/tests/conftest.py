import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from app.domain.chat import service as chat_service
from app.domain.chat.repo import ChatRepository, reset_memory_store
from app.domain.compatibility import service as compatibility_service
from app.domain.identity import recovery
from app.domain.identity import service as identity_service
from app.domain.identity.models import PasswordResetToken, User
from app.domain.pictures import service as pictures_service
from app.domain.pictures.models import ProfilePicture
from app.domain.status import service as status_service
from app.domain.status.models import StatusUpdate
from app.infra import postgres
from app.main import app
from app.moderation.domain import container
from app.moderation.domain.models import Report
from app.settings import settings


# Ensure a selector-based event loop policy on Windows to avoid Proactor issues with async IO
if hasattr(asyncio, "WindowsSelectorEventLoopPolicy"):
	try:
		asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
	except Exception:
		# Non-fatal; proceed with default policy
		pass


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from app.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)
	# repositories see "no pool" and fall back or fail fast
	postgres.set_pool(None)
	yield
	postgres.set_pool(None)


@pytest_asyncio.fixture(autouse=True)
async def clean_chat_store():
	await reset_memory_store()
	yield
	await reset_memory_store()


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests authenticate via the X-User-Id header, which is only accepted in
	dev mode. SMTP stays unconfigured so no email leaves the process.
	"""
	original_env = settings.environment
	original_smtp = settings.smtp_host
	settings.environment = "dev"
	settings.smtp_host = ""
	try:
		yield
	finally:
		settings.environment = original_env
		settings.smtp_host = original_smtp


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


def build_user(user_id: int, **overrides) -> User:
	values = {
		"id": user_id,
		"username": f"user{user_id}",
		"email": f"user{user_id}@example.com",
		"password_hash": "not-a-real-hash",
		"role": "Femboy",
		"location": "Texas",
		"connection_goal": "Looking for gaming friends",
		"age": 25,
		"has_agreed_to_rules": True,
		"created_at": datetime(2025, 6, 1, tzinfo=timezone.utc),
	}
	values.update(overrides)
	return User(**values)


class FakeUserRepository:
	"""In-process stand-in for UserRepository."""

	def __init__(self, users=()):
		self.users: dict[int, User] = {user.id: user for user in users}
		self.reset_tokens: dict[int, PasswordResetToken] = {}
		self.deleted: list[int] = []

	def add(self, user: User) -> User:
		self.users[user.id] = user
		return user

	async def get(self, user_id):
		return self.users.get(user_id)

	async def get_many(self, user_ids):
		return {uid: self.users[uid] for uid in user_ids if uid in self.users}

	async def get_by_username(self, username):
		return next((u for u in self.users.values() if u.username == username), None)

	async def get_by_email(self, email):
		return next((u for u in self.users.values() if u.email.lower() == email.lower()), None)

	async def create(self, values):
		next_id = max(self.users, default=0) + 1
		fields = {key: value for key, value in values.items() if key in User.__dataclass_fields__}
		fields.setdefault("created_at", datetime.now(timezone.utc))
		return self.add(User(id=next_id, **fields))

	async def update(self, user_id, updates):
		user = self.users.get(user_id)
		if user is None:
			return None
		for key, value in updates.items():
			setattr(user, key, value)
		return user

	async def list_visible(self, *, role=None, location=None):
		return [
			u
			for u in self.users.values()
			if not u.is_shadow_banned and (role is None or u.role == role) and (location is None or u.location == location)
		]

	async def search(self, query, *, include_shadow_banned=False):
		needle = query.lower()
		return [
			u
			for u in self.users.values()
			if (include_shadow_banned or not u.is_shadow_banned)
			and any(needle in (value or "").lower() for value in (u.username, u.bio, u.location))
		]

	async def list_all(self):
		return sorted(self.users.values(), key=lambda u: u.created_at, reverse=True)

	async def list_admins(self):
		return [u for u in self.users.values() if u.is_admin]

	async def delete(self, user_id):
		if self.users.pop(user_id, None) is None:
			return False
		self.deleted.append(user_id)
		return True

	async def create_reset_token(self, user_id, hashed_token, expires_at):
		token = PasswordResetToken(
			id=len(self.reset_tokens) + 1,
			user_id=user_id,
			hashed_token=hashed_token,
			expires_at=expires_at,
		)
		self.reset_tokens[token.id] = token
		return token

	async def consume_reset_token(self, hashed_token, password_hash, *, now=None):
		# a database round trip happens before the conditional update runs
		await asyncio.sleep(0)
		now = now or datetime.now(timezone.utc)
		for token in self.reset_tokens.values():
			if token.hashed_token == hashed_token and token.used_at is None and token.expires_at > now:
				token.used_at = now
				self.users[token.user_id].password_hash = password_hash
				return token.user_id
		return None


@pytest.fixture
def make_user():
	return build_user


@pytest.fixture
def fake_users():
	return FakeUserRepository()


class FakeStatusRepository:
	def __init__(self) -> None:
		self.rows: list[StatusUpdate] = []
		self._next_id = 1

	async def replace(self, user_id, content, created_at, expires_at):
		self.rows = [row for row in self.rows if row.user_id != user_id]
		update = StatusUpdate(self._next_id, user_id, content, created_at, expires_at)
		self._next_id += 1
		self.rows.append(update)
		return update

	async def purge_expired(self, now):
		before = len(self.rows)
		self.rows = [row for row in self.rows if row.expires_at > now]
		return before - len(self.rows)

	async def list_active(self, now):
		return sorted((r for r in self.rows if r.expires_at > now), key=lambda r: (r.created_at, r.id), reverse=True)

	async def get_active_for_user(self, user_id, now):
		return next((r for r in self.rows if r.user_id == user_id and r.expires_at > now), None)

	async def delete_for_user(self, user_id):
		before = len(self.rows)
		self.rows = [row for row in self.rows if row.user_id != user_id]
		return before - len(self.rows)


class FakePictureRepository:
	def __init__(self) -> None:
		self.rows: list[ProfilePicture] = []

	async def list_for_user(self, user_id):
		return sorted((p for p in self.rows if p.user_id == user_id), key=lambda p: p.display_order)

	async def count_for_user(self, user_id):
		return sum(1 for p in self.rows if p.user_id == user_id)

	async def add(self, user_id, object_path, display_order):
		picture = ProfilePicture(len(self.rows) + 1, user_id, object_path, display_order)
		self.rows.append(picture)
		return picture

	async def delete_owned(self, picture_id, user_id):
		for picture in self.rows:
			if picture.id == picture_id and picture.user_id == user_id:
				self.rows.remove(picture)
				return True
		return False


class FakeReportRepository:
	def __init__(self) -> None:
		self.rows: list[Report] = []

	async def create(self, *, reporter_id, reported_user_id, reported_message_id, reason, details):
		report = Report(
			id=len(self.rows) + 1,
			reporter_id=reporter_id,
			reported_user_id=reported_user_id,
			reported_message_id=reported_message_id,
			reason=reason,
			details=details,
			created_at=datetime.now(timezone.utc),
		)
		self.rows.append(report)
		return report

	async def list(self, status=None):
		return [r for r in reversed(self.rows) if status is None or r.status == status]

	async def pending_count(self):
		return sum(1 for r in self.rows if r.status == "pending")

	async def update(self, report_id, *, status=None, admin_notes=None, notes_set=False, resolved_at=None, resolved_by=None):
		report = next((r for r in self.rows if r.id == report_id), None)
		if report is None:
			return None
		if status is not None:
			report.status = status
			report.resolved_at = resolved_at
			report.resolved_by = resolved_by
		if notes_set:
			report.admin_notes = admin_notes
		return report


@pytest.fixture
def fake_statuses():
	return FakeStatusRepository()


@pytest.fixture
def fake_pictures():
	return FakePictureRepository()


@pytest.fixture
def fake_reports():
	return FakeReportRepository()


@pytest.fixture
def wired(monkeypatch, fake_users, fake_statuses, fake_pictures, fake_reports):
	"""Point every service behind the API at in-process repositories."""
	monkeypatch.setattr(identity_service, "_SERVICE", identity_service.IdentityService(repository=fake_users))
	monkeypatch.setattr(recovery, "_RECOVERY", recovery.PasswordRecovery(repository=fake_users))
	monkeypatch.setattr(
		compatibility_service,
		"_SERVICE",
		compatibility_service.CompatibilityService(repository=fake_users),
	)
	monkeypatch.setattr(chat_service, "_SERVICE", chat_service.ChatService(repository=ChatRepository(), users=fake_users))
	monkeypatch.setattr(status_service, "_SERVICE", status_service.StatusService(repository=fake_statuses, users=fake_users))
	monkeypatch.setattr(pictures_service, "_SERVICE", pictures_service.PictureService(repository=fake_pictures))
	container.configure(users=fake_users, reports=fake_reports, messages=ChatRepository())
	try:
		yield fake_users
	finally:
		container.reset()
