"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"femconnect_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"femconnect_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

RATE_LIMITED_EVENTS = Counter(
	"femconnect_rate_limited_total",
	"Events dropped due to rate limiting",
	["kind"],
)

CHAT_SEND = Counter(
	"femconnect_chat_send_total",
	"Direct messages sent",
)

CHAT_READ_UPDATES = Counter(
	"femconnect_chat_read_updates_total",
	"Conversations marked read",
)

COMPATIBILITY_COMPUTED = Counter(
	"femconnect_compatibility_computed_total",
	"Compatibility scores computed",
	["answered"],
)

STATUS_POSTED = Counter(
	"femconnect_status_posted_total",
	"Status updates posted",
)

STATUS_PURGED = Counter(
	"femconnect_status_purged_total",
	"Expired status updates purged",
)

IDENTITY_REGISTER = Counter(
	"femconnect_identity_register_total",
	"Successful user registrations",
)

IDENTITY_LOGIN = Counter(
	"femconnect_identity_login_total",
	"Login attempts",
	["result"],
)

IDENTITY_REJECTS = Counter(
	"femconnect_identity_rejects_total",
	"Identity operation rejects",
	["reason"],
)

IDENTITY_PWRESET_REQUEST = Counter(
	"femconnect_identity_pwreset_request_total",
	"Password reset requests",
)

IDENTITY_PWRESET_CONSUME = Counter(
	"femconnect_identity_pwreset_consume_total",
	"Password reset consumptions",
	["result"],
)

PROFILE_UPDATE = Counter(
	"femconnect_profile_update_total",
	"Profile updates applied",
)

MOD_REPORTS_TOTAL = Counter(
	"femconnect_mod_reports_total",
	"Moderation reports filed",
	["reason"],
)

MOD_ADMIN_ACTIONS = Counter(
	"femconnect_mod_admin_actions_total",
	"Admin moderation actions",
	["action"],
)

EMAILS_SENT = Counter(
	"femconnect_emails_total",
	"Outbound emails attempted",
	["kind", "result"],
)

REDIS_UP = Gauge("femconnect_redis_up", "Redis availability (1=up,0=down)")
REDIS_LATENCY = Summary("femconnect_redis_latency_seconds", "Redis ping latency (seconds)")

POSTGRES_UP = Gauge("femconnect_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("femconnect_postgres_latency_seconds", "Postgres ping latency (seconds)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_rate_limited(kind: str) -> None:
	RATE_LIMITED_EVENTS.labels(kind=kind).inc()


def inc_chat_send() -> None:
	CHAT_SEND.inc()


def inc_chat_read() -> None:
	CHAT_READ_UPDATES.inc()


def inc_compatibility(answered: bool) -> None:
	COMPATIBILITY_COMPUTED.labels(answered="yes" if answered else "no").inc()


def inc_status_posted() -> None:
	STATUS_POSTED.inc()


def inc_status_purged(count: int) -> None:
	if count > 0:
		STATUS_PURGED.inc(count)


def inc_identity_register() -> None:
	IDENTITY_REGISTER.inc()


def inc_identity_login(result: str) -> None:
	IDENTITY_LOGIN.labels(result=result).inc()


def inc_identity_reject(reason: str) -> None:
	IDENTITY_REJECTS.labels(reason=reason).inc()


def inc_pwreset_request() -> None:
	IDENTITY_PWRESET_REQUEST.inc()


def inc_pwreset_consume(result: str) -> None:
	IDENTITY_PWRESET_CONSUME.labels(result=result).inc()


def inc_profile_update() -> None:
	PROFILE_UPDATE.inc()


def inc_report(reason: str) -> None:
	MOD_REPORTS_TOTAL.labels(reason=reason).inc()


def inc_admin_action(action: str) -> None:
	MOD_ADMIN_ACTIONS.labels(action=action).inc()


def inc_email(kind: str, result: str) -> None:
	EMAILS_SENT.labels(kind=kind, result=result).inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
