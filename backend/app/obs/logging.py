"""Structured logging helpers for the observability package."""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.settings import settings

_REQUEST_ID: ContextVar[Optional[str]] = ContextVar("obs_request_id", default=None)
_ROUTE: ContextVar[Optional[str]] = ContextVar("obs_route", default=None)
_USER_ID: ContextVar[Optional[str]] = ContextVar("obs_user_id", default=None)
_CLIENT_IP: ContextVar[Optional[str]] = ContextVar("obs_client_ip", default=None)

_CONTEXT_VARS: Dict[str, ContextVar[Optional[str]]] = {
	"request_id": _REQUEST_ID,
	"route": _ROUTE,
	"user_id": _USER_ID,
	"client_ip": _CLIENT_IP,
}

_LOGGER_NAME = "femconnect"

# Message bodies and credentials never reach the log stream.
_SENSITIVE_KEYWORDS = (
	"token",
	"secret",
	"authorization",
	"password",
	"email",
	"content",
	"details",
	"notes",
)

_MAX_STRING_LENGTH = 256
_MAX_COLLECTION_ITEMS = 10

_RESERVED_ATTRS = frozenset(
	logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def bind_context(
	*,
	request_id: Optional[str] = None,
	route: Optional[str] = None,
	user_id: Optional[str] = None,
	client_ip: Optional[str] = None,
) -> Dict[str, Token]:
	"""Bind contextual fields for the current request and return reset tokens."""
	values = {"request_id": request_id, "route": route, "user_id": user_id, "client_ip": client_ip}
	tokens: Dict[str, Token] = {}
	for key, value in values.items():
		if value is not None:
			tokens[key] = _CONTEXT_VARS[key].set(value)
	return tokens


def reset_context(tokens: Dict[str, Token]) -> None:
	for key, token in tokens.items():
		var = _CONTEXT_VARS.get(key)
		if var is not None:
			var.reset(token)


def current_request_id() -> Optional[str]:
	return _REQUEST_ID.get()


def _sanitize_value(value: Any) -> Any:
	if isinstance(value, str):
		return value if len(value) <= _MAX_STRING_LENGTH else f"{value[:_MAX_STRING_LENGTH]}…"
	if isinstance(value, dict):
		result: Dict[str, Any] = {}
		for idx, (key, nested) in enumerate(value.items()):
			if idx >= _MAX_COLLECTION_ITEMS:
				result["…"] = f"+{len(value) - _MAX_COLLECTION_ITEMS} keys"
				break
			result[key] = _sanitize_field(str(key), nested)
		return result
	if isinstance(value, (list, tuple, set)):
		items = [_sanitize_value(item) for item in list(value)[:_MAX_COLLECTION_ITEMS]]
		if len(value) > _MAX_COLLECTION_ITEMS:
			items.append("…")
		return items
	if isinstance(value, datetime):
		return value.isoformat()
	return value


def _sanitize_field(key: str, value: Any) -> Any:
	lowered = key.lower()
	if any(keyword in lowered for keyword in _SENSITIVE_KEYWORDS):
		return "[redacted]"
	return _sanitize_value(value)


class JSONLogFormatter(logging.Formatter):
	"""Emit logs as JSON objects with structured fields."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
		payload: Dict[str, object] = {
			"ts": timestamp,
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		for key, var in _CONTEXT_VARS.items():
			value = var.get()
			if value:
				payload["ip" if key == "client_ip" else key] = value
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in record.__dict__.items():
			if key in _RESERVED_ATTRS or key.startswith("_"):
				continue
			payload[key] = _sanitize_field(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Randomly sample info-level logs, keep warnings/errors."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = max(0.0, min(1.0, settings.obs_log_sampling_rate_info))
		if rate >= 1.0:
			return True
		return random.random() < rate


def configure_logging() -> logging.Logger:
	"""Configure root logger with JSON formatting and sampling."""
	root = logging.getLogger()
	root.handlers.clear()
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
