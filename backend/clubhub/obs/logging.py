"""JSON logging with request-scoped context.

Every record is rendered as one JSON object. The request id, route, client ip
and (once identity is resolved) the caller's user id are carried in a single
context variable so that domain code can log plain messages with ``extra=``
fields and still be correlated with the HTTP request that caused them.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from clubhub.settings import settings

_LOGGER_NAME = "clubhub"

_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("clubhub_log_context", default={})

# Output key for each bound context field.
_CONTEXT_KEYS = {"request_id": "request_id", "route": "route", "user_id": "user_id", "client_ip": "ip"}

# Substrings of extra-field names whose values never reach the log stream.
_REDACTED = ("password", "token", "secret", "authorization", "email", "cookie")

_MAX_TEXT = 256
_MAX_ITEMS = 10

# Attributes every LogRecord carries; anything else on the record came from ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def bind_context(**fields: Optional[str]) -> Token:
	"""Merge ``fields`` into the logging context; pass the token to ``reset_context``."""
	merged = dict(_CONTEXT.get())
	merged.update({key: str(value) for key, value in fields.items() if value is not None and key in _CONTEXT_KEYS})
	return _CONTEXT.set(merged)


def reset_context(token: Token) -> None:
	_CONTEXT.reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT.get().get("request_id")


def _scrub(key: str, value: Any, depth: int = 0) -> Any:
	if any(marker in key.lower() for marker in _REDACTED):
		return "[redacted]"
	if value is None or isinstance(value, (bool, int, float)):
		return value
	if isinstance(value, str):
		return value if len(value) <= _MAX_TEXT else value[:_MAX_TEXT] + "..."
	if depth >= 2:
		return str(value)
	if isinstance(value, Mapping):
		items = list(value.items())
		scrubbed = {str(k): _scrub(str(k), v, depth + 1) for k, v in items[:_MAX_ITEMS]}
		if len(items) > _MAX_ITEMS:
			scrubbed["..."] = f"+{len(items) - _MAX_ITEMS} keys"
		return scrubbed
	if isinstance(value, (list, tuple, set, frozenset)):
		items = list(value)
		scrubbed_items = [_scrub(key, item, depth + 1) for item in items[:_MAX_ITEMS]]
		if len(items) > _MAX_ITEMS:
			scrubbed_items.append(f"+{len(items) - _MAX_ITEMS} more")
		return scrubbed_items
	return str(value)


class JSONLogFormatter(logging.Formatter):
	"""Render a record, its bound context and its ``extra`` fields as JSON."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		for field, value in _CONTEXT.get().items():
			payload[_CONTEXT_KEYS[field]] = value
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in vars(record).items():
			if key not in _RECORD_ATTRS and key not in payload:
				payload[key] = _scrub(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Drop a share of INFO records; other levels always pass."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = settings.obs_log_sampling_rate_info
		return rate >= 1.0 or random.random() < max(rate, 0.0)


def configure_logging() -> logging.Logger:
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


__all__ = [
	"InfoSamplingFilter",
	"JSONLogFormatter",
	"bind_context",
	"configure_logging",
	"current_request_id",
	"get_logger",
	"reset_context",
]
