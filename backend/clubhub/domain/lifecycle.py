"""Event expiry computation.

An event expires at local midnight at the start of the day after its date.
Dates arrive in whatever shape the client submitted, so parsing is lenient:
ISO 8601 first, then ``a/b/c`` (or ``a-b-c``) numeric triples. A four-digit
first part reads year-first; otherwise an unambiguous component decides the
order and day-first is the default.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

from clubhub.settings import settings

DateInput = Union[str, date, datetime, None]


def event_zone() -> ZoneInfo:
	return ZoneInfo(settings.event_timezone)


def _from_iso(text: str, tz: tzinfo) -> Optional[date]:
	candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
	try:
		parsed = datetime.fromisoformat(candidate)
	except ValueError:
		try:
			return date.fromisoformat(text)
		except ValueError:
			return None
	if parsed.tzinfo is not None:
		parsed = parsed.astimezone(tz)
	return parsed.date()


def _from_triple(text: str) -> Optional[date]:
	separator = "/" if "/" in text else "-"
	parts = [part.strip() for part in text.split(separator)]
	if len(parts) != 3 or not all(part.isascii() and part.isdecimal() for part in parts):
		return None
	p0, p1, p2 = (int(part) for part in parts)
	if len(parts[0]) == 4:
		return _safe_date(p0, p1, p2)
	year = p2
	if p0 > 12:
		day, month = p0, p1
	elif p1 > 12:
		month, day = p0, p1
	else:
		day, month = p0, p1
	if year < 100:
		year += 2000
	return _safe_date(year, month, day)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
	try:
		return date(year, month, day)
	except ValueError:
		return None


def parse_event_date(value: DateInput, *, tz: tzinfo | None = None) -> Optional[date]:
	"""Return the calendar date named by ``value`` or None when it cannot be read."""
	zone = tz or event_zone()
	if value is None:
		return None
	if isinstance(value, datetime):
		if value.tzinfo is not None:
			value = value.astimezone(zone)
		return value.date()
	if isinstance(value, date):
		return value
	text = str(value).strip()
	if not text:
		return None
	return _from_iso(text, zone) or _from_triple(text)


def compute_expiry(value: DateInput, *, tz: tzinfo | None = None) -> Optional[datetime]:
	zone = tz or event_zone()
	calendar_day = parse_event_date(value, tz=zone)
	if calendar_day is None:
		return None
	next_day = calendar_day + timedelta(days=1)
	return datetime.combine(next_day, time.min, tzinfo=zone)


__all__ = ["compute_expiry", "event_zone", "parse_event_date"]
