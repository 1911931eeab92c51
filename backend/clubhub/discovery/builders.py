"""SQL builder for event discovery queries."""

from __future__ import annotations

from clubhub.discovery import filters as f

ENRICHED_EVENT_SELECT = """
	SELECT e.*,
		c.id AS club_ref_id,
		c.name AS club_name,
		c.description AS club_description,
		c.logo AS club_logo
	FROM event_entity e
	LEFT JOIN clubs c ON c.id = e.club_id
"""

# Byte-wise ordering of the raw date/time strings, undated events first.
ORDER_BY = 'ORDER BY e.date COLLATE "C" ASC NULLS FIRST, e.start_time COLLATE "C" ASC, e.id ASC'

_LIKE = "ILIKE ${idx} ESCAPE '\\'"


def escape_like(value: str) -> str:
	"""Escape LIKE wildcards so user input matches literally."""
	return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(params: list[object], text: str) -> int:
	params.append(f"%{escape_like(text)}%")
	return len(params)


def _render(item: f.EventFilter, params: list[object]) -> str | None:
	if isinstance(item, f.KeywordFilter):
		like = _LIKE.format(idx=_contains(params, item.text))
		return f"(e.name {like} OR e.description {like} OR c.name {like})"
	if isinstance(item, f.TagsFilter):
		if not item.tags:
			return None
		params.append(list(item.tags))
		operator = "@>" if item.match == "all" else "&&"
		return f"e.tags {operator} ${len(params)}::text[]"
	if isinstance(item, f.ClubNameFilter):
		return "c.name " + _LIKE.format(idx=_contains(params, item.text))
	if isinstance(item, f.ClubIdsFilter):
		if not item.club_ids:
			return None
		params.append([str(club_id) for club_id in item.club_ids])
		return f"e.club_id = ANY(${len(params)}::uuid[])"
	if isinstance(item, f.DateEqualsFilter):
		params.append(item.value)
		return f"e.date = ${len(params)}"
	if isinstance(item, f.DateRangeFilter):
		clauses: list[str] = []
		if item.date_from is not None:
			params.append(item.date_from)
			clauses.append(f'e.date COLLATE "C" >= ${len(params)}')
		if item.date_to is not None:
			params.append(item.date_to)
			clauses.append(f'e.date COLLATE "C" <= ${len(params)}')
		return " AND ".join(clauses) or None
	if isinstance(item, f.StartTimeFromFilter):
		params.append(item.value)
		return f'e.start_time COLLATE "C" >= ${len(params)}'
	if isinstance(item, f.EndTimeUntilFilter):
		params.append(item.value)
		return f'e.end_time COLLATE "C" <= ${len(params)}'
	if isinstance(item, f.LocationFilter):
		return "e.location " + _LIKE.format(idx=_contains(params, item.text))
	if isinstance(item, f.RsvpFilter):
		params.append(item.value)
		return f"e.rsvp_needed = ${len(params)}"
	if isinstance(item, f.EventIdFilter):
		params.append(str(item.event_id))
		return f"e.id = ${len(params)}::uuid"
	if isinstance(item, f.FavoritedByFilter):
		params.append(str(item.user_id))
		return (
			"EXISTS (SELECT 1 FROM event_favorite fav "
			f"WHERE fav.event_id = e.id AND fav.user_id = ${len(params)}::uuid)"
		)
	raise TypeError(f"unsupported event filter: {type(item).__name__}")


def build_event_query(query: f.EventQuery) -> tuple[str, list[object]]:
	"""Return parameterised SQL and its parameters for ``query``."""
	params: list[object] = []
	clauses = [clause for clause in (_render(item, params) for item in query.filters) if clause]
	sql = ENRICHED_EVENT_SELECT
	if clauses:
		sql += "\tWHERE " + "\n\t\tAND ".join(clauses) + "\n"
	sql += "\t" + ORDER_BY
	if query.limit is not None:
		params.append(query.limit)
		sql += f"\n\tLIMIT ${len(params)}"
	if query.offset is not None:
		params.append(query.offset)
		sql += f"\n\tOFFSET ${len(params)}"
	return sql, params


__all__ = ["ENRICHED_EVENT_SELECT", "ORDER_BY", "build_event_query", "escape_like"]
