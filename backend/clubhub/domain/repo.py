"""Async repository over the ClubHub relationship store."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Optional, Sequence
from uuid import UUID, uuid4

import asyncpg

from clubhub.domain import models
from clubhub.domain.exceptions import ConflictError

_USER_SELECT = """
	SELECT u.id, u.email, u.password_hash, u.is_super_admin, u.created_at, u.updated_at,
		COALESCE(
			(SELECT array_agg(ca.club_id ORDER BY ca.created_at) FROM club_admin ca WHERE ca.user_id = u.id),
			'{}'::uuid[]
		) AS admin_of,
		COALESCE(
			(SELECT array_agg(cm.club_id ORDER BY cm.joined_at) FROM club_member cm WHERE cm.user_id = u.id),
			'{}'::uuid[]
		) AS member_of,
		COALESCE(
			(SELECT array_agg(f.event_id ORDER BY f.created_at) FROM event_favorite f WHERE f.user_id = u.id),
			'{}'::uuid[]
		) AS favorited_events
	FROM users u
"""

_CLUB_SELECT = """
	SELECT c.*,
		COALESCE(
			(SELECT array_agg(ca.user_id ORDER BY ca.created_at) FROM club_admin ca WHERE ca.club_id = c.id),
			'{}'::uuid[]
		) AS admins
	FROM clubs c
"""

_EVENT_COLUMNS = (
	"name",
	"date",
	"start_time",
	"end_time",
	"rsvp_needed",
	"location",
	"description",
	"tags",
	"mu_life_link",
	"image",
	"delete_at",
)


def normalize_email(email: str) -> str:
	return email.strip().lower()


def _row_to_enriched_event(row: asyncpg.Record) -> models.EnrichedEvent:
	data = dict(row)
	club_ref = data.pop("club_ref_id", None)
	club_name = data.pop("club_name", None)
	club_description = data.pop("club_description", None)
	club_logo = data.pop("club_logo", None)
	club = None
	if club_ref is not None:
		club = models.ClubSummary(
			id=club_ref,
			name=club_name,
			description=club_description,
			logo=club_logo or models.DEFAULT_ASSET,
		)
	data["club"] = club
	return models.EnrichedEvent.model_validate(data)


def _affected(status: str) -> int:
	"""Parse the row count out of an asyncpg command status such as ``DELETE 3``."""
	try:
		return int(status.split()[-1])
	except (ValueError, IndexError):
		return 0


class ClubhubRepository:
	"""Thin data-access layer around an injected asyncpg pool."""

	def __init__(self, pool: asyncpg.pool.Pool) -> None:
		self._pool = pool

	@asynccontextmanager
	async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
		"""Yield a connection with an open transaction."""
		async with self._pool.acquire() as conn:
			async with conn.transaction():
				yield conn

	@asynccontextmanager
	async def _connection(self, conn: asyncpg.Connection | None) -> AsyncIterator[asyncpg.Connection]:
		if conn is not None:
			yield conn
			return
		async with self._pool.acquire() as pooled_conn:
			yield pooled_conn

	# --- User operations --------------------------------------------------

	async def create_user(
		self,
		*,
		email: str,
		password_hash: str | None,
		is_super_admin: bool = False,
		conn: asyncpg.Connection | None = None,
	) -> models.User:
		user_id = uuid4()
		async with self._connection(conn) as c:
			try:
				await c.execute(
					"""
					INSERT INTO users (id, email, password_hash, is_super_admin)
					VALUES ($1, $2, $3, $4)
					""",
					str(user_id),
					normalize_email(email),
					password_hash,
					is_super_admin,
				)
			except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
				raise ConflictError("email_in_use", "Email already in use") from exc
			record = await c.fetchrow(_USER_SELECT + " WHERE u.id=$1", str(user_id))
		return models.User.model_validate(dict(record))

	async def get_user(self, user_id: UUID, *, conn: asyncpg.Connection | None = None) -> models.User | None:
		async with self._connection(conn) as c:
			record = await c.fetchrow(_USER_SELECT + " WHERE u.id=$1", str(user_id))
		return models.User.model_validate(dict(record)) if record else None

	async def get_user_by_email(self, email: str, *, conn: asyncpg.Connection | None = None) -> models.User | None:
		async with self._connection(conn) as c:
			record = await c.fetchrow(_USER_SELECT + " WHERE LOWER(u.email)=$1", normalize_email(email))
		return models.User.model_validate(dict(record)) if record else None

	async def list_users(self) -> list[models.User]:
		async with self._connection(None) as c:
			rows = await c.fetch(_USER_SELECT + " ORDER BY u.email ASC")
		return [models.User.model_validate(dict(row)) for row in rows]

	async def set_super_admin(self, user_id: UUID, value: bool) -> models.User | None:
		async with self._connection(None) as c:
			await c.execute(
				"UPDATE users SET is_super_admin=$2, updated_at=NOW() WHERE id=$1",
				str(user_id),
				value,
			)
			record = await c.fetchrow(_USER_SELECT + " WHERE u.id=$1", str(user_id))
		return models.User.model_validate(dict(record)) if record else None

	# --- Club operations --------------------------------------------------

	async def create_club(
		self,
		*,
		name: str,
		description: str,
		logo: str,
		gallery: Sequence[str],
	) -> models.Club:
		async with self._connection(None) as c:
			record = await c.fetchrow(
				"""
				INSERT INTO clubs (id, name, description, logo, gallery)
				VALUES ($1, $2, $3, $4, $5)
				RETURNING *, '{}'::uuid[] AS admins
				""",
				str(uuid4()),
				name,
				description,
				logo,
				list(gallery),
			)
		return models.Club.model_validate(dict(record))

	async def get_club(
		self,
		club_id: UUID,
		*,
		conn: asyncpg.Connection | None = None,
		for_update: bool = False,
	) -> models.Club | None:
		query = _CLUB_SELECT + " WHERE c.id=$1"
		if for_update:
			query += " FOR UPDATE OF c"
		async with self._connection(conn) as c:
			record = await c.fetchrow(query, str(club_id))
		return models.Club.model_validate(dict(record)) if record else None

	async def list_club_summaries(self) -> list[models.ClubSummary]:
		async with self._connection(None) as c:
			rows = await c.fetch('SELECT id, name, description, logo FROM clubs ORDER BY name COLLATE "C" ASC, id ASC')
		return [models.ClubSummary.model_validate(dict(row)) for row in rows]

	async def list_admin_clubs(self, user_id: UUID) -> list[models.ClubSummary]:
		async with self._connection(None) as c:
			rows = await c.fetch(
				"""
				SELECT c.id, c.name, c.description, c.logo
				FROM club_admin ca
				JOIN clubs c ON c.id = ca.club_id
				WHERE ca.user_id=$1
				ORDER BY c.name ASC
				""",
				str(user_id),
			)
		return [models.ClubSummary.model_validate(dict(row)) for row in rows]

	async def list_club_admins(self, club_id: UUID) -> list[models.User]:
		async with self._connection(None) as c:
			rows = await c.fetch(
				_USER_SELECT
				+ """
				WHERE u.id IN (SELECT ca.user_id FROM club_admin ca WHERE ca.club_id=$1)
				ORDER BY u.email ASC
				""",
				str(club_id),
			)
		return [models.User.model_validate(dict(row)) for row in rows]

	# --- Relation edges ---------------------------------------------------

	async def add_club_admin(self, *, user_id: UUID, club_id: UUID, conn: asyncpg.Connection | None = None) -> bool:
		"""Insert the admin edge; returns False when it already existed."""
		async with self._connection(conn) as c:
			status = await c.execute(
				"""
				INSERT INTO club_admin (user_id, club_id)
				VALUES ($1, $2)
				ON CONFLICT (user_id, club_id) DO NOTHING
				""",
				str(user_id),
				str(club_id),
			)
		return _affected(status) > 0

	async def remove_club_admin(self, *, user_id: UUID, club_id: UUID, conn: asyncpg.Connection | None = None) -> bool:
		async with self._connection(conn) as c:
			status = await c.execute(
				"DELETE FROM club_admin WHERE user_id=$1 AND club_id=$2",
				str(user_id),
				str(club_id),
			)
		return _affected(status) > 0

	async def add_club_member(self, *, user_id: UUID, club_id: UUID, conn: asyncpg.Connection | None = None) -> bool:
		"""Insert the membership edge and bump the counter only when the edge is new."""
		async with self._connection(conn) as c:
			async with c.transaction():
				status = await c.execute(
					"""
					INSERT INTO club_member (user_id, club_id)
					VALUES ($1, $2)
					ON CONFLICT (user_id, club_id) DO NOTHING
					""",
					str(user_id),
					str(club_id),
				)
				inserted = _affected(status) > 0
				if inserted:
					await c.execute(
						"UPDATE clubs SET member_count = member_count + 1, updated_at = NOW() WHERE id=$1",
						str(club_id),
					)
		return inserted

	async def remove_club_member(self, *, user_id: UUID, club_id: UUID, conn: asyncpg.Connection | None = None) -> bool:
		async with self._connection(conn) as c:
			async with c.transaction():
				status = await c.execute(
					"DELETE FROM club_member WHERE user_id=$1 AND club_id=$2",
					str(user_id),
					str(club_id),
				)
				removed = _affected(status) > 0
				if removed:
					await c.execute(
						"""
						UPDATE clubs
						SET member_count = GREATEST(member_count - 1, 0), updated_at = NOW()
						WHERE id=$1
						""",
						str(club_id),
					)
		return removed

	async def add_favorite(self, *, user_id: UUID, event_id: UUID) -> bool:
		async with self._connection(None) as c:
			status = await c.execute(
				"""
				INSERT INTO event_favorite (user_id, event_id)
				VALUES ($1, $2)
				ON CONFLICT (user_id, event_id) DO NOTHING
				""",
				str(user_id),
				str(event_id),
			)
		return _affected(status) > 0

	async def remove_favorite(self, *, user_id: UUID, event_id: UUID) -> bool:
		async with self._connection(None) as c:
			status = await c.execute(
				"DELETE FROM event_favorite WHERE user_id=$1 AND event_id=$2",
				str(user_id),
				str(event_id),
			)
		return _affected(status) > 0

	async def remove_event_from_favorites(self, event_id: UUID, *, conn: asyncpg.Connection | None = None) -> int:
		async with self._connection(conn) as c:
			status = await c.execute("DELETE FROM event_favorite WHERE event_id=$1", str(event_id))
		return _affected(status)

	# --- Event operations -------------------------------------------------

	async def create_event(
		self,
		*,
		club_id: UUID,
		created_by: UUID | None,
		fields: dict[str, Any],
	) -> models.Event:
		columns = ["id", "club_id", "created_by"]
		values: list[object] = [str(uuid4()), str(club_id), str(created_by) if created_by else None]
		for column in _EVENT_COLUMNS:
			if column in fields:
				columns.append(column)
				values.append(fields[column])
		placeholders = ", ".join(f"${idx}" for idx in range(1, len(values) + 1))
		query = f"INSERT INTO event_entity ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *"
		async with self._connection(None) as c:
			record = await c.fetchrow(query, *values)
		return models.Event.model_validate(dict(record))

	async def get_event(
		self,
		event_id: UUID,
		*,
		conn: asyncpg.Connection | None = None,
		for_update: bool = False,
	) -> models.Event | None:
		query = "SELECT * FROM event_entity WHERE id=$1"
		if for_update:
			query += " FOR UPDATE"
		async with self._connection(conn) as c:
			record = await c.fetchrow(query, str(event_id))
		return models.Event.model_validate(dict(record)) if record else None

	async def update_event(
		self,
		event_id: UUID,
		*,
		payload: dict[str, object],
		conn: asyncpg.Connection | None = None,
	) -> models.Event | None:
		if not payload:
			return await self.get_event(event_id, conn=conn)
		set_clauses: list[str] = []
		params: list[object] = []
		for column, value in payload.items():
			if column not in _EVENT_COLUMNS:
				raise ValueError(f"unknown event column: {column}")
			set_clauses.append(f"{column}=${len(params) + 1}")
			params.append(value)
		params.append(str(event_id))
		query = f"""
			UPDATE event_entity
			SET {', '.join(set_clauses)}, updated_at = NOW()
			WHERE id=${len(params)}
			RETURNING *
		"""
		async with self._connection(conn) as c:
			record = await c.fetchrow(query, *params)
		return models.Event.model_validate(dict(record)) if record else None

	async def delete_event(self, event_id: UUID) -> models.Event | None:
		async with self._connection(None) as c:
			record = await c.fetchrow("DELETE FROM event_entity WHERE id=$1 RETURNING *", str(event_id))
		return models.Event.model_validate(dict(record)) if record else None

	async def purge_expired_events(self, *, limit: int) -> list[UUID]:
		"""Delete events whose ``delete_at`` has passed and drop their favourites."""
		async with self._connection(None) as c:
			async with c.transaction():
				rows = await c.fetch(
					"""
					WITH doomed AS (
						SELECT id FROM event_entity
						WHERE delete_at IS NOT NULL AND delete_at <= NOW()
						ORDER BY delete_at ASC
						LIMIT $1
						FOR UPDATE SKIP LOCKED
					)
					DELETE FROM event_entity e USING doomed d WHERE e.id = d.id
					RETURNING e.id
					""",
					limit,
				)
				ids = [row["id"] for row in rows]
				if ids:
					await c.execute(
						"DELETE FROM event_favorite WHERE event_id = ANY($1::uuid[])",
						[str(event_id) for event_id in ids],
					)
		return ids

	# --- Discovery --------------------------------------------------------

	async def fetch_enriched_events(self, query: str, params: Iterable[object]) -> list[models.EnrichedEvent]:
		async with self._connection(None) as c:
			rows = await c.fetch(query, *list(params))
		return [_row_to_enriched_event(row) for row in rows]

	async def list_tags(self) -> list[str]:
		async with self._connection(None) as c:
			rows = await c.fetch(
				"""
				SELECT DISTINCT tag
				FROM event_entity, UNNEST(tags) AS tag
				ORDER BY tag ASC
				"""
			)
		return [row["tag"] for row in rows]


__all__ = ["ClubhubRepository", "normalize_email"]
