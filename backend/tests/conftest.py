import asyncio
import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("SECRET_KEY", "clubhub-test-secret-key-0123456789abcdef")

from clubhub.api.deps import ServiceContainer
from clubhub.discovery.service import DiscoveryService
from clubhub.domain import models
from clubhub.domain.accounts import AccountsService
from clubhub.domain.events_service import EventsService
from clubhub.domain.exceptions import ConflictError
from clubhub.domain.relationships import RelationshipService
from clubhub.infra import postgres
from clubhub.main import app
from clubhub.settings import settings


if hasattr(asyncio, "WindowsSelectorEventLoopPolicy"):
	try:
		asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
	except Exception:
		pass


def _now() -> datetime:
	return datetime.now(timezone.utc)


class InMemoryRepository:
	"""Dict-backed stand-in for ClubhubRepository used by service and API tests."""

	def __init__(self) -> None:
		self.users: dict[UUID, dict[str, Any]] = {}
		self.clubs: dict[UUID, dict[str, Any]] = {}
		self.events: dict[UUID, dict[str, Any]] = {}
		self.admin_edges: list[tuple[UUID, UUID]] = []
		self.member_edges: list[tuple[UUID, UUID]] = []
		self.favorites: list[tuple[UUID, UUID]] = []
		self.queries: list[tuple[str, list[object]]] = []
		self.fail_favorite_cleanup = False
		self.transactions = 0

	# --- seeding helpers ---

	def seed_user(self, email: str = "user@example.com", *, is_super_admin: bool = False, password_hash: str | None = None) -> models.User:
		user_id = uuid4()
		self.users[user_id] = {
			"id": user_id,
			"email": email.strip().lower(),
			"password_hash": password_hash,
			"is_super_admin": is_super_admin,
			"created_at": _now(),
			"updated_at": _now(),
		}
		return self._user(user_id)

	def seed_club(self, name: str = "Chess Club", description: str = "Knights and bishops") -> models.Club:
		club_id = uuid4()
		self.clubs[club_id] = {
			"id": club_id,
			"name": name,
			"description": description,
			"logo": models.DEFAULT_ASSET,
			"gallery": [],
			"member_count": 0,
			"created_at": _now(),
			"updated_at": _now(),
		}
		return self._club(club_id)

	def seed_event(self, club_id: UUID, **fields: Any) -> models.Event:
		event_id = uuid4()
		row = {
			"id": event_id,
			"name": "Open night",
			"date": "2025-03-15",
			"start_time": "18:00",
			"end_time": "20:00",
			"rsvp_needed": False,
			"location": "Student Union",
			"description": "Come along",
			"tags": [],
			"club_id": club_id,
			"created_by": None,
			"mu_life_link": None,
			"image": models.DEFAULT_ASSET,
			"delete_at": None,
			"created_at": _now(),
			"updated_at": _now(),
		}
		row.update(fields)
		self.events[event_id] = row
		return models.Event.model_validate(row)

	def make_admin(self, user_id: UUID, club_id: UUID) -> None:
		if (user_id, club_id) not in self.admin_edges:
			self.admin_edges.append((user_id, club_id))

	# --- projections ---

	def _user(self, user_id: UUID) -> models.User:
		row = dict(self.users[user_id])
		row["admin_of"] = [club for user, club in self.admin_edges if user == user_id]
		row["member_of"] = [club for user, club in self.member_edges if user == user_id]
		row["favorited_events"] = [event for user, event in self.favorites if user == user_id]
		return models.User.model_validate(row)

	def _club(self, club_id: UUID) -> models.Club:
		row = dict(self.clubs[club_id])
		row["admins"] = [user for user, club in self.admin_edges if club == club_id]
		return models.Club.model_validate(row)

	def _enriched(self, event_id: UUID) -> models.EnrichedEvent:
		row = dict(self.events[event_id])
		club = self.clubs.get(row["club_id"])
		row["club"] = self._club(club["id"]).summary() if club else None
		return models.EnrichedEvent.model_validate(row)

	# --- repository surface ---

	@asynccontextmanager
	async def transaction(self):
		self.transactions += 1
		yield None

	async def create_user(self, *, email: str, password_hash: str | None, is_super_admin: bool = False, conn=None) -> models.User:
		if await self.get_user_by_email(email) is not None:
			raise ConflictError("email_in_use", "Email already in use")
		user = self.seed_user(email, is_super_admin=is_super_admin, password_hash=password_hash)
		return user

	async def get_user(self, user_id: UUID, *, conn=None) -> Optional[models.User]:
		return self._user(user_id) if user_id in self.users else None

	async def get_user_by_email(self, email: str, *, conn=None) -> Optional[models.User]:
		wanted = email.strip().lower()
		for user_id, row in self.users.items():
			if row["email"] == wanted:
				return self._user(user_id)
		return None

	async def list_users(self) -> list[models.User]:
		return sorted((self._user(user_id) for user_id in self.users), key=lambda user: user.email)

	async def set_super_admin(self, user_id: UUID, value: bool) -> Optional[models.User]:
		if user_id not in self.users:
			return None
		self.users[user_id]["is_super_admin"] = value
		return self._user(user_id)

	async def create_club(self, *, name: str, description: str, logo: str, gallery: Iterable[str]) -> models.Club:
		club = self.seed_club(name, description)
		self.clubs[club.id]["logo"] = logo
		self.clubs[club.id]["gallery"] = list(gallery)
		return self._club(club.id)

	async def get_club(self, club_id: UUID, *, conn=None, for_update: bool = False) -> Optional[models.Club]:
		return self._club(club_id) if club_id in self.clubs else None

	async def list_club_summaries(self) -> list[models.ClubSummary]:
		clubs = sorted(self.clubs.values(), key=lambda row: (row["name"], str(row["id"])))
		return [self._club(row["id"]).summary() for row in clubs]

	async def list_admin_clubs(self, user_id: UUID) -> list[models.ClubSummary]:
		ids = [club for user, club in self.admin_edges if user == user_id and club in self.clubs]
		return sorted((self._club(club_id).summary() for club_id in ids), key=lambda club: club.name)

	async def list_club_admins(self, club_id: UUID) -> list[models.User]:
		ids = [user for user, club in self.admin_edges if club == club_id]
		return sorted((self._user(user_id) for user_id in ids), key=lambda user: user.email)

	async def add_club_admin(self, *, user_id: UUID, club_id: UUID, conn=None) -> bool:
		if (user_id, club_id) in self.admin_edges:
			return False
		self.admin_edges.append((user_id, club_id))
		return True

	async def remove_club_admin(self, *, user_id: UUID, club_id: UUID, conn=None) -> bool:
		if (user_id, club_id) not in self.admin_edges:
			return False
		self.admin_edges.remove((user_id, club_id))
		return True

	async def add_club_member(self, *, user_id: UUID, club_id: UUID, conn=None) -> bool:
		if (user_id, club_id) in self.member_edges:
			return False
		self.member_edges.append((user_id, club_id))
		if club_id in self.clubs:
			self.clubs[club_id]["member_count"] += 1
		return True

	async def remove_club_member(self, *, user_id: UUID, club_id: UUID, conn=None) -> bool:
		if (user_id, club_id) not in self.member_edges:
			return False
		self.member_edges.remove((user_id, club_id))
		if club_id in self.clubs:
			self.clubs[club_id]["member_count"] = max(self.clubs[club_id]["member_count"] - 1, 0)
		return True

	async def add_favorite(self, *, user_id: UUID, event_id: UUID) -> bool:
		if (user_id, event_id) in self.favorites:
			return False
		self.favorites.append((user_id, event_id))
		return True

	async def remove_favorite(self, *, user_id: UUID, event_id: UUID) -> bool:
		if (user_id, event_id) not in self.favorites:
			return False
		self.favorites.remove((user_id, event_id))
		return True

	async def remove_event_from_favorites(self, event_id: UUID, *, conn=None) -> int:
		if self.fail_favorite_cleanup:
			raise RuntimeError("favourite store unavailable")
		before = len(self.favorites)
		self.favorites = [(user, event) for user, event in self.favorites if event != event_id]
		return before - len(self.favorites)

	async def create_event(self, *, club_id: UUID, created_by: UUID | None, fields: dict[str, Any]) -> models.Event:
		return self.seed_event(club_id, created_by=created_by, **fields)

	async def get_event(self, event_id: UUID, *, conn=None, for_update: bool = False) -> Optional[models.Event]:
		row = self.events.get(event_id)
		return models.Event.model_validate(row) if row else None

	async def update_event(self, event_id: UUID, *, payload: dict[str, object], conn=None) -> Optional[models.Event]:
		if event_id not in self.events:
			return None
		self.events[event_id].update(payload)
		self.events[event_id]["updated_at"] = _now()
		return models.Event.model_validate(self.events[event_id])

	async def delete_event(self, event_id: UUID) -> Optional[models.Event]:
		row = self.events.pop(event_id, None)
		return models.Event.model_validate(row) if row else None

	async def purge_expired_events(self, *, limit: int) -> list[UUID]:
		now = _now()
		doomed = [
			event_id
			for event_id, row in self.events.items()
			if row["delete_at"] is not None and row["delete_at"] <= now
		][:limit]
		for event_id in doomed:
			self.events.pop(event_id)
		self.favorites = [(user, event) for user, event in self.favorites if event not in doomed]
		return doomed

	async def fetch_enriched_events(self, query: str, params: Iterable[object]) -> list[models.EnrichedEvent]:
		values = list(params)
		self.queries.append((query, values))
		ids = list(self.events)
		if "e.id = $1" in query:
			ids = [event_id for event_id in ids if str(event_id) == values[0]]
		elif "event_favorite fav" in query:
			wanted = {event for user, event in self.favorites if str(user) == values[0]}
			ids = [event_id for event_id in ids if event_id in wanted]
		elif "e.club_id = ANY($1" in query:
			ids = [event_id for event_id in ids if str(self.events[event_id]["club_id"]) in values[0]]
		events = [self._enriched(event_id) for event_id in ids]
		return sorted(events, key=lambda event: (event.date is not None, event.date or "", event.start_time, str(event.id)))

	async def list_tags(self) -> list[str]:
		return sorted({tag for row in self.events.values() for tag in row["tags"]})


def make_container(repo: InMemoryRepository) -> ServiceContainer:
	discovery = DiscoveryService(repo)  # type: ignore[arg-type]
	return ServiceContainer(
		repository=repo,  # type: ignore[arg-type]
		discovery=discovery,
		events=EventsService(repo, discovery),  # type: ignore[arg-type]
		relationships=RelationshipService(repo, discovery),  # type: ignore[arg-type]
		accounts=AccountsService(repo),  # type: ignore[arg-type]
	)

@pytest.fixture
def repo() -> InMemoryRepository:
	return InMemoryRepository()


@pytest.fixture
def services(repo: InMemoryRepository) -> ServiceContainer:
	return make_container(repo)


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Run with dev settings so API tests may authenticate with the X-User-Id header."""
	original_env = settings.environment
	original_tz = settings.event_timezone
	settings.environment = "dev"
	settings.event_timezone = "UTC"
	try:
		yield
	finally:
		settings.environment = original_env
		settings.event_timezone = original_tz


@pytest_asyncio.fixture
async def api_client(services):
	app.state.services = services
	transport = ASGITransport(app=app)
	try:
		async with AsyncClient(transport=transport, base_url="http://testserver") as client:
			yield client
	finally:
		app.state.services = None
