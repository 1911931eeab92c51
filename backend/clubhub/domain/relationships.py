"""Relationship consistency: admin edges, memberships, favourites and event deletion.

Every relation is a single edge row keyed on the pair, so ``User.admin_of`` and
``Club.admins`` can never disagree; these operations only add or remove edges
and keep the denormalised member counter in step within one transaction.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from clubhub.discovery import filters
from clubhub.discovery.service import DiscoveryService
from clubhub.domain import models, policies
from clubhub.domain.exceptions import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from clubhub.domain.repo import ClubhubRepository
from clubhub.obs import audit
from clubhub.obs import metrics as obs_metrics
from clubhub.schemas import dto

if TYPE_CHECKING:  # pragma: no cover - typing only
	from clubhub.infra.auth import Identity

_LOG = logging.getLogger(__name__)


def _require_identity(identity: Optional["Identity"]) -> "Identity":
	if identity is None:
		raise UnauthorizedError()
	return identity


def _authorize(identity: Optional["Identity"], allowed: bool, detail: str) -> "Identity":
	actor = _require_identity(identity)
	if not allowed:
		raise ForbiddenError(detail)
	return actor


def user_view(user: models.User) -> dto.UserResponse:
	return dto.UserResponse.model_validate(user)


class RelationshipService:
	def __init__(self, repository: ClubhubRepository, discovery: DiscoveryService | None = None) -> None:
		self.repo = repository
		self.discovery = discovery or DiscoveryService(repository)

	# --- Club admins ------------------------------------------------------

	async def assign_club_admin(
		self,
		actor: Optional["Identity"],
		target_email: str,
		club_id: UUID,
	) -> dto.UserResponse:
		actor = _authorize(actor, policies.can_assign_club_admin(actor), "super_admin_required")
		if not target_email or not target_email.strip():
			raise ValidationError("email_required", "Target email is required")
		async with self.repo.transaction() as conn:
			user = await self.repo.get_user_by_email(target_email, conn=conn)
			if user is None:
				raise NotFoundError("user_not_found", "User not found")
			club = await self.repo.get_club(club_id, conn=conn)
			if club is None:
				raise NotFoundError("club_not_found", "Club not found")
			added = await self.repo.add_club_admin(user_id=user.id, club_id=club.id, conn=conn)
			updated = await self.repo.get_user(user.id, conn=conn)
		if added:
			obs_metrics.inc_admin_edge("added")
			audit.log_mutation("club_admin.assigned", actor_id=actor.user_id, subject_id=user.id, extra={"club_id": str(club.id)})
		assert updated is not None
		return user_view(updated)

	async def remove_club_admin(
		self,
		actor: Optional["Identity"],
		user_id: UUID,
		club_id: UUID,
	) -> dto.UserResponse:
		actor = _authorize(actor, policies.can_remove_club_admin(actor), "super_admin_required")
		async with self.repo.transaction() as conn:
			user = await self.repo.get_user(user_id, conn=conn)
			if user is None:
				raise NotFoundError("user_not_found", "User not found")
			removed = await self.repo.remove_club_admin(user_id=user.id, club_id=club_id, conn=conn)
			updated = await self.repo.get_user(user.id, conn=conn)
		if removed:
			obs_metrics.inc_admin_edge("removed")
			audit.log_mutation("club_admin.removed", actor_id=actor.user_id, subject_id=user.id, extra={"club_id": str(club_id)})
		assert updated is not None
		return user_view(updated)

	async def list_club_admins(self, actor: Optional["Identity"], club_id: UUID) -> dto.UserListResponse:
		_authorize(actor, policies.can_view_club_admins(actor), "super_admin_required")
		club = await self.repo.get_club(club_id)
		if club is None:
			raise NotFoundError("club_not_found", "Club not found")
		users = await self.repo.list_club_admins(club.id)
		items = [user_view(user) for user in users]
		return dto.UserListResponse(count=len(items), items=items)

	async def list_all_users(self, actor: Optional["Identity"]) -> dto.UserListResponse:
		_authorize(actor, policies.can_list_all_users(actor), "super_admin_required")
		users = await self.repo.list_users()
		items = [user_view(user) for user in users]
		return dto.UserListResponse(count=len(items), items=items)

	async def admin_clubs(self, identity: Optional["Identity"]) -> dto.ClubListResponse:
		identity = _require_identity(identity)
		clubs = await self.repo.list_admin_clubs(identity.user_id)
		items = [dto.ClubSummaryResponse.model_validate(club) for club in clubs]
		return dto.ClubListResponse(count=len(items), items=items)

	# --- Clubs and membership ---------------------------------------------

	async def create_club(self, actor: Optional["Identity"], payload: dto.ClubCreateRequest) -> dto.ClubResponse:
		actor = _authorize(actor, policies.can_manage_clubs(actor), "super_admin_required")
		name = payload.name.strip()
		description = payload.description.strip()
		if not name or not description:
			raise ValidationError("missing_fields", "Club name and description are required")
		club = await self.repo.create_club(
			name=name,
			description=description,
			logo=payload.logo or models.DEFAULT_ASSET,
			gallery=[item for item in payload.gallery if item],
		)
		obs_metrics.inc_club_created()
		audit.log_mutation("club.created", actor_id=actor.user_id, subject_id=club.id)
		return dto.ClubResponse.model_validate(club)

	async def get_club(self, club_id: UUID) -> dto.ClubResponse:
		club = await self.repo.get_club(club_id)
		if club is None:
			raise NotFoundError("club_not_found", "Club not found")
		return dto.ClubResponse.model_validate(club)

	async def join_club(self, identity: Optional["Identity"], club_id: UUID) -> dto.UserResponse:
		identity = _require_identity(identity)
		async with self.repo.transaction() as conn:
			club = await self.repo.get_club(club_id, conn=conn, for_update=True)
			if club is None:
				raise NotFoundError("club_not_found", "Club not found")
			inserted = await self.repo.add_club_member(user_id=identity.user_id, club_id=club.id, conn=conn)
			user = await self.repo.get_user(identity.user_id, conn=conn)
		if user is None:
			raise NotFoundError("user_not_found", "User not found")
		if inserted:
			obs_metrics.inc_membership_change("joined")
		return user_view(user)

	async def leave_club(self, identity: Optional["Identity"], club_id: UUID) -> dto.UserResponse:
		identity = _require_identity(identity)
		async with self.repo.transaction() as conn:
			removed = await self.repo.remove_club_member(user_id=identity.user_id, club_id=club_id, conn=conn)
			user = await self.repo.get_user(identity.user_id, conn=conn)
		if user is None:
			raise NotFoundError("user_not_found", "User not found")
		if removed:
			obs_metrics.inc_membership_change("left")
		return user_view(user)

	# --- Favourites -------------------------------------------------------

	async def add_favorite(self, identity: Optional["Identity"], event_id: UUID) -> dto.UserResponse:
		identity = _require_identity(identity)
		event = await self.repo.get_event(event_id)
		if event is None:
			raise NotFoundError("event_not_found", "Event not found")
		if await self.repo.add_favorite(user_id=identity.user_id, event_id=event.id):
			obs_metrics.inc_favorite_change("added")
		return await self._current_user(identity)

	async def remove_favorite(self, identity: Optional["Identity"], event_id: UUID) -> dto.UserResponse:
		identity = _require_identity(identity)
		if await self.repo.remove_favorite(user_id=identity.user_id, event_id=event_id):
			obs_metrics.inc_favorite_change("removed")
		return await self._current_user(identity)

	async def list_favorites(self, identity: Optional["Identity"]) -> dto.EventListResponse:
		"""Favourited events that still exist, enriched with their club."""
		identity = _require_identity(identity)
		events = await self.discovery.run(
			filters.EventQuery.of(filters.FavoritedByFilter(identity.user_id)),
			kind="favorites",
		)
		items = [dto.EventResponse.model_validate(event) for event in events]
		return dto.EventListResponse(count=len(items), items=items)

	async def _current_user(self, identity: "Identity") -> dto.UserResponse:
		user = await self.repo.get_user(identity.user_id)
		if user is None:
			raise NotFoundError("user_not_found", "User not found")
		return user_view(user)

	# --- Event deletion ---------------------------------------------------

	async def delete_event(self, actor: Optional["Identity"], event_id: UUID) -> dto.EventDeletedResponse:
		actor = _require_identity(actor)
		event = await self.repo.get_event(event_id)
		if event is None:
			raise NotFoundError("event_not_found", "Event not found")
		if not policies.can_delete_event(actor, event):
			raise ForbiddenError("not_club_admin", "You are not allowed to delete this event")
		deleted = await self.repo.delete_event(event.id)
		if deleted is None:
			raise NotFoundError("event_not_found", "Event not found")
		obs_metrics.inc_event_deleted()
		audit.log_mutation("event.deleted", actor_id=actor.user_id, subject_id=event.id, extra={"club_id": str(event.club_id)})
		try:
			await self.repo.remove_event_from_favorites(event.id)
		except Exception:
			obs_metrics.inc_favorite_cleanup_failure()
			_LOG.warning(
				"relationships.favorite_cleanup_failed",
				extra={"event_id": str(event.id)},
				exc_info=True,
			)
		return dto.EventDeletedResponse(id=event.id)


__all__ = ["RelationshipService", "user_view"]
