"""Event service layer: create, read and partial update with expiry bookkeeping."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from clubhub.discovery import filters
from clubhub.discovery.service import DiscoveryService
from clubhub.domain import lifecycle, models, policies
from clubhub.domain.exceptions import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from clubhub.domain.repo import ClubhubRepository
from clubhub.obs import audit
from clubhub.obs import metrics as obs_metrics
from clubhub.schemas import dto

if TYPE_CHECKING:  # pragma: no cover - typing only
	from clubhub.infra.auth import Identity

_REQUIRED_TEXT_FIELDS = ("name", "date", "start_time", "end_time", "location", "description")
_NOT_NULLABLE = ("name", "start_time", "end_time", "location", "description", "rsvp_needed", "tags", "image")


def apply_expiry(changes: dict[str, Any]) -> dict[str, Any]:
	"""Recompute ``delete_at`` when a patch touches ``date``.

	An explicit ``None`` or blank date clears both fields; an unreadable date is
	stored as given and leaves the event without an expiry.
	"""
	if "date" not in changes:
		return changes
	patched = dict(changes)
	value = patched["date"]
	if value is None or (isinstance(value, str) and not value.strip()):
		patched["date"] = None
		patched["delete_at"] = None
		return patched
	patched["delete_at"] = lifecycle.compute_expiry(value)
	return patched


class EventsService:
	"""Business logic for event CRUD."""

	def __init__(self, repository: ClubhubRepository, discovery: DiscoveryService | None = None) -> None:
		self.repo = repository
		self.discovery = discovery or DiscoveryService(repository)

	async def create_event(self, identity: Optional["Identity"], payload: dto.EventCreateRequest) -> dto.EventResponse:
		if identity is None:
			raise UnauthorizedError()
		missing = [name for name in _REQUIRED_TEXT_FIELDS if not str(getattr(payload, name) or "").strip()]
		if missing:
			raise ValidationError("missing_fields", f"Missing required fields: {', '.join(missing)}")
		if not policies.can_publish_event(identity, payload.club_id):
			raise ForbiddenError("not_club_admin", "You are not allowed to publish events for this club")
		club = await self.repo.get_club(payload.club_id)
		if club is None:
			raise NotFoundError("club_not_found", "Club not found")
		fields = payload.model_dump(exclude={"club_id"})
		fields["delete_at"] = lifecycle.compute_expiry(payload.date)
		event = await self.repo.create_event(club_id=club.id, created_by=identity.user_id, fields=fields)
		obs_metrics.inc_event_created()
		audit.log_mutation("event.created", actor_id=identity.user_id, subject_id=event.id, extra={"club_id": str(club.id)})
		return self._enriched_response(event, club.summary())

	async def get_event(self, event_id: UUID) -> dto.EventResponse:
		events = await self.discovery.run(filters.EventQuery.of(filters.EventIdFilter(event_id)), kind="event")
		if not events:
			raise NotFoundError("event_not_found", "Event not found")
		return dto.EventResponse.model_validate(events[0])

	async def update_event(
		self,
		identity: Optional["Identity"],
		event_id: UUID,
		payload: dto.EventUpdateRequest,
	) -> dto.EventResponse:
		if identity is None:
			raise UnauthorizedError()
		changes = payload.model_dump(exclude_unset=True)
		for name in _NOT_NULLABLE:
			if name in changes and changes[name] is None:
				raise ValidationError("invalid_field", f"{name} cannot be cleared")
		async with self.repo.transaction() as conn:
			event = await self.repo.get_event(event_id, conn=conn, for_update=True)
			if event is None:
				raise NotFoundError("event_not_found", "Event not found")
			if not policies.can_edit_event(identity, event):
				raise ForbiddenError("not_club_admin", "You are not allowed to edit this event")
			updated = await self.repo.update_event(event.id, payload=apply_expiry(changes), conn=conn)
		if updated is None:
			raise NotFoundError("event_not_found", "Event not found")
		obs_metrics.inc_event_updated()
		audit.log_mutation("event.updated", actor_id=identity.user_id, subject_id=event.id, extra={"fields": sorted(changes)})
		return await self.get_event(updated.id)

	@staticmethod
	def _enriched_response(event: models.Event, club: models.ClubSummary | None) -> dto.EventResponse:
		enriched = models.EnrichedEvent.model_validate({**event.model_dump(), "club": club})
		return dto.EventResponse.model_validate(enriched)


__all__ = ["EventsService", "apply_expiry"]
