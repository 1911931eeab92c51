"""Service layer for event discovery."""

from __future__ import annotations

import logging
import time
from uuid import UUID

from clubhub.discovery import builders, filters
from clubhub.domain import models
from clubhub.domain.repo import ClubhubRepository
from clubhub.obs import metrics as obs_metrics
from clubhub.schemas import dto

_LOG = logging.getLogger(__name__)


def to_event_list(events: list[models.EnrichedEvent]) -> dto.EventListResponse:
	items = [dto.EventResponse.model_validate(event) for event in events]
	return dto.EventListResponse(count=len(items), items=items)


class DiscoveryService:
	"""Translate discovery criteria into one SQL query and execute it."""

	def __init__(self, repository: ClubhubRepository) -> None:
		self._repo = repository

	async def run(self, query: filters.EventQuery, *, kind: str = "events") -> list[models.EnrichedEvent]:
		sql, params = builders.build_event_query(query)
		obs_metrics.inc_search_query(kind)
		started = time.perf_counter()
		events = await self._repo.fetch_enriched_events(sql, params)
		obs_metrics.observe_search_latency(kind, time.perf_counter() - started)
		_LOG.debug("discovery.query", extra={"kind": kind, "filters": len(query.filters), "hits": len(events)})
		return events

	async def search(self, criteria: dto.SearchCriteria) -> dto.EventListResponse:
		events = await self.run(filters.search_query(criteria), kind="search")
		return to_event_list(events)

	async def advanced_filter(self, request: dto.AdvancedFilterRequest) -> dto.EventListResponse:
		events = await self.run(filters.advanced_query(request), kind="advanced")
		return to_event_list(events)

	async def list_events(self, *, limit: int | None = None, offset: int | None = None) -> dto.EventListResponse:
		events = await self.run(filters.EventQuery(limit=limit, offset=offset), kind="list")
		return to_event_list(events)

	async def events_for_club(self, club_id: UUID) -> dto.EventListResponse:
		events = await self.run(filters.EventQuery.of(filters.ClubIdsFilter((club_id,))), kind="club")
		return to_event_list(events)

	async def list_tags(self) -> dto.TagListResponse:
		obs_metrics.inc_search_query("tags")
		tags = await self._repo.list_tags()
		return dto.TagListResponse(count=len(tags), items=tags)

	async def list_clubs(self) -> dto.ClubListResponse:
		obs_metrics.inc_search_query("clubs")
		clubs = await self._repo.list_club_summaries()
		items = [dto.ClubSummaryResponse.model_validate(club) for club in clubs]
		return dto.ClubListResponse(count=len(items), items=items)


__all__ = ["DiscoveryService", "to_event_list"]
