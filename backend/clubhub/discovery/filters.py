"""Typed filters for event discovery.

Each filter kind is a frozen dataclass; an ``EventQuery`` collects them
conjunctively together with optional paging. The SQL rendering lives in
``clubhub.discovery.builders``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Union
from uuid import UUID

from clubhub.schemas import dto

TagMatch = Literal["any", "all"]


@dataclass(frozen=True, slots=True)
class KeywordFilter:
	"""Case-insensitive substring over event name, description or club name."""

	text: str


@dataclass(frozen=True, slots=True)
class TagsFilter:
	tags: tuple[str, ...]
	match: TagMatch = "any"


@dataclass(frozen=True, slots=True)
class ClubNameFilter:
	text: str


@dataclass(frozen=True, slots=True)
class ClubIdsFilter:
	club_ids: tuple[UUID, ...]


@dataclass(frozen=True, slots=True)
class DateEqualsFilter:
	value: str


@dataclass(frozen=True, slots=True)
class DateRangeFilter:
	"""Inclusive range compared as raw strings; either bound may be open."""

	date_from: Optional[str] = None
	date_to: Optional[str] = None


@dataclass(frozen=True, slots=True)
class StartTimeFromFilter:
	value: str


@dataclass(frozen=True, slots=True)
class EndTimeUntilFilter:
	value: str


@dataclass(frozen=True, slots=True)
class LocationFilter:
	text: str


@dataclass(frozen=True, slots=True)
class RsvpFilter:
	value: bool


@dataclass(frozen=True, slots=True)
class EventIdFilter:
	event_id: UUID


@dataclass(frozen=True, slots=True)
class FavoritedByFilter:
	user_id: UUID


EventFilter = Union[
	KeywordFilter,
	TagsFilter,
	ClubNameFilter,
	ClubIdsFilter,
	DateEqualsFilter,
	DateRangeFilter,
	StartTimeFromFilter,
	EndTimeUntilFilter,
	LocationFilter,
	RsvpFilter,
	EventIdFilter,
	FavoritedByFilter,
]


@dataclass(frozen=True, slots=True)
class EventQuery:
	filters: tuple[EventFilter, ...] = field(default_factory=tuple)
	limit: Optional[int] = None
	offset: Optional[int] = None

	@classmethod
	def of(cls, *filters: EventFilter, limit: int | None = None, offset: int | None = None) -> "EventQuery":
		return cls(filters=tuple(filters), limit=limit, offset=offset)


def search_query(criteria: dto.SearchCriteria) -> EventQuery:
	"""Translate simple-search criteria; absent dimensions add no filter."""
	filters: list[EventFilter] = []
	if criteria.keyword:
		filters.append(KeywordFilter(criteria.keyword))
	if criteria.tags:
		filters.append(TagsFilter(tuple(criteria.tags), match="any"))
	if criteria.club_name:
		filters.append(ClubNameFilter(criteria.club_name))
	if criteria.date:
		filters.append(DateEqualsFilter(criteria.date))
	if criteria.start_time:
		filters.append(StartTimeFromFilter(criteria.start_time))
	if criteria.end_time:
		filters.append(EndTimeUntilFilter(criteria.end_time))
	if criteria.location:
		filters.append(LocationFilter(criteria.location))
	if criteria.rsvp_needed is not None:
		filters.append(RsvpFilter(criteria.rsvp_needed))
	return EventQuery(filters=tuple(filters), limit=criteria.limit, offset=criteria.offset)


def advanced_query(request: dto.AdvancedFilterRequest) -> EventQuery:
	filters: list[EventFilter] = []
	if request.tags:
		filters.append(TagsFilter(tuple(request.tags), match="all"))
	if request.club_ids:
		filters.append(ClubIdsFilter(tuple(request.club_ids)))
	if request.date_from or request.date_to:
		filters.append(DateRangeFilter(date_from=request.date_from or None, date_to=request.date_to or None))
	if request.rsvp_needed is not None:
		filters.append(RsvpFilter(request.rsvp_needed))
	return EventQuery(filters=tuple(filters), limit=request.limit, offset=request.offset)


__all__ = [
	"ClubIdsFilter",
	"ClubNameFilter",
	"DateEqualsFilter",
	"DateRangeFilter",
	"EndTimeUntilFilter",
	"EventFilter",
	"EventIdFilter",
	"EventQuery",
	"FavoritedByFilter",
	"KeywordFilter",
	"LocationFilter",
	"RsvpFilter",
	"StartTimeFromFilter",
	"TagsFilter",
	"advanced_query",
	"search_query",
]
