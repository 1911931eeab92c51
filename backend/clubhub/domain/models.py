"""Domain models for users, clubs and events."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ASSET = "ADD LATER"


class User(BaseModel):
	"""A registered user with the club relations projected onto it."""

	id: UUID
	email: str
	password_hash: Optional[str] = Field(default=None, exclude=True, repr=False)
	is_super_admin: bool = False
	admin_of: list[UUID] = Field(default_factory=list)
	member_of: list[UUID] = Field(default_factory=list)
	favorited_events: list[UUID] = Field(default_factory=list)
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)

	@property
	def is_admin(self) -> bool:
		return len(self.admin_of) > 0


class ClubSummary(BaseModel):
	"""Minimal club projection used for listings and event enrichment."""

	id: UUID
	name: str
	description: str
	logo: str = DEFAULT_ASSET

	model_config = ConfigDict(from_attributes=True)


class Club(BaseModel):
	"""Represents a campus club."""

	id: UUID
	name: str
	description: str
	logo: str = DEFAULT_ASSET
	gallery: list[str] = Field(default_factory=list)
	member_count: int = 0
	admins: list[UUID] = Field(default_factory=list)
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)

	def summary(self) -> ClubSummary:
		return ClubSummary(id=self.id, name=self.name, description=self.description, logo=self.logo)


class Event(BaseModel):
	"""Represents an event published by a club."""

	id: UUID
	name: str
	date: Optional[str] = None
	start_time: str
	end_time: str
	rsvp_needed: bool = False
	location: str
	description: str
	tags: list[str] = Field(default_factory=list)
	club_id: UUID
	created_by: Optional[UUID] = None
	mu_life_link: Optional[str] = None
	image: str = DEFAULT_ASSET
	delete_at: Optional[datetime] = None
	created_at: datetime
	updated_at: datetime

	model_config = ConfigDict(from_attributes=True)


class EnrichedEvent(Event):
	"""Event joined with its organizing club; ``club`` is None when the reference dangles."""

	club: Optional[ClubSummary] = None
