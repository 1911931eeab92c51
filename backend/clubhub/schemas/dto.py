"""Pydantic schemas for the ClubHub API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from clubhub.domain.models import DEFAULT_ASSET


def _alias(*names: str) -> AliasChoices:
	return AliasChoices(*names)


def split_tags(value: object) -> list[str]:
	"""Accept a comma separated string or a list; trim and drop empty entries."""
	if value is None:
		return []
	if isinstance(value, str):
		items = value.split(",")
	elif isinstance(value, (list, tuple, set)):
		items = [str(item) for item in value]
	else:
		raise ValueError("tags must be a string or a list of strings")
	return [item.strip() for item in items if item.strip()]


# --- Users -----------------------------------------------------------------


class UserResponse(BaseModel):
	id: UUID
	email: str
	is_super_admin: bool
	is_admin: bool
	admin_of: List[UUID] = Field(default_factory=list)
	member_of: List[UUID] = Field(default_factory=list)
	favorited_events: List[UUID] = Field(default_factory=list)

	model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
	success: bool = True
	count: int
	items: List[UserResponse]


class RegisterRequest(BaseModel):
	email: str = Field(..., min_length=3, max_length=320)
	password: str = Field(..., max_length=1024)


class LoginRequest(BaseModel):
	email: str = Field(..., min_length=3, max_length=320)
	password: str = Field(..., max_length=1024)


class VerifiedEmailRequest(BaseModel):
	email: str = Field(..., min_length=3, max_length=320)


class TokenResponse(BaseModel):
	access_token: str
	token_type: str = "bearer"
	user: UserResponse


# --- Clubs -----------------------------------------------------------------


class ClubSummaryResponse(BaseModel):
	id: UUID
	name: str
	description: str
	logo: str = DEFAULT_ASSET

	model_config = ConfigDict(from_attributes=True)


class ClubResponse(ClubSummaryResponse):
	gallery: List[str] = Field(default_factory=list)
	member_count: int = 0
	admins: List[UUID] = Field(default_factory=list)


class ClubDetailResponse(BaseModel):
	success: bool = True
	data: ClubResponse


class ClubListResponse(BaseModel):
	success: bool = True
	count: int
	items: List[ClubSummaryResponse]


class ClubCreateRequest(BaseModel):
	name: str = Field(..., min_length=1, max_length=200)
	description: str = Field(..., min_length=1, max_length=4000)
	logo: str = Field(default=DEFAULT_ASSET, max_length=2048)
	gallery: List[str] = Field(default_factory=list, max_length=50)


# --- Events ----------------------------------------------------------------


class EventCreateRequest(BaseModel):
	name: str = Field(..., min_length=1, max_length=200, validation_alias=_alias("name", "eventName"))
	date: str = Field(..., min_length=1, max_length=64)
	start_time: str = Field(..., min_length=1, max_length=32, validation_alias=_alias("start_time", "startTime"))
	end_time: str = Field(..., min_length=1, max_length=32, validation_alias=_alias("end_time", "endTime"))
	location: str = Field(..., min_length=1, max_length=400)
	description: str = Field(..., min_length=1, max_length=8000)
	club_id: UUID = Field(..., validation_alias=_alias("club_id", "clubId"))
	rsvp_needed: bool = Field(default=False, validation_alias=_alias("rsvp_needed", "RSVPNeeded"))
	tags: List[str] = Field(default_factory=list)
	mu_life_link: Optional[str] = Field(default=None, max_length=2048, validation_alias=_alias("mu_life_link", "muLifeLink"))
	image: str = Field(default=DEFAULT_ASSET, max_length=2048)

	@field_validator("tags", mode="before")
	@classmethod
	def _normalise_tags(cls, value: object) -> list[str]:
		return split_tags(value)


class EventUpdateRequest(BaseModel):
	"""Partial update; only fields present in the body are applied."""

	name: Optional[str] = Field(default=None, min_length=1, max_length=200, validation_alias=_alias("name", "eventName"))
	date: Optional[str] = Field(default=None, max_length=64)
	start_time: Optional[str] = Field(default=None, min_length=1, max_length=32, validation_alias=_alias("start_time", "startTime"))
	end_time: Optional[str] = Field(default=None, min_length=1, max_length=32, validation_alias=_alias("end_time", "endTime"))
	location: Optional[str] = Field(default=None, min_length=1, max_length=400)
	description: Optional[str] = Field(default=None, min_length=1, max_length=8000)
	rsvp_needed: Optional[bool] = Field(default=None, validation_alias=_alias("rsvp_needed", "RSVPNeeded"))
	tags: Optional[List[str]] = None
	mu_life_link: Optional[str] = Field(default=None, max_length=2048, validation_alias=_alias("mu_life_link", "muLifeLink"))
	image: Optional[str] = Field(default=None, max_length=2048)

	@field_validator("tags", mode="before")
	@classmethod
	def _normalise_tags(cls, value: object) -> list[str] | None:
		if value is None:
			return None
		return split_tags(value)


class EventResponse(BaseModel):
	id: UUID
	name: str
	date: Optional[str] = None
	start_time: str
	end_time: str
	rsvp_needed: bool
	location: str
	description: str
	tags: List[str]
	club_id: UUID
	created_by: Optional[UUID] = None
	mu_life_link: Optional[str] = None
	image: str
	delete_at: Optional[datetime] = None
	created_at: datetime
	updated_at: datetime
	club: Optional[ClubSummaryResponse] = None

	model_config = ConfigDict(from_attributes=True)


class EventListResponse(BaseModel):
	success: bool = True
	count: int
	items: List[EventResponse]


class EventDeletedResponse(BaseModel):
	success: bool = True
	id: UUID


# --- Discovery -------------------------------------------------------------


class SearchCriteria(BaseModel):
	"""Query-string criteria for the simple search; every dimension is optional."""

	keyword: Optional[str] = Field(default=None, max_length=200)
	tags: List[str] = Field(default_factory=list)
	club_name: Optional[str] = Field(default=None, max_length=200, validation_alias=_alias("club_name", "clubName"))
	date: Optional[str] = Field(default=None, max_length=64)
	start_time: Optional[str] = Field(default=None, max_length=32, validation_alias=_alias("start_time", "startTime"))
	end_time: Optional[str] = Field(default=None, max_length=32, validation_alias=_alias("end_time", "endTime"))
	location: Optional[str] = Field(default=None, max_length=400)
	rsvp_needed: Optional[bool] = Field(default=None, validation_alias=_alias("rsvp_needed", "RSVPNeeded"))
	limit: Optional[int] = Field(default=None, ge=1, le=500)
	offset: Optional[int] = Field(default=None, ge=0)

	@field_validator("tags", mode="before")
	@classmethod
	def _normalise_tags(cls, value: object) -> list[str]:
		return split_tags(value)

	@field_validator("keyword", "club_name", "date", "start_time", "end_time", "location", mode="before")
	@classmethod
	def _blank_to_none(cls, value: object) -> object:
		if isinstance(value, str) and not value.strip():
			return None
		return value


class AdvancedFilterRequest(BaseModel):
	tags: List[str] = Field(default_factory=list)
	club_ids: List[UUID] = Field(default_factory=list, validation_alias=_alias("club_ids", "clubIds"))
	date_from: Optional[str] = Field(default=None, max_length=64, validation_alias=_alias("date_from", "dateFrom"))
	date_to: Optional[str] = Field(default=None, max_length=64, validation_alias=_alias("date_to", "dateTo"))
	rsvp_needed: Optional[bool] = Field(default=None, validation_alias=_alias("rsvp_needed", "RSVPNeeded"))
	limit: Optional[int] = Field(default=None, ge=1, le=500)
	offset: Optional[int] = Field(default=None, ge=0)

	@field_validator("tags", mode="before")
	@classmethod
	def _normalise_tags(cls, value: object) -> list[str]:
		return split_tags(value)


class TagListResponse(BaseModel):
	success: bool = True
	count: int
	items: List[str]


# --- Admin and favourites --------------------------------------------------


class AssignClubAdminRequest(BaseModel):
	email: str = Field(..., min_length=3, max_length=320)
	club_id: UUID = Field(..., validation_alias=_alias("club_id", "clubId"))


class RemoveClubAdminRequest(BaseModel):
	user_id: UUID = Field(..., validation_alias=_alias("user_id", "userId"))
	club_id: UUID = Field(..., validation_alias=_alias("club_id", "clubId"))


class FavoriteUpdateRequest(BaseModel):
	event_id: UUID = Field(..., validation_alias=_alias("event_id", "eventId"))
	action: Literal["add", "remove"]
