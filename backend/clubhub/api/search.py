"""Discovery endpoints: search, advanced filter, tags and club listings."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError

from clubhub.api._errors import to_http_error
from clubhub.api.deps import ServiceContainer, get_services
from clubhub.domain.exceptions import ValidationError
from clubhub.schemas import dto

router = APIRouter(prefix="/search", tags=["search"])


def _criteria(
	keyword: Optional[str] = None,
	tags: Optional[str] = None,
	club_name: Optional[str] = Query(default=None, alias="clubName"),
	date: Optional[str] = None,
	start_time: Optional[str] = Query(default=None, alias="startTime"),
	end_time: Optional[str] = Query(default=None, alias="endTime"),
	location: Optional[str] = None,
	rsvp_needed: Optional[str] = Query(default=None, alias="RSVPNeeded"),
	limit: Optional[int] = None,
	offset: Optional[int] = None,
) -> dto.SearchCriteria:
	raw = {
		"keyword": keyword,
		"tags": tags,
		"clubName": club_name,
		"date": date,
		"startTime": start_time,
		"endTime": end_time,
		"location": location,
		"RSVPNeeded": rsvp_needed,
		"limit": limit,
		"offset": offset,
	}
	try:
		return dto.SearchCriteria.model_validate({key: value for key, value in raw.items() if value is not None})
	except PydanticValidationError as exc:
		raise to_http_error(ValidationError("invalid_criteria", str(exc.errors()[0].get("msg", "Invalid criteria")))) from exc


@router.get("", response_model=dto.EventListResponse)
async def search_endpoint(
	criteria: dto.SearchCriteria = Depends(_criteria),
	services: ServiceContainer = Depends(get_services),
) -> dto.EventListResponse:
	try:
		return await services.discovery.search(criteria)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/advanced", response_model=dto.EventListResponse)
async def advanced_filter_endpoint(
	payload: dto.AdvancedFilterRequest,
	services: ServiceContainer = Depends(get_services),
) -> dto.EventListResponse:
	try:
		return await services.discovery.advanced_filter(payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/tags", response_model=dto.TagListResponse)
async def list_tags_endpoint(services: ServiceContainer = Depends(get_services)) -> dto.TagListResponse:
	try:
		return await services.discovery.list_tags()
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/clubs", response_model=dto.ClubListResponse)
async def list_clubs_endpoint(services: ServiceContainer = Depends(get_services)) -> dto.ClubListResponse:
	try:
		return await services.discovery.list_clubs()
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/clubs/{club_id}", response_model=dto.ClubDetailResponse)
async def get_club_endpoint(
	club_id: UUID,
	services: ServiceContainer = Depends(get_services),
) -> dto.ClubDetailResponse:
	try:
		return dto.ClubDetailResponse(data=await services.relationships.get_club(club_id))
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/events/{club_id}", response_model=dto.EventListResponse)
async def events_for_club_endpoint(
	club_id: UUID,
	services: ServiceContainer = Depends(get_services),
) -> dto.EventListResponse:
	try:
		return await services.discovery.events_for_club(club_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
