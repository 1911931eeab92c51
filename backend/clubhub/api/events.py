"""Events API endpoints."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from clubhub.api._errors import to_http_error
from clubhub.api.deps import ServiceContainer, get_services
from clubhub.infra.auth import Identity, get_current_identity
from clubhub.schemas import dto

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=dto.EventListResponse)
async def list_events_endpoint(
	limit: Optional[int] = Query(default=None, ge=1, le=500),
	offset: Optional[int] = Query(default=None, ge=0),
	services: ServiceContainer = Depends(get_services),
) -> dto.EventListResponse:
	try:
		return await services.discovery.list_events(limit=limit, offset=offset)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/{event_id}", response_model=dto.EventResponse)
async def get_event_endpoint(
	event_id: UUID,
	services: ServiceContainer = Depends(get_services),
) -> dto.EventResponse:
	try:
		return await services.events.get_event(event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("", response_model=dto.EventResponse, status_code=201)
async def create_event_endpoint(
	payload: dto.EventCreateRequest,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.EventResponse:
	try:
		return await services.events.create_event(identity, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.put("/{event_id}", response_model=dto.EventResponse)
async def update_event_endpoint(
	event_id: UUID,
	payload: dto.EventUpdateRequest,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.EventResponse:
	try:
		return await services.events.update_event(identity, event_id, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.delete("/{event_id}", response_model=dto.EventDeletedResponse)
async def delete_event_endpoint(
	event_id: UUID,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.EventDeletedResponse:
	try:
		return await services.relationships.delete_event(identity, event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
