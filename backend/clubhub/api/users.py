"""Endpoints for the caller's favourites."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from clubhub.api._errors import to_http_error
from clubhub.api.deps import ServiceContainer, get_services
from clubhub.infra.auth import Identity, get_current_identity
from clubhub.schemas import dto

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me/favorites", response_model=dto.EventListResponse)
async def list_favorites_endpoint(
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.EventListResponse:
	try:
		return await services.relationships.list_favorites(identity)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/me/favorites", response_model=dto.UserResponse)
async def update_favorites_endpoint(
	payload: dto.FavoriteUpdateRequest,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserResponse:
	try:
		if payload.action == "add":
			return await services.relationships.add_favorite(identity, payload.event_id)
		return await services.relationships.remove_favorite(identity, payload.event_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
