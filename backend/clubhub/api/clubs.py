"""Club endpoints: creation, admin listing and membership."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from clubhub.api._errors import to_http_error
from clubhub.api.deps import ServiceContainer, get_services
from clubhub.infra.auth import Identity, get_current_identity
from clubhub.schemas import dto

router = APIRouter(prefix="/clubs", tags=["clubs"])


@router.post("", response_model=dto.ClubResponse, status_code=201)
async def create_club_endpoint(
	payload: dto.ClubCreateRequest,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.ClubResponse:
	try:
		return await services.relationships.create_club(identity, payload)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/admin", response_model=dto.ClubListResponse)
async def admin_clubs_endpoint(
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.ClubListResponse:
	try:
		return await services.relationships.admin_clubs(identity)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/{club_id}/join", response_model=dto.UserResponse)
async def join_club_endpoint(
	club_id: UUID,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserResponse:
	try:
		return await services.relationships.join_club(identity, club_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/{club_id}/leave", response_model=dto.UserResponse)
async def leave_club_endpoint(
	club_id: UUID,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserResponse:
	try:
		return await services.relationships.leave_club(identity, club_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
