"""Super-admin endpoints for club admin assignment and user listing."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from clubhub.api._errors import to_http_error
from clubhub.api.deps import ServiceContainer, get_services
from clubhub.infra.auth import Identity, get_current_identity
from clubhub.schemas import dto

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/assign-club-admin", response_model=dto.UserResponse)
async def assign_club_admin_endpoint(
	payload: dto.AssignClubAdminRequest,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserResponse:
	try:
		return await services.relationships.assign_club_admin(identity, payload.email, payload.club_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/remove-club-admin", response_model=dto.UserResponse)
async def remove_club_admin_endpoint(
	payload: dto.RemoveClubAdminRequest,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserResponse:
	try:
		return await services.relationships.remove_club_admin(identity, payload.user_id, payload.club_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/club-admins/{club_id}", response_model=dto.UserListResponse)
async def club_admins_endpoint(
	club_id: UUID,
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserListResponse:
	try:
		return await services.relationships.list_club_admins(identity, club_id)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/users", response_model=dto.UserListResponse)
async def list_users_endpoint(
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserListResponse:
	try:
		return await services.relationships.list_all_users(identity)
	except Exception as exc:
		raise to_http_error(exc) from exc
