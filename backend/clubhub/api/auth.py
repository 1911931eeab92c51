"""Authentication endpoints: password accounts and verified-email sign in."""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from clubhub.api._errors import to_http_error
from clubhub.api.deps import ServiceContainer, get_services
from clubhub.infra.auth import Identity, get_current_identity
from clubhub.schemas import dto
from clubhub.settings import settings

router = APIRouter(prefix="/auth", tags=["auth"])

CALLBACK_TOKEN_HEADER = "X-Callback-Token"


async def require_callback_token(
	x_callback_token: Optional[str] = Header(default=None, alias=CALLBACK_TOKEN_HEADER),
) -> None:
	"""Only the identity-provider callback may vouch for an email."""
	expected = settings.oauth_callback_token
	if not expected:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail={"kind": "forbidden", "message": "callback_token_not_configured"})
	if x_callback_token is None or not secrets.compare_digest(x_callback_token, expected):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail={"kind": "forbidden", "message": "forbidden"})


@router.post("/register", response_model=dto.TokenResponse, status_code=201)
async def register_endpoint(
	payload: dto.RegisterRequest,
	services: ServiceContainer = Depends(get_services),
) -> dto.TokenResponse:
	try:
		return await services.accounts.register(payload.email, payload.password)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/login", response_model=dto.TokenResponse)
async def login_endpoint(
	payload: dto.LoginRequest,
	services: ServiceContainer = Depends(get_services),
) -> dto.TokenResponse:
	try:
		return await services.accounts.login(payload.email, payload.password)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.post("/oauth/verified", response_model=dto.TokenResponse)
async def verified_email_endpoint(
	payload: dto.VerifiedEmailRequest,
	_: None = Depends(require_callback_token),
	services: ServiceContainer = Depends(get_services),
) -> dto.TokenResponse:
	"""Called by the identity-provider callback once it has verified the email."""
	try:
		return await services.accounts.login_with_verified_email(payload.email)
	except Exception as exc:
		raise to_http_error(exc) from exc


@router.get("/me", response_model=dto.UserResponse)
async def me_endpoint(
	identity: Identity = Depends(get_current_identity),
	services: ServiceContainer = Depends(get_services),
) -> dto.UserResponse:
	try:
		return await services.accounts.me(identity)
	except Exception as exc:
		raise to_http_error(exc) from exc
