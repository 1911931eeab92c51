"""Caller identity resolution for FastAPI endpoints.

A bearer JWT (HS256, see ``clubhub.infra.jwt``) names the user in ``sub``; the
user row and its admin edges are then loaded from the store so that policy
decisions always see the current relations. In development only, an
``X-User-Id`` header is accepted in place of a token.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clubhub.api.deps import get_repository
from clubhub.domain import models
from clubhub.domain.repo import ClubhubRepository
from clubhub.infra import jwt as jwt_helper
from clubhub.obs import logging as obs_logging
from clubhub.obs import metrics as obs_metrics
from clubhub.settings import settings


@dataclass(slots=True)
class Identity:
	user_id: UUID
	email: str
	is_super_admin: bool = False
	admin_of: frozenset[UUID] = field(default_factory=frozenset)

	@property
	def is_admin(self) -> bool:
		return len(self.admin_of) > 0

	@classmethod
	def from_user(cls, user: models.User) -> "Identity":
		return cls(
			user_id=user.id,
			email=user.email,
			is_super_admin=user.is_super_admin,
			admin_of=frozenset(user.admin_of),
		)


_bearer_scheme = HTTPBearer(auto_error=False)


def _parse_user_id(raw: object) -> UUID | None:
	try:
		return UUID(str(raw).strip())
	except (TypeError, ValueError):
		return None


async def _load_identity(repository: ClubhubRepository, user_id: UUID | None) -> Identity | None:
	if user_id is None:
		return None
	user = await repository.get_user(user_id)
	if user is None:
		return None
	obs_logging.bind_context(user_id=str(user.id))
	return Identity.from_user(user)


async def get_optional_identity(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
	repository: ClubhubRepository = Depends(get_repository),
) -> Identity | None:
	"""Resolve the caller, returning None when no valid identity is presented."""
	if credentials and credentials.scheme.lower() == "bearer":
		try:
			payload = jwt_helper.decode_access(credentials.credentials)
		except Exception:
			obs_metrics.inc_auth_reject("invalid_token")
			return None
		return await _load_identity(repository, _parse_user_id(payload.get("sub")))

	if settings.is_dev() and x_user_id:
		return await _load_identity(repository, _parse_user_id(x_user_id))

	return None


async def get_current_identity(
	identity: Identity | None = Depends(get_optional_identity),
) -> Identity:
	if identity is None:
		raise HTTPException(
			status_code=status.HTTP_401_UNAUTHORIZED,
			detail={"kind": "unauthorized", "message": "Authentication required"},
		)
	return identity


__all__ = [
	"Identity",
	"get_current_identity",
	"get_optional_identity",
]
