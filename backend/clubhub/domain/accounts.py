"""Account registration and login."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from clubhub.domain.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from clubhub.domain.repo import ClubhubRepository, normalize_email
from clubhub.infra import jwt as jwt_helper
from clubhub.infra import password as password_helper
from clubhub.obs import metrics as obs_metrics
from clubhub.schemas import dto

if TYPE_CHECKING:  # pragma: no cover - typing only
	from clubhub.infra.auth import Identity

_LOG = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def _validate_email(email: str) -> str:
	normalized = normalize_email(email)
	local, sep, domain = normalized.partition("@")
	if not sep or not local or "." not in domain:
		raise ValidationError("invalid_email", "A valid email address is required")
	return normalized


def _token_response(user) -> dto.TokenResponse:
	return dto.TokenResponse(
		access_token=jwt_helper.encode_access({"sub": str(user.id), "email": user.email}),
		user=dto.UserResponse.model_validate(user),
	)


class AccountsService:
	def __init__(self, repository: ClubhubRepository) -> None:
		self.repo = repository

	async def register(self, email: str, password: str) -> dto.TokenResponse:
		normalized = _validate_email(email)
		if len(password or "") < MIN_PASSWORD_LENGTH:
			raise ValidationError("weak_password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
		if await self.repo.get_user_by_email(normalized) is not None:
			raise ConflictError("email_in_use", "Email already in use")
		user = await self.repo.create_user(
			email=normalized,
			password_hash=password_helper.hash_password(password),
		)
		obs_metrics.inc_identity_register()
		_LOG.info("accounts.registered", extra={"user_id": str(user.id)})
		return _token_response(user)

	async def login(self, email: str, password: str) -> dto.TokenResponse:
		user = await self.repo.get_user_by_email(email)
		if user is None or not user.password_hash:
			obs_metrics.inc_auth_reject("invalid_credentials")
			raise UnauthorizedError("invalid_credentials", "Invalid email or password")
		if not password_helper.verify_password(user.password_hash, password):
			obs_metrics.inc_auth_reject("invalid_credentials")
			raise UnauthorizedError("invalid_credentials", "Invalid email or password")
		obs_metrics.inc_identity_login("password")
		return _token_response(user)

	async def login_with_verified_email(self, email: str) -> dto.TokenResponse:
		"""Find or create the account for an email an external provider has verified."""
		normalized = _validate_email(email)
		user = await self.repo.get_user_by_email(normalized)
		if user is None:
			try:
				user = await self.repo.create_user(email=normalized, password_hash=None)
				obs_metrics.inc_identity_register()
			except ConflictError:
				user = await self.repo.get_user_by_email(normalized)
				if user is None:
					raise
		obs_metrics.inc_identity_login("oauth")
		return _token_response(user)

	async def me(self, identity: Optional["Identity"]) -> dto.UserResponse:
		if identity is None:
			raise UnauthorizedError()
		user = await self.repo.get_user(identity.user_id)
		if user is None:
			raise NotFoundError("user_not_found", "User not found")
		return dto.UserResponse.model_validate(user)


__all__ = ["AccountsService", "MIN_PASSWORD_LENGTH"]
