"""Domain exceptions shared by the ClubHub services."""

from __future__ import annotations

from fastapi import status

if hasattr(status, "HTTP_422_UNPROCESSABLE_CONTENT"):
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_CONTENT
else:  # pragma: no cover - older Starlette builds
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_ENTITY


class ClubhubError(Exception):
	"""Base class for domain errors.

	``detail`` is the machine-readable kind, ``message`` the human text.
	"""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "clubhub_error"
	message: str = "Request could not be completed"

	def __init__(self, detail: str | None = None, message: str | None = None) -> None:
		super().__init__(message or detail or self.message)
		if detail:
			self.detail = detail
		if message:
			self.message = message

	def to_payload(self) -> dict[str, str]:
		return {"kind": self.detail, "message": self.message}


class NotFoundError(ClubhubError):
	"""Raised when a referenced user, club or event does not resolve."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"
	message = "Resource not found"


class UnauthorizedError(ClubhubError):
	"""Raised when no caller identity is present."""

	status_code = status.HTTP_401_UNAUTHORIZED
	detail = "unauthorized"
	message = "Authentication required"


class ForbiddenError(ClubhubError):
	"""Raised when an identity is present but the policy decision is DENY."""

	status_code = status.HTTP_403_FORBIDDEN
	detail = "forbidden"
	message = "You are not allowed to perform this action"


class ConflictError(ClubhubError):
	"""Raised for duplicate unique keys."""

	status_code = status.HTTP_409_CONFLICT
	detail = "conflict"
	message = "Conflicting resource state"


class ValidationError(ClubhubError):
	"""Raised for validation errors not covered by FastAPI schema validation."""

	status_code = _HTTP_422
	detail = "validation_error"
	message = "Invalid request"
