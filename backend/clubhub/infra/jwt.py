"""Access tokens for ClubHub sessions.

Tokens are HS256 JWTs signed with ``SECRET_KEY``. ``sub`` holds the user id;
roles are never embedded, they are re-read from the store on every request so
that an admin edge removal takes effect immediately.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from clubhub.settings import settings

ISSUER = "clubhub-api"
AUDIENCE = "clubhub-fe"
TOKEN_TYPE = "access"

_REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub"]


def encode_access(payload: dict[str, object], *, ttl_minutes: int | None = None) -> str:
	issued_at = int(time.time())
	lifetime = settings.access_ttl_minutes if ttl_minutes is None else ttl_minutes
	claims: Dict[str, Any] = {
		"iss": ISSUER,
		"aud": AUDIENCE,
		"typ": TOKEN_TYPE,
		"iat": issued_at,
		"exp": issued_at + lifetime * 60,
	}
	claims.update(payload)
	return jwt.encode(claims, settings.secret_key, algorithm="HS256")


def decode_access(token: str) -> dict[str, object]:
	"""Validate signature, expiry, issuer and audience.

	Raises ``jwt.InvalidTokenError`` (or a subclass) when the token is unusable.
	"""
	claims = jwt.decode(
		token,
		settings.secret_key,
		algorithms=["HS256"],
		audience=AUDIENCE,
		issuer=ISSUER,
		leeway=5,
		options={"require": _REQUIRED_CLAIMS},
	)
	if claims.get("typ", TOKEN_TYPE) != TOKEN_TYPE:
		raise InvalidTokenError("wrong_token_type")
	if not str(claims.get("sub") or "").strip():
		raise InvalidTokenError("missing_claim:sub")
	return claims  # type: ignore[return-value]


__all__ = ["AUDIENCE", "ISSUER", "TOKEN_TYPE", "decode_access", "encode_access"]
