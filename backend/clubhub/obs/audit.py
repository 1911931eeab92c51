"""Audit trail for mutations of the relation store."""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

from clubhub.obs.logging import get_logger

audit_logger = get_logger("clubhub.audit")


def log_mutation(
	action: str,
	*,
	actor_id: UUID | str | None,
	subject_id: UUID | str | None = None,
	extra: Optional[Mapping[str, Any]] = None,
) -> None:
	fields: dict[str, Any] = {
		"action": action,
		"actor_id": str(actor_id) if actor_id else None,
		"subject_id": str(subject_id) if subject_id else None,
	}
	if extra:
		fields.update(extra)
	filtered = {key: value for key, value in fields.items() if value is not None}
	audit_logger.info("audit", extra=filtered)
