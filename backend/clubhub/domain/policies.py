"""Access control decisions.

Every function here is pure: it inspects the caller identity (and, for the
per-event rules, the target) and returns ``True`` for ALLOW and ``False`` for
DENY. Services decide which exception to raise on DENY.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol
from uuid import UUID

if TYPE_CHECKING:  # pragma: no cover - typing only
	from clubhub.infra.auth import Identity


class _ClubScoped(Protocol):
	club_id: UUID


def _administers(identity: Optional["Identity"], club_id: UUID) -> bool:
	if identity is None:
		return False
	if identity.is_super_admin:
		return True
	return identity.is_admin and club_id in identity.admin_of


def _is_super_admin(identity: Optional["Identity"]) -> bool:
	return identity is not None and identity.is_super_admin


def can_edit_event(identity: Optional["Identity"], event: _ClubScoped) -> bool:
	return _administers(identity, event.club_id)


def can_delete_event(identity: Optional["Identity"], event: _ClubScoped) -> bool:
	return _administers(identity, event.club_id)


def can_publish_event(identity: Optional["Identity"], club_id: UUID) -> bool:
	"""Creating an event follows the same rule as editing one of that club."""
	return _administers(identity, club_id)


def can_assign_club_admin(identity: Optional["Identity"]) -> bool:
	return _is_super_admin(identity)


def can_remove_club_admin(identity: Optional["Identity"]) -> bool:
	return _is_super_admin(identity)


def can_list_all_users(identity: Optional["Identity"]) -> bool:
	return _is_super_admin(identity)


def can_view_club_admins(identity: Optional["Identity"]) -> bool:
	return _is_super_admin(identity)


def can_manage_clubs(identity: Optional["Identity"]) -> bool:
	return _is_super_admin(identity)


__all__ = [
	"can_assign_club_admin",
	"can_delete_event",
	"can_edit_event",
	"can_list_all_users",
	"can_manage_clubs",
	"can_publish_event",
	"can_remove_club_admin",
	"can_view_club_admins",
]
