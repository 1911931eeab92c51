"""Service wiring shared by the API routers.

The container is assembled once in the application lifespan around the
asyncpg pool and stored on ``app.state.services``.
"""

from __future__ import annotations

from dataclasses import dataclass

import asyncpg
from fastapi import HTTPException, Request, status

from clubhub.discovery.service import DiscoveryService
from clubhub.domain.accounts import AccountsService
from clubhub.domain.events_service import EventsService
from clubhub.domain.relationships import RelationshipService
from clubhub.domain.repo import ClubhubRepository


@dataclass(slots=True)
class ServiceContainer:
	repository: ClubhubRepository
	discovery: DiscoveryService
	events: EventsService
	relationships: RelationshipService
	accounts: AccountsService


def build_services(pool: asyncpg.pool.Pool) -> ServiceContainer:
	repository = ClubhubRepository(pool)
	discovery = DiscoveryService(repository)
	return ServiceContainer(
		repository=repository,
		discovery=discovery,
		events=EventsService(repository, discovery),
		relationships=RelationshipService(repository, discovery),
		accounts=AccountsService(repository),
	)


def get_services(request: Request) -> ServiceContainer:
	services = getattr(request.app.state, "services", None)
	if services is None:
		raise HTTPException(
			status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
			detail={"kind": "unavailable", "message": "Service is starting"},
		)
	return services


def get_repository(request: Request) -> ClubhubRepository:
	return get_services(request).repository


__all__ = ["ServiceContainer", "build_services", "get_repository", "get_services"]
