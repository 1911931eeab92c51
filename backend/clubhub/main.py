"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clubhub.api import admin, auth, clubs, events, ops, search, users
from clubhub.api.deps import build_services
from clubhub.api.errors import install_error_handlers
from clubhub.infra import postgres
from clubhub.infra.scheduler import MaintenanceScheduler
from clubhub.maintenance import expiry
from clubhub.obs import init as obs_init
from clubhub.settings import settings

_LOG = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
	pool = await postgres.init_pool()
	services = build_services(pool)
	app.state.services = services
	scheduler: MaintenanceScheduler | None = None
	if settings.expiry_sweeper_enabled:

		async def _sweep() -> None:
			await expiry.purge_expired_events(services.repository)

		scheduler = MaintenanceScheduler()
		scheduler.start()
		scheduler.schedule_every(
			"event-expiry-sweep",
			_sweep,
			minutes=settings.expiry_sweep_interval_minutes,
		)
		app.state.maintenance_scheduler = scheduler
		_LOG.info("maintenance.scheduler_started", extra={"jobs": scheduler.job_ids()})
	try:
		yield
	finally:
		if scheduler is not None:
			scheduler.shutdown()
		app.state.services = None
		app.state.maintenance_scheduler = None
		await postgres.close_pool()


def _allowed_origins() -> list[str]:
	allow_origins = list(settings.cors_allow_origins)
	if not allow_origins:
		allow_origins = ["http://localhost:5173", "http://localhost:3000"] if settings.is_dev() else []
	# Starlette disallows wildcard '*' with allow_credentials=True.
	if "*" in allow_origins:
		allow_origins = ["http://localhost:5173", "http://127.0.0.1:5173"] if settings.is_dev() else []
	return allow_origins


def create_app() -> FastAPI:
	app = FastAPI(title="ClubHub API", lifespan=lifespan)
	install_error_handlers(app)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=_allowed_origins(),
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	obs_init(app)

	api = APIRouter(prefix=API_PREFIX)
	api.include_router(auth.router)
	api.include_router(events.router)
	api.include_router(search.router)
	api.include_router(clubs.router)
	api.include_router(admin.router)
	api.include_router(users.router)
	api.include_router(ops.router)
	app.include_router(api)
	return app


app = create_app()
