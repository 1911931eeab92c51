"""Liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict, Optional, Tuple

from clubhub.infra import postgres
from clubhub.infra.scheduler import MaintenanceScheduler
from clubhub.obs import metrics
from clubhub.settings import settings

LOGGER = logging.getLogger(__name__)

# Oldest schema version this build can run against.
MIN_MIGRATION = "0001"

_PING_TIMEOUT = 0.3


async def _database_checks() -> Tuple[Dict[str, Any], Dict[str, Any]]:
	"""Ping Postgres and read the applied schema version over one connection."""
	started = perf_counter()
	try:
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			await asyncio.wait_for(conn.execute("SELECT 1"), timeout=_PING_TIMEOUT)
			latency = perf_counter() - started
			version = await conn.fetchval("SELECT MAX(version) FROM schema_migrations")
	except Exception as exc:
		metrics.mark_postgres(False)
		LOGGER.warning("health.postgres_unavailable", exc_info=True)
		failure = {"ok": False, "error": type(exc).__name__}
		return failure, {"ok": False, "error": "postgres_unavailable"}

	metrics.mark_postgres(True, latency_seconds=latency)
	database = {"ok": True, "latency_ms": round(latency * 1000, 2)}
	if version is None:
		return database, {"ok": False, "error": "no_migrations", "required": MIN_MIGRATION}
	return database, {"ok": str(version) >= MIN_MIGRATION, "version": str(version), "required": MIN_MIGRATION}


def _sweeper_check(scheduler: Optional[MaintenanceScheduler]) -> Dict[str, Any]:
	running = scheduler is not None and scheduler.running
	return {"ok": running, "jobs": scheduler.job_ids() if running else []}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness(scheduler: Optional[MaintenanceScheduler] = None) -> Tuple[int, Dict[str, Any]]:
	database, migrations = await _database_checks()
	checks: Dict[str, Dict[str, Any]] = {"postgres": database, "migrations": migrations}
	if settings.expiry_sweeper_enabled:
		checks["expiry_sweeper"] = _sweeper_check(scheduler)
	ok = all(check["ok"] for check in checks.values())
	return (200 if ok else 503), {"status": "ok" if ok else "degraded", "checks": checks}
