"""Expiry sweeper: removes events whose ``delete_at`` has passed."""

from __future__ import annotations

import logging
import time

from clubhub.domain.repo import ClubhubRepository
from clubhub.infra.postgres import get_pool
from clubhub.obs import metrics as obs_metrics
from clubhub.settings import settings

_LOG = logging.getLogger(__name__)
JOB_NAME = "event_expiry"


async def purge_expired_events(
	repository: ClubhubRepository | None = None,
	*,
	batch: int | None = None,
	max_batches: int = 20,
) -> int:
	"""Delete expired events in batches and drop their favourites; returns the count."""
	repo = repository or ClubhubRepository(await get_pool())
	limit = batch or settings.expiry_sweep_batch
	started = time.perf_counter()
	total = 0
	try:
		for _ in range(max_batches):
			purged = await repo.purge_expired_events(limit=limit)
			total += len(purged)
			if len(purged) < limit:
				break
	except Exception:
		obs_metrics.record_job_run(JOB_NAME, result="error")
		_LOG.exception("maintenance.expiry_failed", extra={"purged": total})
		raise
	obs_metrics.inc_expired_events_purged(total)
	obs_metrics.record_job_run(JOB_NAME, result="ok", duration_seconds=time.perf_counter() - started)
	if total:
		_LOG.info("maintenance.expiry_purged", extra={"purged": total})
	return total


__all__ = ["JOB_NAME", "purge_expired_events"]
