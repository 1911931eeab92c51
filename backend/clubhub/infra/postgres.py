"""Process-wide asyncpg pool.

The application lifespan opens the pool and hands it to the repository;
scripts and the health probe reach it through ``get_pool``. Tests swap in
their own pool with ``set_pool``.
"""

from __future__ import annotations

from typing import Optional

import asyncpg

from clubhub.settings import settings

_pool: Optional[asyncpg.pool.Pool] = None


def _pool_options() -> dict[str, object]:
	return {
		"dsn": settings.postgres_url,
		"min_size": settings.postgres_min_pool_size,
		"max_size": max(settings.postgres_max_pool_size, settings.postgres_min_pool_size, 1),
		"ssl": "require" if settings.postgres_ssl else "disable",
		"server_settings": {"application_name": settings.service_name},
	}


async def init_pool() -> asyncpg.pool.Pool:
	global _pool
	if _pool is None:
		_pool = await asyncpg.create_pool(**_pool_options())
	return _pool


def set_pool(pool: Optional[asyncpg.pool.Pool]) -> None:
	global _pool
	_pool = pool


async def get_pool() -> asyncpg.pool.Pool:
	return _pool if _pool is not None else await init_pool()


async def close_pool() -> None:
	global _pool
	pool, _pool = _pool, None
	if pool is not None:
		await pool.close()
