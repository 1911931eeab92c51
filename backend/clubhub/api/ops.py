"""Operations endpoints providing health checks, metrics, and maintenance triggers."""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from clubhub.api.deps import ServiceContainer, get_services
from clubhub.maintenance import expiry
from clubhub.obs import health
from clubhub.settings import settings

router = APIRouter(prefix="", tags=["ops"])


def _resolve_token(x_admin_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
	if x_admin_token:
		return x_admin_token
	if authorization and authorization.lower().startswith("bearer "):
		return authorization.split(" ", 1)[1]
	return None


async def require_admin(
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	token = settings.obs_admin_token
	if not token:
		# Fail closed when no token is configured.
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail={"kind": "forbidden", "message": "admin_token_not_configured"})
	provided = _resolve_token(x_admin_token, authorization)
	if provided is None or not secrets.compare_digest(provided, token):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail={"kind": "forbidden", "message": "forbidden"})


async def require_metrics_access(
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	if settings.obs_metrics_public:
		return
	await require_admin(x_admin_token=x_admin_token, authorization=authorization)


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready(request: Request) -> Response:
	scheduler = getattr(request.app.state, "maintenance_scheduler", None)
	status_code, payload = await health.readiness(scheduler)
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics")
async def prometheus_metrics(_: None = Depends(require_metrics_access)) -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.post("/ops/expiry/run")
async def run_expiry_sweep(
	_: None = Depends(require_admin),
	services: ServiceContainer = Depends(get_services),
) -> dict[str, object]:
	purged = await expiry.purge_expired_events(services.repository)
	return {"status": "ok", "purged": purged}
