"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clubhub.api.request_id import get_request_id
from clubhub.domain.exceptions import ClubhubError, _HTTP_422

_LOG = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		payload = {"detail": exc.detail, "request_id": get_request_id(request)}
		return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

	@app.exception_handler(ClubhubError)
	async def domain_exc_handler(request: Request, exc: ClubhubError):  # type: ignore[override]
		payload = {"detail": exc.to_payload(), "request_id": get_request_id(request)}
		return JSONResponse(status_code=exc.status_code, content=payload)

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		payload = {
			"detail": {"kind": "validation_error", "message": "Invalid request"},
			"errors": jsonable_encoder(exc.errors()),
			"request_id": get_request_id(request),
		}
		return JSONResponse(status_code=_HTTP_422, content=payload)

	@app.exception_handler(Exception)
	async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
		_LOG.error("api.unhandled_error", exc_info=exc)
		payload = {
			"detail": {"kind": "internal_error", "message": "Internal server error"},
			"request_id": get_request_id(request),
		}
		return JSONResponse(status_code=500, content=payload)
