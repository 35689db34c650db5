"""Map domain errors onto HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from addonarr.domain.entities import (
    AddonarrError,
    AllProvidersExhausted,
    InvalidManifest,
    NetworkFailure,
    PlayerLaunchFailed,
    UnknownAddon,
    UnsupportedFormat,
    UnsupportedResource,
)

log = structlog.get_logger(__name__)

_STATUS_CODES: dict[type[AddonarrError], int] = {
    InvalidManifest: 422,
    UnknownAddon: 404,
    UnsupportedResource: 404,
    UnsupportedFormat: 409,
    AllProvidersExhausted: 502,
    PlayerLaunchFailed: 502,
    NetworkFailure: 502,
}


def status_code_for(exc: AddonarrError) -> int:
    for cls in type(exc).__mro__:
        code = _STATUS_CODES.get(cls)  # type: ignore[arg-type]
        if code is not None:
            return code
    return 500


async def _handle_domain_error(request: Request, exc: AddonarrError) -> JSONResponse:
    status_code = status_code_for(exc)
    log.warning(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=status_code,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AddonarrError, _handle_domain_error)  # type: ignore[arg-type]
