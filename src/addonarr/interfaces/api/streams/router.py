"""Stream aggregation endpoints."""

from __future__ import annotations

import asyncio
from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from addonarr.interfaces.api.presenters import present_stream
from addonarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/streams", tags=["streams"])


@router.get("/{content_type}/{item_id}")
async def find_streams(
    request: Request,
    content_type: str,
    item_id: str,
) -> JSONResponse:
    """Fan out to every eligible addon and return the merged candidates."""
    state = cast(AppState, request.app.state)
    try:
        streams = await state.stream_uc.find_streams(content_type, item_id)
    except asyncio.CancelledError:
        # Our own task being cancelled (shutdown, client gone) must propagate.
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        log.info("stream_search_aborted", type=content_type, id=item_id)
        return JSONResponse(status_code=409, content={"streams": [], "cancelled": True})
    return JSONResponse(content={"streams": [present_stream(s) for s in streams]})


@router.delete("/{content_type}/{item_id}")
async def cancel_search(
    request: Request,
    content_type: str,
    item_id: str,
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    cancelled = state.stream_uc.cancel(content_type, item_id)
    if cancelled:
        log.info("stream_search_cancel_requested", type=content_type, id=item_id)
    return JSONResponse(content={"cancelled": cancelled})
