"""Addon registry, catalog and metadata endpoints."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from addonarr.domain.entities import UnknownAddon
from addonarr.interfaces.api.presenters import (
    present_catalog_item,
    present_meta,
    present_subtitle,
)
from addonarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["addons"])

# Catalog query parameters forwarded to addons as extras.
_CATALOG_EXTRAS = ("skip", "limit", "genre", "search")


class AddAddonRequest(BaseModel):
    url: str


@router.get("/addons")
async def list_addons(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    return JSONResponse(
        content={"addons": [m.to_dict() for m in state.registry.all()]}
    )


@router.get("/addons/health")
async def addon_health(request: Request) -> JSONResponse:
    """Circuit-breaker state of every registered addon."""
    state = cast(AppState, request.app.state)
    breaker = state.circuit_breaker
    failures = breaker.snapshot()
    return JSONResponse(
        content={
            "addons": [
                {
                    "id": m.id,
                    "state": breaker.state(m.id).value,
                    "failures": failures.get(m.id, {}).get("failures", 0),
                }
                for m in state.registry.all()
            ]
        }
    )


@router.post("/addons")
async def add_addon(request: Request, body: AddAddonRequest) -> JSONResponse:
    """Fetch, validate and register an addon manifest."""
    state = cast(AppState, request.app.state)
    manifest = await state.registry.add(body.url)
    return JSONResponse(status_code=201, content=manifest.to_dict())


@router.delete("/addons/{addon_id}")
async def remove_addon(request: Request, addon_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    if not await state.registry.remove(addon_id):
        raise UnknownAddon(addon_id)
    return JSONResponse(content={"removed": addon_id})


@router.get("/catalog/{addon_id}/{content_type}/{catalog_id}")
async def get_catalog(
    request: Request,
    addon_id: str,
    content_type: str,
    catalog_id: str,
) -> JSONResponse:
    """One catalog page; failures yield placeholder items, never an error."""
    state = cast(AppState, request.app.state)
    extra = {
        key: request.query_params[key]
        for key in _CATALOG_EXTRAS
        if key in request.query_params
    }
    items = await state.catalog_uc.resolve(
        addon_id, content_type, catalog_id, extra or None
    )
    return JSONResponse(content={"items": [present_catalog_item(i) for i in items]})


@router.get("/meta/{addon_id}/{content_type}/{item_id}")
async def get_meta(
    request: Request,
    addon_id: str,
    content_type: str,
    item_id: str,
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    if state.registry.get(addon_id) is None:
        raise UnknownAddon(addon_id)
    meta = await state.meta_uc.meta(addon_id, content_type, item_id)
    if meta is None:
        return JSONResponse(status_code=404, content={"meta": None})
    return JSONResponse(content={"meta": present_meta(meta)})


@router.get("/subtitles/{addon_id}/{content_type}/{item_id}")
async def get_subtitles(
    request: Request,
    addon_id: str,
    content_type: str,
    item_id: str,
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    if state.registry.get(addon_id) is None:
        raise UnknownAddon(addon_id)
    subtitles = await state.meta_uc.subtitles(addon_id, content_type, item_id)
    return JSONResponse(
        content={"subtitles": [present_subtitle(s) for s in subtitles]}
    )
