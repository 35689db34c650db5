"""Playback hand-off and debrid endpoints."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from addonarr.domain.entities import DebridProvider, PlaybackVideo, StreamKind
from addonarr.interfaces.api.presenters import (
    present_outcome,
    present_session,
    present_target,
)
from addonarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["playback"])


class PlayRequest(BaseModel):
    url: str
    kind: StreamKind | None = None
    title: str | None = None
    poster: str | None = None
    subtitle: str | None = None


class ResolveRequest(BaseModel):
    url: str
    strict: bool = False


@router.post("/play")
async def play(request: Request, body: PlayRequest) -> JSONResponse:
    """Resolve a stream through debrid and hand it to a player."""
    state = cast(AppState, request.app.state)
    video = PlaybackVideo(
        url=body.url,
        kind=body.kind,
        title=body.title,
        poster=body.poster,
        subtitle=body.subtitle,
    )
    outcome = await state.playback_uc.play(video)
    return JSONResponse(content=present_outcome(outcome))


@router.get("/play/{session_id}")
async def get_session(request: Request, session_id: str) -> JSONResponse:
    state = cast(AppState, request.app.state)
    session = state.playback_uc.session(session_id)
    if session is None:
        return JSONResponse(status_code=404, content={"session": None})
    return JSONResponse(content={"session": present_session(session)})


@router.post("/play/{session_id}/confirm")
async def confirm_session(request: Request, session_id: str) -> JSONResponse:
    """Report that the external player started; cancels the fallback timer."""
    state = cast(AppState, request.app.state)
    if state.playback_uc.session(session_id) is None:
        return JSONResponse(status_code=404, content={"confirmed": False})
    confirmed = state.playback_uc.confirm(session_id)
    return JSONResponse(content={"confirmed": confirmed})


@router.post("/debrid/resolve")
async def resolve_debrid(request: Request, body: ResolveRequest) -> JSONResponse:
    state = cast(AppState, request.app.state)
    if body.strict:
        resolution = await state.debrid_uc.resolve_or_raise(body.url)
        return JSONResponse(
            content={
                "url": resolution.url,
                "provider": resolution.provider.value if resolution.provider else None,
            }
        )
    target = await state.debrid_uc.resolve_target(body.url)
    return JSONResponse(content=present_target(target))


@router.get("/debrid/providers")
async def list_providers(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    return JSONResponse(
        content={"configured": [p.value for p in state.debrid_uc.configured()]}
    )


@router.get("/debrid/{provider}/test")
async def test_provider(request: Request, provider: DebridProvider) -> JSONResponse:
    """Validate the stored credential against the provider's account API."""
    state = cast(AppState, request.app.state)
    valid = await state.debrid_uc.test_credential(provider)
    return JSONResponse(content={"provider": provider.value, "valid": valid})
