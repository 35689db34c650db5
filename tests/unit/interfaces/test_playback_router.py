"""Tests for the playback and debrid endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from addonarr.application.use_cases import (
    HandoffSession,
    HandoffState,
    InternalPlayerSource,
    PlaybackOutcome,
)
from addonarr.domain.entities import (
    AllProvidersExhausted,
    DebridProvider,
    DebridResolution,
    PlaybackVideo,
    ResolvedPlaybackTarget,
    StreamKind,
    UnsupportedFormat,
)
from addonarr.interfaces.api.errors import register_error_handlers
from addonarr.interfaces.api.playback.router import router

_TARGET = ResolvedPlaybackTarget(
    original_url="magnet:?xt=urn:btih:abc",
    resolved_url="https://rd.example/f.mp4",
    resolving_provider=DebridProvider.REAL_DEBRID,
)


def _make_app(
    *,
    playback_uc: MagicMock | None = None,
    debrid_uc: MagicMock | None = None,
) -> FastAPI:
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    register_error_handlers(app)
    app.state.playback_uc = playback_uc or MagicMock()
    app.state.debrid_uc = debrid_uc or MagicMock()
    return app


class TestPlay:
    def test_internal(self) -> None:
        playback_uc = MagicMock()
        playback_uc.play = AsyncMock(
            return_value=PlaybackOutcome(
                mode="internal",
                target=_TARGET,
                source=InternalPlayerSource(
                    url="https://rd.example/f.mp4", mime_type="video/mp4", kind=StreamKind.DIRECT
                ),
            )
        )
        client = TestClient(_make_app(playback_uc=playback_uc))

        resp = client.post(
            "/api/v1/play", json={"url": "magnet:?xt=urn:btih:abc", "title": "Movie"}
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["mode"] == "internal"
        assert body["target"]["provider"] == "real-debrid"
        assert body["source"]["mimeType"] == "video/mp4"
        playback_uc.play.assert_awaited_once_with(
            PlaybackVideo(url="magnet:?xt=urn:btih:abc", title="Movie")
        )

    def test_external_with_session(self) -> None:
        session = HandoffSession(primary="infuse", fallback="vidhub", id="s1")
        session.state = HandoffState.AWAITING_CONFIRMATION
        playback_uc = MagicMock()
        playback_uc.play = AsyncMock(
            return_value=PlaybackOutcome(
                mode="external",
                target=_TARGET,
                player="infuse",
                player_url="infuse://x-callback-url/play?url=x",
                session=session,
            )
        )
        client = TestClient(_make_app(playback_uc=playback_uc))

        body = client.post("/api/v1/play", json={"url": "https://x/y.mp4", "kind": "mp4"}).json()

        assert body["player"] == "infuse"
        assert body["playerUrl"] == "infuse://x-callback-url/play?url=x"
        assert body["session"] == {
            "id": "s1",
            "primary": "infuse",
            "fallback": "vidhub",
            "state": "awaiting_confirmation",
        }

    def test_unsupported_format_is_409(self) -> None:
        playback_uc = MagicMock()
        playback_uc.play = AsyncMock(side_effect=UnsupportedFormat("outplayer", "magnet"))
        client = TestClient(_make_app(playback_uc=playback_uc))

        resp = client.post("/api/v1/play", json={"url": "magnet:?xt=urn:btih:abc"})

        assert resp.status_code == 409

    def test_invalid_kind_rejected(self) -> None:
        client = TestClient(_make_app())
        assert client.post("/api/v1/play", json={"url": "x", "kind": "vhs"}).status_code == 422


class TestSessions:
    def test_confirm(self) -> None:
        playback_uc = MagicMock()
        playback_uc.session.return_value = HandoffSession(primary="infuse", fallback="vidhub")
        playback_uc.confirm.return_value = True
        client = TestClient(_make_app(playback_uc=playback_uc))

        resp = client.post("/api/v1/play/abc/confirm")

        assert resp.json() == {"confirmed": True}
        playback_uc.confirm.assert_called_once_with("abc")

    def test_confirm_unknown(self) -> None:
        playback_uc = MagicMock()
        playback_uc.session.return_value = None
        client = TestClient(_make_app(playback_uc=playback_uc))
        assert client.post("/api/v1/play/abc/confirm").status_code == 404

    def test_get_session(self) -> None:
        playback_uc = MagicMock()
        playback_uc.session.return_value = HandoffSession(
            primary="infuse", fallback="vidhub", id="abc"
        )
        client = TestClient(_make_app(playback_uc=playback_uc))
        assert client.get("/api/v1/play/abc").json()["session"]["state"] == "launching"


class TestDebrid:
    def test_resolve(self) -> None:
        debrid_uc = MagicMock()
        debrid_uc.resolve_target = AsyncMock(return_value=_TARGET)
        client = TestClient(_make_app(debrid_uc=debrid_uc))

        resp = client.post("/api/v1/debrid/resolve", json={"url": "magnet:?xt=urn:btih:abc"})

        assert resp.json() == {
            "originalUrl": "magnet:?xt=urn:btih:abc",
            "resolvedUrl": "https://rd.example/f.mp4",
            "provider": "real-debrid",
        }

    def test_strict_resolve(self) -> None:
        debrid_uc = MagicMock()
        debrid_uc.resolve_or_raise = AsyncMock(
            return_value=DebridResolution(url="https://ad/f", provider=DebridProvider.ALL_DEBRID)
        )
        client = TestClient(_make_app(debrid_uc=debrid_uc))

        resp = client.post("/api/v1/debrid/resolve", json={"url": "x", "strict": True})

        assert resp.json() == {"url": "https://ad/f", "provider": "all-debrid"}

    def test_strict_exhausted_is_502(self) -> None:
        debrid_uc = MagicMock()
        debrid_uc.resolve_or_raise = AsyncMock(
            side_effect=AllProvidersExhausted("x", ["real-debrid"])
        )
        client = TestClient(_make_app(debrid_uc=debrid_uc))

        resp = client.post("/api/v1/debrid/resolve", json={"url": "x", "strict": True})

        assert resp.status_code == 502
        assert resp.json()["error"] == "AllProvidersExhausted"

    def test_providers(self) -> None:
        debrid_uc = MagicMock()
        debrid_uc.configured.return_value = [DebridProvider.PREMIUMIZE]
        client = TestClient(_make_app(debrid_uc=debrid_uc))
        assert client.get("/api/v1/debrid/providers").json() == {"configured": ["premiumize"]}

    def test_credential_check(self) -> None:
        debrid_uc = MagicMock()
        debrid_uc.test_credential = AsyncMock(return_value=True)
        client = TestClient(_make_app(debrid_uc=debrid_uc))

        resp = client.get("/api/v1/debrid/all-debrid/test")

        assert resp.json() == {"provider": "all-debrid", "valid": True}
        debrid_uc.test_credential.assert_awaited_once_with(DebridProvider.ALL_DEBRID)

    def test_unknown_provider(self) -> None:
        client = TestClient(_make_app())
        assert client.get("/api/v1/debrid/torbox/test").status_code == 422
