"""Playback hand-off: internal player source or external player launch.

External launches are fire-and-forget, so success cannot be observed.
When a fallback player is configured, a ``HandoffSession`` arms a timer
after the primary launch; unless the caller confirms playback within
``fallback_delay_seconds`` the fallback player is launched as a second
chance.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Protocol

import structlog

from addonarr.domain.entities.errors import PlayerLaunchFailed, UnsupportedFormat
from addonarr.domain.entities.player import (
    PLAYERS,
    ExternalPlayer,
    PlayerRequest,
    format_family,
)
from addonarr.domain.entities.stream import (
    PlaybackVideo,
    ResolvedPlaybackTarget,
    StreamKind,
    kind_from_url,
)
from addonarr.domain.ports.player_launcher import PlayerLauncherPort

log = structlog.get_logger(__name__)

MIME_TYPES: dict[StreamKind, str] = {
    StreamKind.HLS: "application/x-mpegURL",
    StreamKind.DASH: "application/dash+xml",
    StreamKind.DIRECT: "video/mp4",
    StreamKind.TORRENT: "application/x-bittorrent",
}

WEBTORRENT_TRACKERS: tuple[str, ...] = (
    "wss://tracker.openwebtorrent.com",
    "wss://tracker.btorrent.xyz",
    "wss://tracker.webtorrent.dev",
)


class _PlayerSettings(Protocol):
    external_enabled: bool
    external_player: str
    fallback_player: str | None
    fallback_delay_seconds: float
    success_callback: str


class _TargetResolver(Protocol):
    async def resolve_target(self, original_url: str) -> ResolvedPlaybackTarget: ...


@dataclass(frozen=True)
class InternalPlayerSource:
    """Source configuration for the in-app player."""

    url: str
    mime_type: str
    kind: StreamKind
    title: str | None = None
    poster: str | None = None
    subtitle: str | None = None
    trackers: tuple[str, ...] = ()


class HandoffState(str, Enum):
    LAUNCHING = "launching"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    FALLBACK_TRIGGERED = "fallback_triggered"


@dataclass
class HandoffSession:
    """Tracks one external launch and its delayed fallback."""

    primary: str
    fallback: str | None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: HandoffState = HandoffState.LAUNCHING
    _timer: asyncio.Task[None] | None = field(default=None, repr=False)

    @property
    def finished(self) -> bool:
        return self.state in (HandoffState.CONFIRMED, HandoffState.FALLBACK_TRIGGERED)

    def confirm(self) -> bool:
        """Caller saw playback start; cancels the pending fallback."""
        if self.finished:
            return False
        self.state = HandoffState.CONFIRMED
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        log.info("handoff_confirmed", session=self.id, player=self.primary)
        return True

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()


@dataclass(frozen=True)
class PlaybackOutcome:
    mode: Literal["internal", "external"]
    target: ResolvedPlaybackTarget
    player: str | None = None
    player_url: str | None = None
    session: HandoffSession | None = None
    source: InternalPlayerSource | None = None


class PlaybackHandoff:
    """Play a stream: resolve through debrid, then hand off."""

    def __init__(
        self,
        *,
        resolver: _TargetResolver,
        launcher: PlayerLauncherPort,
        settings: _PlayerSettings,
        players: dict[str, ExternalPlayer] | None = None,
    ) -> None:
        self._resolver = resolver
        self._launcher = launcher
        self._settings = settings
        self._players = players if players is not None else PLAYERS
        self._sessions: dict[str, HandoffSession] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def play(self, video: PlaybackVideo) -> PlaybackOutcome:
        target = await self._resolver.resolve_target(video.url)
        if self._settings.external_enabled:
            return await self._play_external(video, target)
        return PlaybackOutcome(
            mode="internal",
            target=target,
            source=self.internal_source(video, target),
        )

    def internal_source(
        self, video: PlaybackVideo, target: ResolvedPlaybackTarget
    ) -> InternalPlayerSource:
        """In-app source with the same kind mapping as stream normalization.

        A caller-supplied kind describes the original link only; once debrid
        has replaced it the kind is taken from the resolved URL.
        """
        url = target.resolved_url
        kind = video.kind
        if kind is None or url != target.original_url:
            kind = kind_from_url(url)
        return InternalPlayerSource(
            url=url,
            mime_type=MIME_TYPES[kind],
            kind=kind,
            title=video.title,
            poster=video.poster,
            subtitle=video.subtitle,
            trackers=WEBTORRENT_TRACKERS if kind is StreamKind.TORRENT else (),
        )

    def session(self, session_id: str) -> HandoffSession | None:
        return self._sessions.get(session_id)

    def confirm(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        return session.confirm() if session is not None else False

    async def aclose(self) -> None:
        """Cancel every pending fallback timer."""
        timers = [s._timer for s in self._sessions.values() if s._timer is not None]
        for session in self._sessions.values():
            session.cancel()
        await asyncio.gather(*timers, return_exceptions=True)
        self._sessions.clear()

    # ------------------------------------------------------------------
    # External hand-off
    # ------------------------------------------------------------------

    def _player(self, name: str | None) -> ExternalPlayer | None:
        return self._players.get(name) if name else None

    def _request(self, video: PlaybackVideo, url: str) -> PlayerRequest:
        return PlayerRequest(
            url=url,
            subtitle=video.subtitle,
            title=video.title,
            poster=video.poster,
            success_callback=self._settings.success_callback,
        )

    async def _launch(self, player: ExternalPlayer, request: PlayerRequest) -> str:
        player_url = player.build_url(request)
        await self._launcher.launch(player_url)
        log.info("external_player_launched", player=player.key)
        return player_url

    async def _play_external(
        self, video: PlaybackVideo, target: ResolvedPlaybackTarget
    ) -> PlaybackOutcome:
        url = target.resolved_url
        family = format_family(url)
        primary = self._player(self._settings.external_player)
        if primary is None:
            raise UnsupportedFormat(self._settings.external_player, family)

        fallback = self._player(self._settings.fallback_player)
        if fallback is not None and (fallback.key == primary.key or not fallback.supports(url)):
            fallback = None

        chosen = primary
        if not primary.supports(url):
            log.warning("external_player_format_unsupported", player=primary.key, format=family)
            if fallback is None:
                raise UnsupportedFormat(primary.key, family)
            chosen, fallback = fallback, None

        request = self._request(video, url)
        try:
            player_url = await self._launch(chosen, request)
        except Exception as e:  # noqa: BLE001
            log.warning("external_player_launch_failed", player=chosen.key, error=str(e))
            if fallback is None:
                raise PlayerLaunchFailed([chosen.key], str(e)) from e
            try:
                player_url = await self._launch(fallback, request)
            except Exception as e2:  # noqa: BLE001
                raise PlayerLaunchFailed([chosen.key, fallback.key], str(e2)) from e2
            return PlaybackOutcome(
                mode="external", target=target, player=fallback.key, player_url=player_url
            )

        session = None
        if fallback is not None:
            session = self._arm(chosen, fallback, request)
        return PlaybackOutcome(
            mode="external",
            target=target,
            player=chosen.key,
            player_url=player_url,
            session=session,
        )

    def _arm(
        self, primary: ExternalPlayer, fallback: ExternalPlayer, request: PlayerRequest
    ) -> HandoffSession:
        session = HandoffSession(primary=primary.key, fallback=fallback.key)
        session.state = HandoffState.AWAITING_CONFIRMATION
        session._timer = asyncio.create_task(self._fallback_after_delay(session, fallback, request))
        self._sessions[session.id] = session
        log.debug(
            "handoff_fallback_armed",
            session=session.id,
            fallback=fallback.key,
            delay=self._settings.fallback_delay_seconds,
        )
        return session

    async def _fallback_after_delay(
        self, session: HandoffSession, fallback: ExternalPlayer, request: PlayerRequest
    ) -> None:
        try:
            await asyncio.sleep(self._settings.fallback_delay_seconds)
            if session.state is not HandoffState.AWAITING_CONFIRMATION:
                return
            session.state = HandoffState.FALLBACK_TRIGGERED
            await self._launch(fallback, request)
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            log.warning("handoff_fallback_launch_failed", session=session.id, exc_info=True)
        finally:
            if session.finished:
                self._sessions.pop(session.id, None)
