"""Domain entities for stream discovery, debrid resolution and playback.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StreamKind(str, Enum):
    """Transport family of a playable source."""

    DIRECT = "mp4"
    HLS = "hls"
    DASH = "dash"
    TORRENT = "torrent"

    @classmethod
    def parse(cls, raw: object) -> StreamKind | None:
        """Map an addon-declared ``type`` value to a kind (``None`` if unknown)."""
        if not isinstance(raw, str):
            return None
        value = raw.strip().lower()
        if value in ("direct", "url", "http"):
            return cls.DIRECT
        try:
            return cls(value)
        except ValueError:
            return None


def kind_from_url(url: str) -> StreamKind:
    """Classify a URL alone: ``.m3u8`` hls, ``.mpd`` dash, ``magnet:`` torrent, else mp4."""
    if ".m3u8" in url:
        return StreamKind.HLS
    if ".mpd" in url:
        return StreamKind.DASH
    if "magnet:" in url:
        return StreamKind.TORRENT
    return StreamKind.DIRECT


@dataclass(frozen=True)
class StreamCandidate:
    """Canonical, normalized stream offered by one addon.

    ``url`` is never empty: candidates without an extractable URL are
    dropped during normalization.
    """

    source_addon_id: str
    url: str
    title: str
    quality: str = "Unknown"
    kind: StreamKind = StreamKind.DIRECT
    size_hint: str | None = None
    seed_hint: int | None = None
    source_hint: str | None = None
    behavior_hints: dict[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("StreamCandidate.url must not be empty")


class DebridProvider(str, Enum):
    """Supported debrid services, in resolution priority order."""

    REAL_DEBRID = "real-debrid"
    ALL_DEBRID = "all-debrid"
    PREMIUMIZE = "premiumize"


# Strict resolution order; providers are mutually exclusive resolutions of
# the same link and each call consumes API quota.
DEBRID_PRIORITY: tuple[DebridProvider, ...] = (
    DebridProvider.REAL_DEBRID,
    DebridProvider.ALL_DEBRID,
    DebridProvider.PREMIUMIZE,
)


@dataclass(frozen=True)
class DebridCredential:
    """API key for one debrid provider (owned by the settings store)."""

    provider: DebridProvider
    api_key: str

    def __repr__(self) -> str:
        return f"DebridCredential(provider={self.provider.value!r}, api_key='***')"


@dataclass(frozen=True)
class DebridResolution:
    """Outcome of the debrid chain: a direct URL or ``None``."""

    url: str | None
    provider: DebridProvider | None = None

    @property
    def resolved(self) -> bool:
        return self.url is not None


@dataclass(frozen=True)
class ResolvedPlaybackTarget:
    """The URL a player should open for one playback attempt.

    Produced once per attempt and never cached: debrid links may be
    single-use or short-lived.
    """

    original_url: str
    resolved_url: str
    resolving_provider: DebridProvider | None = None


@dataclass(frozen=True)
class PlaybackVideo:
    """What the caller asks to play."""

    url: str
    kind: StreamKind | None = None
    title: str | None = None
    poster: str | None = None
    subtitle: str | None = None
