"""External player definitions and URL construction.

Pure value objects: building a player URL has no side effects, launching
it is the job of a ``PlayerLauncherPort``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import quote

FormatFamily = Literal["hls", "mp4", "magnet", "dash"]
PlayerName = Literal["infuse", "vidhub", "outplayer"]


def encode_component(value: str) -> str:
    """Percent-encode like JavaScript's ``encodeURIComponent``."""
    return quote(value, safe="-_.!~*'()")


def format_family(url: str) -> FormatFamily:
    if url.startswith("magnet:"):
        return "magnet"
    if ".m3u8" in url:
        return "hls"
    if ".mpd" in url:
        return "dash"
    return "mp4"


@dataclass(frozen=True)
class PlayerRequest:
    """Everything a URL builder may use."""

    url: str
    subtitle: str | None = None
    title: str | None = None
    poster: str | None = None
    success_callback: str | None = None


UrlBuilder = Callable[[str, PlayerRequest], str]


def _callback_style(scheme: str, req: PlayerRequest) -> str:
    out = f"{scheme}?url={encode_component(req.url)}"
    if req.subtitle:
        out += f"&subtitle={encode_component(req.subtitle)}"
    if req.title:
        out += f"&title={encode_component(req.title)}"
    if req.success_callback and not req.url.startswith("magnet:"):
        out += f"&x-success={req.success_callback}"
    return out


def _query_style(scheme: str, req: PlayerRequest) -> str:
    out = f"{scheme}?url={encode_component(req.url)}"
    if req.subtitle:
        out += f"&subtitle={encode_component(req.subtitle)}"
    if req.title:
        out += f"&title={encode_component(req.title)}"
    if req.poster:
        out += f"&poster={encode_component(req.poster)}"
    return out


def _raw_style(scheme: str, req: PlayerRequest) -> str:
    out = f"{scheme}{encode_component(req.url)}"
    if req.subtitle:
        out += f"#subtitle={encode_component(req.subtitle)}"
    return out


@dataclass(frozen=True)
class ExternalPlayer:
    key: PlayerName
    name: str
    url_scheme: str
    supported_formats: frozenset[FormatFamily]
    builder: UrlBuilder = field(compare=False, repr=False)

    def supports(self, url: str) -> bool:
        return format_family(url) in self.supported_formats

    def build_url(self, request: PlayerRequest) -> str:
        return self.builder(self.url_scheme, request)


PLAYERS: dict[str, ExternalPlayer] = {
    "infuse": ExternalPlayer(
        key="infuse",
        name="Infuse",
        url_scheme="infuse://x-callback-url/play",
        supported_formats=frozenset({"hls", "mp4", "magnet", "dash"}),
        builder=_callback_style,
    ),
    "outplayer": ExternalPlayer(
        key="outplayer",
        name="Outplayer",
        url_scheme="outplayer://",
        supported_formats=frozenset({"hls", "mp4", "dash"}),
        builder=_raw_style,
    ),
    "vidhub": ExternalPlayer(
        key="vidhub",
        name="VidHub",
        url_scheme="vidhub://",
        supported_formats=frozenset({"hls", "mp4", "magnet", "dash"}),
        builder=_query_style,
    ),
}
