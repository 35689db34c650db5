"""Normalize heterogeneous addon stream payloads into ``StreamCandidate``s.

Pure functions, no I/O.  The pipeline is:

1. ``discover_entries`` finds stream-looking entries anywhere in a payload.
2. ``detect_shape`` classifies each entry with an ordered rule list into
   one of ``DirectUrl | SourcesArray | InfoHash | RawString | Unrecognized``.
3. One mapping function per shape turns it into a candidate (or nothing).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import quote

from addonarr.domain.entities.stream import StreamCandidate, StreamKind, kind_from_url

from .quality import detect_quality, seed_hint, size_hint, source_hint

UNKNOWN_TITLE = "Unknown Stream"
UNKNOWN_QUALITY = "Unknown"

DEFAULT_TRACKERS: tuple[str, ...] = (
    "udp://tracker.opentrackr.org:1337/announce",
    "udp://exodus.desync.com:6969/announce",
    "udp://tracker.torrent.eu.org:451/announce",
    "udp://tracker.moeking.me:6969/announce",
    "udp://open.stealth.si:80/announce",
    "udp://explodie.org:6969/announce",
)

# Properties whose presence marks an object as a stream.
_STREAM_PROPS = (
    "url",
    "externalUrl",
    "infoHash",
    "magnetUri",
    "torrent",
    "file",
    "link",
    "src",
    "stream_link",
)
# Direct URL properties, in extraction priority order.
_URL_PROPS = ("url", "externalUrl", "file", "link", "src", "stream_link")
# Container properties searched (in order) for stream lists.
_CONTAINER_PROPS = ("streams", "stream", "links", "sources", "videos", "files")

_VIDEO_EXT_RE = re.compile(r"\.(mp4|m3u8|mpd|mkv|avi|webm)($|\?)", re.I)
_MAX_DEPTH = 8


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def looks_like_stream(entry: Any) -> bool:
    """Heuristic test for a single stream entry (object or bare string)."""
    if isinstance(entry, str):
        return (
            entry.startswith("magnet:")
            or _VIDEO_EXT_RE.search(entry) is not None
            or "stream" in entry
            or "video" in entry
        )
    if isinstance(entry, Mapping):
        return any(entry.get(prop) for prop in _STREAM_PROPS)
    return False


def _extract(node: Any, depth: int) -> list[Any]:
    if depth > _MAX_DEPTH or not node:
        return []

    if isinstance(node, list):
        return [e for e in node if looks_like_stream(e)]

    if not isinstance(node, Mapping):
        return []

    for prop in _CONTAINER_PROPS:
        value = node.get(prop)
        if not value:
            continue
        entries = value if isinstance(value, list) else [value]
        if any(looks_like_stream(e) for e in entries):
            return [e for e in entries if looks_like_stream(e)]

    nested: list[Any] = []
    for value in node.values():
        nested.extend(_extract(value, depth + 1))
    return [e for e in nested if looks_like_stream(e)]


def discover_entries(payload: Any) -> list[Any]:
    """Locate stream entries in an arbitrary decoded JSON payload.

    Bare arrays are filtered; objects are searched for the first container
    property holding stream-looking entries, then recursively; failing
    that, the payload itself is used if it looks like a stream.
    """
    entries = _extract(payload, 0)
    if not entries and looks_like_stream(payload):
        return [payload]
    return entries


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DirectUrl:
    """Entry carrying a URL in a direct property (or magnetUri/torrent)."""

    entry: Mapping[str, Any]
    url: str


@dataclass(frozen=True)
class SourcesArray:
    """Entry whose URL is the first element of ``sources``."""

    entry: Mapping[str, Any]
    url: str


@dataclass(frozen=True)
class InfoHash:
    """Torrent entry identified only by its info hash."""

    entry: Mapping[str, Any]
    info_hash: str


@dataclass(frozen=True)
class RawString:
    url: str


@dataclass(frozen=True)
class Unrecognized:
    entry: Any


StreamShape = Union[DirectUrl, SourcesArray, InfoHash, RawString, Unrecognized]


def _url_value(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, Mapping):
        nested = value.get("url")
        if isinstance(nested, str) and nested:
            return nested
    return None


def _rule_raw_string(entry: Any) -> StreamShape | None:
    if isinstance(entry, str) and entry:
        return RawString(url=entry)
    return None


def _rule_direct_url(entry: Any) -> StreamShape | None:
    if not isinstance(entry, Mapping):
        return None
    for prop in _URL_PROPS:
        url = _url_value(entry.get(prop))
        if url:
            return DirectUrl(entry=entry, url=url)
    return None


def _rule_sources(entry: Any) -> StreamShape | None:
    if not isinstance(entry, Mapping):
        return None
    sources = entry.get("sources")
    if not isinstance(sources, list) or not sources:
        return None
    first = sources[0]
    if isinstance(first, str) and first:
        return SourcesArray(entry=entry, url=first)
    if isinstance(first, Mapping):
        for key in ("url", "file"):
            value = first.get(key)
            if isinstance(value, str) and value:
                return SourcesArray(entry=entry, url=value)
    return None


def _rule_magnet(entry: Any) -> StreamShape | None:
    if not isinstance(entry, Mapping):
        return None
    for prop in ("magnetUri", "torrent"):
        value = entry.get(prop)
        if isinstance(value, str) and value:
            return DirectUrl(entry=entry, url=value)
    return None


def _rule_info_hash(entry: Any) -> StreamShape | None:
    if not isinstance(entry, Mapping):
        return None
    info_hash = entry.get("infoHash")
    if isinstance(info_hash, str) and info_hash:
        return InfoHash(entry=entry, info_hash=info_hash)
    return None


_SHAPE_RULES: tuple[Callable[[Any], StreamShape | None], ...] = (
    _rule_raw_string,
    _rule_direct_url,
    _rule_sources,
    _rule_magnet,
    _rule_info_hash,
)


def detect_shape(entry: Any) -> StreamShape:
    """Classify *entry* by the first matching rule."""
    for rule in _SHAPE_RULES:
        shape = rule(entry)
        if shape is not None:
            return shape
    return Unrecognized(entry=entry)


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def build_magnet(
    info_hash: str,
    *,
    name: str | None = None,
    file_idx: Any = None,
    trackers: Any = None,
) -> str:
    """Build a magnet URI; the six default UDP trackers are used when none are given."""
    magnet = f"magnet:?xt=urn:btih:{info_hash}"
    if file_idx is not None:
        magnet += f"&fileIdx={file_idx}"
    display = name if isinstance(name, str) and name else "Stream"
    magnet += f"&dn={quote(display, safe='')}"

    tracker_list: list[str] = []
    if isinstance(trackers, list):
        tracker_list = [t for t in trackers if isinstance(t, str)]
    for tracker in tracker_list or DEFAULT_TRACKERS:
        magnet += f"&tr={quote(tracker, safe='')}"
    return magnet


def _text(entry: Mapping[str, Any], key: str) -> str | None:
    value = entry.get(key)
    return value if isinstance(value, str) and value else None


def _candidate(
    entry: Mapping[str, Any],
    url: str,
    *,
    addon_id: str,
    addon_name: str,
) -> StreamCandidate:
    title = _text(entry, "title")
    name = _text(entry, "name")

    quality = _text(entry, "quality")
    if quality is None:
        quality = (
            detect_quality(title)
            or detect_quality(name)
            or detect_quality(url)
            or UNKNOWN_QUALITY
        )

    kind = StreamKind.parse(entry.get("type"))
    if kind is None:
        kind = kind_from_url(url)
        if kind is StreamKind.DIRECT and entry.get("infoHash"):
            kind = StreamKind.TORRENT

    label = title or name or UNKNOWN_TITLE
    hint_text = "\n".join(t for t in (title, name) if t)
    hints = entry.get("behaviorHints")

    return StreamCandidate(
        source_addon_id=addon_id,
        url=url,
        title=f"{label} ({addon_name})" if addon_name else label,
        quality=quality,
        kind=kind,
        size_hint=size_hint(hint_text, url),
        seed_hint=seed_hint(hint_text),
        source_hint=source_hint(hint_text),
        behavior_hints=dict(hints) if isinstance(hints, Mapping) else {},
    )


def _map_direct(shape: DirectUrl, addon_id: str, addon_name: str) -> StreamCandidate:
    return _candidate(shape.entry, shape.url, addon_id=addon_id, addon_name=addon_name)


def _map_sources(shape: SourcesArray, addon_id: str, addon_name: str) -> StreamCandidate:
    return _candidate(shape.entry, shape.url, addon_id=addon_id, addon_name=addon_name)


def _map_info_hash(shape: InfoHash, addon_id: str, addon_name: str) -> StreamCandidate:
    entry = shape.entry
    magnet = build_magnet(
        shape.info_hash,
        name=_text(entry, "name"),
        file_idx=entry.get("fileIdx"),
        trackers=entry.get("trackers"),
    )
    return _candidate(entry, magnet, addon_id=addon_id, addon_name=addon_name)


def _map_raw_string(shape: RawString, addon_id: str, addon_name: str) -> StreamCandidate:
    return _candidate({}, shape.url, addon_id=addon_id, addon_name=addon_name)


_MAPPERS: dict[type, Callable[[Any, str, str], StreamCandidate]] = {
    DirectUrl: _map_direct,
    SourcesArray: _map_sources,
    InfoHash: _map_info_hash,
    RawString: _map_raw_string,
}


def normalize(
    raw_payload: Any,
    *,
    addon_id: str = "",
    addon_name: str = "",
) -> list[StreamCandidate]:
    """Turn one addon response into candidates, in payload order.

    Entries without an extractable URL are dropped; the result may be empty.
    """
    candidates: list[StreamCandidate] = []
    for entry in discover_entries(raw_payload):
        shape = detect_shape(entry)
        mapper = _MAPPERS.get(type(shape))
        if mapper is None:
            continue
        candidates.append(mapper(shape, addon_id, addon_name))
    return candidates
