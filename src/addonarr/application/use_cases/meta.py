"""Per-title metadata and subtitles served by addons."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from addonarr.domain.entities.addon import MetaItem, MetaVideo, Subtitle
from addonarr.domain.entities.errors import AddonarrError
from addonarr.domain.ports.addon_client import AddonClientPort
from addonarr.domain.ports.addon_registry import AddonRegistryPort

log = structlog.get_logger(__name__)


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _float(value: Any) -> float | None:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _names(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(v for v in value if isinstance(v, str))


def _parse_video(raw: Mapping[str, Any]) -> MetaVideo | None:
    video_id = _str(raw.get("id"))
    if video_id is None:
        return None
    return MetaVideo(
        id=video_id,
        title=_str(raw.get("title")) or _str(raw.get("name")) or video_id,
        season=_int(raw.get("season")),
        episode=_int(raw.get("episode") if "episode" in raw else raw.get("number")),
        released=_str(raw.get("released")),
        thumbnail=_str(raw.get("thumbnail")),
    )


def parse_meta(payload: Any, type_: str, item_id: str) -> MetaItem | None:
    """Accept ``{meta: {...}}`` or a bare meta object."""
    if not isinstance(payload, Mapping):
        return None
    meta = payload.get("meta", payload)
    if not isinstance(meta, Mapping):
        return None

    videos = meta.get("videos")
    return MetaItem(
        id=_str(meta.get("id")) or item_id,
        type=_str(meta.get("type")) or type_,
        name=_str(meta.get("name")) or _str(meta.get("title")) or "Unknown Title",
        poster=_str(meta.get("poster")),
        background=_str(meta.get("background")),
        description=_str(meta.get("description")),
        release_info=_str(meta.get("releaseInfo")),
        imdb_rating=_float(meta.get("imdbRating")),
        genres=_names(meta.get("genres") or meta.get("genre")),
        cast=_names(meta.get("cast")),
        videos=tuple(
            v
            for v in (
                _parse_video(raw) for raw in (videos or []) if isinstance(raw, Mapping)
            )
            if v is not None
        ),
    )


def parse_subtitles(payload: Any) -> list[Subtitle]:
    """Accept ``{subtitles: [...]}`` or a bare array."""
    if isinstance(payload, Mapping):
        payload = payload.get("subtitles")
    if not isinstance(payload, list):
        return []

    out: list[Subtitle] = []
    for i, raw in enumerate(payload):
        if not isinstance(raw, Mapping):
            continue
        url = _str(raw.get("url"))
        if url is None:
            continue
        out.append(
            Subtitle(
                id=_str(raw.get("id")) or str(i),
                url=url,
                lang=_str(raw.get("lang")) or "und",
            )
        )
    return out


class MetaResolver:
    """Fetch ``meta`` and ``subtitles`` resources from one addon.

    Both operations are capability-gated and absorb failures: they log
    and return ``None`` / ``[]``.
    """

    def __init__(
        self,
        *,
        registry: AddonRegistryPort,
        client: AddonClientPort,
        timeout_seconds: float = 8.0,
    ) -> None:
        self._registry = registry
        self._client = client
        self._timeout = timeout_seconds

    async def _fetch(self, addon_id: str, resource: str, type_: str, item_id: str) -> Any:
        manifest = self._registry.get(addon_id)
        if manifest is None or not manifest.supports(resource):
            log.debug("addon_resource_unsupported", addon_id=addon_id, resource=resource)
            return None
        url = f"{manifest.base_url}/{resource}/{type_}/{item_id}.json"
        try:
            return await self._client.get_json(url, timeout=self._timeout)
        except AddonarrError as e:
            log.warning(
                "addon_resource_fetch_failed",
                addon_id=addon_id,
                resource=resource,
                error=str(e),
            )
            return None

    async def meta(self, addon_id: str, type_: str, item_id: str) -> MetaItem | None:
        payload = await self._fetch(addon_id, "meta", type_, item_id)
        return parse_meta(payload, type_, item_id) if payload is not None else None

    async def subtitles(self, addon_id: str, type_: str, item_id: str) -> list[Subtitle]:
        payload = await self._fetch(addon_id, "subtitles", type_, item_id)
        return parse_subtitles(payload) if payload is not None else []
