"""Catalog browsing use case: one addon catalog page as ``CatalogItem``s."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import structlog

from addonarr.domain.entities.addon import AddonManifest, CatalogItem, ContentType
from addonarr.domain.entities.errors import (
    AddonarrError,
    UnknownAddon,
    UnsupportedResource,
)
from addonarr.domain.ports.addon_client import AddonClientPort
from addonarr.domain.ports.addon_registry import AddonRegistryPort

log = structlog.get_logger(__name__)

PLACEHOLDER_COUNT = 10
PLACEHOLDER_POSTER = "/placeholder-poster.svg"
UNKNOWN_TITLE = "Unknown Title"

_LEADING_YEAR_RE = re.compile(r"^\s*(\d{4})")


def placeholder_items(type_: str) -> list[CatalogItem]:
    """Deterministic stand-in row shown when a catalog cannot be loaded."""
    content_type: ContentType = "series" if type_ == "series" else "movie"
    label = "Series" if content_type == "series" else "Movie"
    return [
        CatalogItem(
            id=f"tt{1000000 + i}",
            title=f"Sample {label} {i}",
            type=content_type,
            poster=PLACEHOLDER_POSTER,
            year=2023 - (i % 5),
            rating=round(8.5 - (i % 5) * 0.3, 1),
        )
        for i in range(1, PLACEHOLDER_COUNT + 1)
    ]


def _parse_rating(raw: Any) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _parse_year(meta: Mapping[str, Any]) -> int | None:
    year = meta.get("year")
    if isinstance(year, int):
        return year
    for raw in (year, meta.get("releaseInfo")):
        if isinstance(raw, str):
            m = _LEADING_YEAR_RE.match(raw)
            if m:
                return int(m.group(1))
    return None


def _to_item(meta: Mapping[str, Any], requested_type: str) -> CatalogItem | None:
    item_id = meta.get("id")
    if not isinstance(item_id, str) or not item_id:
        return None
    raw_type = meta.get("type", requested_type)
    content_type: ContentType = "series" if raw_type == "series" else "movie"
    title = meta.get("name") or meta.get("title") or UNKNOWN_TITLE
    poster = meta.get("poster")
    return CatalogItem(
        id=item_id,
        title=str(title),
        type=content_type,
        poster=poster if isinstance(poster, str) and poster else None,
        year=_parse_year(meta),
        rating=_parse_rating(meta.get("imdbRating")),
    )


def _metas_of(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("metas"), list):
        return payload["metas"]
    return []


class CatalogResolver:
    """Fetch catalog pages from registered addons.

    ``resolve()`` never raises: on any failure it logs and returns the
    placeholder row.  ``resolve_strict()`` surfaces the error instead.
    """

    def __init__(
        self,
        *,
        registry: AddonRegistryPort,
        client: AddonClientPort,
        page_size: int = 100,
        timeout_seconds: float = 8.0,
    ) -> None:
        self._registry = registry
        self._client = client
        self._page_size = page_size
        self._timeout = timeout_seconds

    def _catalog_addon(self, addon_id: str, type_: str, catalog_id: str) -> AddonManifest:
        manifest = self._registry.get(addon_id)
        if manifest is None:
            raise UnknownAddon(addon_id)
        if not manifest.supports("catalog"):
            raise UnsupportedResource(addon_id, "catalog")
        if manifest.catalog(type_, catalog_id) is None:
            raise UnsupportedResource(addon_id, f"catalog {type_}/{catalog_id}")
        return manifest

    def _params(self, extra: Mapping[str, Any] | None) -> dict[str, Any]:
        if extra:
            return {k: v for k, v in extra.items() if v is not None}
        return {"skip": 0, "limit": self._page_size}

    async def resolve_strict(
        self,
        addon_id: str,
        type_: str,
        catalog_id: str,
        extra: Mapping[str, Any] | None = None,
    ) -> list[CatalogItem]:
        """Fetch one catalog page.

        Raises:
            UnknownAddon: ``addon_id`` is not registered.
            UnsupportedResource: no ``catalog`` resource or no such catalog.
            NetworkFailure: transport error, non-2xx or undecodable body.
        """
        manifest = self._catalog_addon(addon_id, type_, catalog_id)
        url = f"{manifest.base_url}/catalog/{type_}/{catalog_id}.json"
        payload = await self._client.get_json(
            url, params=self._params(extra), timeout=self._timeout
        )
        items: list[CatalogItem] = []
        for meta in _metas_of(payload):
            if not isinstance(meta, Mapping):
                continue
            item = _to_item(meta, type_)
            if item is not None:
                items.append(item)

        log.debug(
            "catalog_resolved", addon_id=addon_id, catalog=catalog_id, count=len(items)
        )
        return items

    async def resolve(
        self,
        addon_id: str,
        type_: str,
        catalog_id: str,
        extra: Mapping[str, Any] | None = None,
    ) -> list[CatalogItem]:
        """Fetch one catalog page, substituting placeholders on any failure."""
        try:
            return await self.resolve_strict(addon_id, type_, catalog_id, extra)
        except AddonarrError as e:
            log.warning(
                "catalog_resolve_failed",
                addon_id=addon_id,
                type=type_,
                catalog=catalog_id,
                error=str(e),
            )
            return placeholder_items(type_)

    async def resolve_by_catalog(
        self,
        type_: str,
        catalog_id: str,
        extra: Mapping[str, Any] | None = None,
    ) -> list[CatalogItem]:
        """Resolve a catalog without knowing which addon serves it."""
        manifest = self._registry.find_catalog(type_, catalog_id)
        if manifest is None:
            log.warning("catalog_owner_not_found", type=type_, catalog=catalog_id)
            return placeholder_items(type_)
        return await self.resolve(manifest.id, type_, catalog_id, extra)

