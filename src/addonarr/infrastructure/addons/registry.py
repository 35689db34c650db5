"""Process-wide registry of installed addons."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from addonarr.domain.entities.addon import AddonManifest
from addonarr.domain.entities.errors import InvalidManifest, NetworkFailure
from addonarr.domain.ports.addon_client import AddonClientPort
from addonarr.domain.ports.manifest_store import ManifestStorePort

from .manifest import normalize_manifest_url, parse_manifest

log = structlog.get_logger(__name__)

RemovalListener = Callable[[str], None]


class ManifestRegistry:
    """
    Registry of addon manifests keyed by id, in registration order.

    add()/remove():
      - serialized by a lock; the manifest mapping is swapped copy-on-write,
        so readers always see either the old or the new registry.
      - persisted through the injected ManifestStorePort.

    get()/all()/supports()/find_catalog():
      - synchronous reads of the current snapshot (no I/O).
    """

    def __init__(
        self,
        *,
        client: AddonClientPort,
        store: ManifestStorePort,
        timeout_seconds: float = 8.0,
    ) -> None:
        self._client = client
        self._store = store
        self._timeout = timeout_seconds
        self._manifests: dict[str, AddonManifest] = {}
        self._lock = asyncio.Lock()
        self._removal_listeners: list[RemovalListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> int:
        """Restore persisted manifests. Returns the number restored."""
        restored: dict[str, AddonManifest] = {}
        for data in await self._store.load():
            try:
                manifest = AddonManifest.from_dict(data)
            except (KeyError, TypeError, ValueError):
                log.warning("persisted_manifest_invalid", data_id=data.get("id"))
                continue
            restored[manifest.id] = manifest

        async with self._lock:
            self._manifests = restored
        log.info("addon_registry_loaded", count=len(restored))
        return len(restored)

    def on_remove(self, listener: RemovalListener) -> None:
        """Register a callback invoked with the id of every removed addon."""
        self._removal_listeners.append(listener)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    async def add(self, url: str) -> AddonManifest:
        manifest_url = normalize_manifest_url(url)
        try:
            payload = await self._client.get_json(manifest_url, timeout=self._timeout)
        except NetworkFailure as e:
            log.warning("addon_manifest_fetch_failed", url=manifest_url, reason=e.reason)
            raise InvalidManifest(manifest_url, e.reason) from e

        try:
            manifest = parse_manifest(payload, manifest_url)
        except ValueError as e:
            log.warning("addon_manifest_invalid", url=manifest_url, reason=str(e))
            raise InvalidManifest(manifest_url, str(e)) from e

        async with self._lock:
            await self._store.save(manifest.to_dict())
            updated = dict(self._manifests)
            replaced = manifest.id in updated
            updated[manifest.id] = manifest
            self._manifests = updated

        log.info(
            "addon_registered",
            addon_id=manifest.id,
            version=manifest.version,
            replaced=replaced,
            resources=sorted(manifest.resources),
        )
        return manifest

    async def remove(self, addon_id: str) -> bool:
        async with self._lock:
            if addon_id not in self._manifests:
                return False
            await self._store.delete(addon_id)
            updated = dict(self._manifests)
            del updated[addon_id]
            self._manifests = updated

        for listener in self._removal_listeners:
            listener(addon_id)
        log.info("addon_removed", addon_id=addon_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, addon_id: str) -> AddonManifest | None:
        return self._manifests.get(addon_id)

    def all(self) -> list[AddonManifest]:
        return list(self._manifests.values())

    def supports(self, addon_id: str, resource: str) -> bool:
        manifest = self._manifests.get(addon_id)
        return manifest is not None and manifest.supports(resource)

    def find_catalog(self, type_: str, catalog_id: str) -> AddonManifest | None:
        for manifest in self._manifests.values():
            if manifest.supports("catalog") and manifest.catalog(type_, catalog_id):
                return manifest
        return None
