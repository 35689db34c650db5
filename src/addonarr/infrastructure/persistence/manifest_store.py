"""Addon registry persistence (diskcache or in-memory)."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)

_REGISTRY_KEY = "addons:registry"


def _upsert(entries: list[dict[str, Any]], manifest: dict[str, Any]) -> None:
    """Replace the entry with the same id in place, else append."""
    for i, existing in enumerate(entries):
        if existing.get("id") == manifest["id"]:
            entries[i] = manifest
            return
    entries.append(manifest)


class InMemoryManifestStore:
    """Process-local store; state dies with the process."""

    def __init__(self, initial: list[dict[str, Any]] | None = None) -> None:
        self._entries: list[dict[str, Any]] = [dict(m) for m in initial or ()]

    async def load(self) -> list[dict[str, Any]]:
        return [dict(m) for m in self._entries]

    async def save(self, manifest: dict[str, Any]) -> None:
        _upsert(self._entries, dict(manifest))

    async def delete(self, addon_id: str) -> None:
        self._entries = [m for m in self._entries if m.get("id") != addon_id]


class DiskcacheManifestStore:
    """SQLite-backed store via ``diskcache`` (sync library, run in threads).

    The whole registry is kept under a single key as a JSON list so that
    insertion order survives restarts.  A lock serializes the
    read-modify-write cycles of ``save``/``delete``.

    Use as ``async with DiskcacheManifestStore(path) as store:``.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._cache: DiskCache | None = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> DiskcacheManifestStore:
        if self._cache is None:
            self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info("manifest_store_opened", path=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("manifest_store_closed", path=str(self.directory))

    def _require_open(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                "Manifest store not opened. Use 'async with store:' first."
            )
        return self._cache

    async def _read(self) -> list[dict[str, Any]]:
        cache = self._require_open()
        raw = await asyncio.to_thread(cache.get, _REGISTRY_KEY, default=None)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            log.error("manifest_store_corrupt", error=str(e))
            return []
        if not isinstance(entries, list):
            log.error("manifest_store_corrupt", error="registry is not a list")
            return []
        return [e for e in entries if isinstance(e, dict) and "id" in e]

    async def _write(self, entries: list[dict[str, Any]]) -> None:
        cache = self._require_open()
        await asyncio.to_thread(cache.set, _REGISTRY_KEY, json.dumps(entries))

    async def load(self) -> list[dict[str, Any]]:
        entries = await self._read()
        log.debug("manifest_store_loaded", count=len(entries))
        return entries

    async def save(self, manifest: dict[str, Any]) -> None:
        async with self._lock:
            entries = await self._read()
            _upsert(entries, manifest)
            await self._write(entries)
        log.debug("manifest_saved", addon_id=manifest["id"])

    async def delete(self, addon_id: str) -> None:
        async with self._lock:
            entries = await self._read()
            remaining = [m for m in entries if m.get("id") != addon_id]
            if len(remaining) != len(entries):
                await self._write(remaining)
                log.debug("manifest_deleted", addon_id=addon_id)
