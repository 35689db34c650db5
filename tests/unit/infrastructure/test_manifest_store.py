"""Tests for the manifest stores."""

from __future__ import annotations

from pathlib import Path

import pytest

from addonarr.domain.ports import ManifestStorePort
from addonarr.infrastructure.persistence.manifest_store import (
    DiskcacheManifestStore,
    InMemoryManifestStore,
)


def _m(addon_id: str, version: str = "1.0.0") -> dict:
    return {"id": addon_id, "version": version, "baseUrl": f"https://{addon_id}"}


class TestInMemoryManifestStore:
    def test_satisfies_port(self) -> None:
        assert isinstance(InMemoryManifestStore(), ManifestStorePort)

    @pytest.mark.asyncio
    async def test_upsert_keeps_position(self) -> None:
        store = InMemoryManifestStore([_m("a"), _m("b")])
        await store.save(_m("a", "2.0.0"))
        loaded = await store.load()
        assert [(m["id"], m["version"]) for m in loaded] == [("a", "2.0.0"), ("b", "1.0.0")]

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        store = InMemoryManifestStore([_m("a")])
        await store.delete("a")
        await store.delete("missing")
        assert await store.load() == []


class TestDiskcacheManifestStore:
    @pytest.mark.asyncio
    async def test_round_trip_across_instances(self, tmp_path: Path) -> None:
        async with DiskcacheManifestStore(tmp_path / "registry") as store:
            await store.save(_m("b"))
            await store.save(_m("a"))
            await store.save(_m("b", "2.0.0"))

        async with DiskcacheManifestStore(tmp_path / "registry") as store:
            loaded = await store.load()

        assert [(m["id"], m["version"]) for m in loaded] == [("b", "2.0.0"), ("a", "1.0.0")]

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path: Path) -> None:
        async with DiskcacheManifestStore(tmp_path) as store:
            await store.save(_m("a"))
            await store.save(_m("b"))
            await store.delete("a")
            assert [m["id"] for m in await store.load()] == ["b"]

    @pytest.mark.asyncio
    async def test_empty(self, tmp_path: Path) -> None:
        async with DiskcacheManifestStore(tmp_path) as store:
            assert await store.load() == []

    @pytest.mark.asyncio
    async def test_corrupt_payload_treated_as_empty(self, tmp_path: Path) -> None:
        async with DiskcacheManifestStore(tmp_path) as store:
            store._require_open().set("addons:registry", "{not json")
            assert await store.load() == []

    @pytest.mark.asyncio
    async def test_requires_open(self, tmp_path: Path) -> None:
        store = DiskcacheManifestStore(tmp_path)
        with pytest.raises(RuntimeError):
            await store.load()
