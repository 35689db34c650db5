"""Tests for ManifestRegistry."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from addonarr.domain.entities import InvalidManifest, NetworkFailure
from addonarr.domain.ports import AddonRegistryPort
from addonarr.infrastructure.addons.registry import ManifestRegistry
from addonarr.infrastructure.persistence.manifest_store import InMemoryManifestStore

_URL = "https://cinema.example.com/manifest.json"


class TestAdd:
    def test_satisfies_port(self, registry: ManifestRegistry) -> None:
        assert isinstance(registry, AddonRegistryPort)

    @pytest.mark.asyncio
    async def test_registers_and_persists(
        self, registry, addon_client, manifest_store, manifest_payload
    ) -> None:
        addon_client.responses[_URL] = manifest_payload

        manifest = await registry.add("https://cinema.example.com/")

        assert manifest.id == "org.example.cinema"
        assert registry.get("org.example.cinema") == manifest
        assert [m["id"] for m in await manifest_store.load()] == ["org.example.cinema"]
        assert addon_client.urls == [_URL]

    @pytest.mark.asyncio
    async def test_readd_replaces_in_place(
        self, registry, addon_client, manifest_payload
    ) -> None:
        other = dict(manifest_payload, id="org.example.other")
        addon_client.responses[_URL] = manifest_payload
        addon_client.responses["https://other.example.com/manifest.json"] = other
        await registry.add(_URL)
        await registry.add("https://other.example.com")

        addon_client.responses[_URL] = dict(manifest_payload, version="2.0.0")
        await registry.add(_URL)

        assert [m.id for m in registry.all()] == ["org.example.cinema", "org.example.other"]
        assert registry.get("org.example.cinema").version == "2.0.0"

    @pytest.mark.asyncio
    async def test_network_failure_is_invalid_manifest(
        self, registry, addon_client, manifest_store
    ) -> None:
        addon_client.responses[_URL] = NetworkFailure(_URL, "timeout")

        with pytest.raises(InvalidManifest) as exc_info:
            await registry.add(_URL)

        assert exc_info.value.reason == "timeout"
        assert registry.all() == []
        assert await manifest_store.load() == []

    @pytest.mark.asyncio
    async def test_missing_version_is_invalid(
        self, registry, addon_client, manifest_payload
    ) -> None:
        del manifest_payload["version"]
        addon_client.responses[_URL] = manifest_payload

        with pytest.raises(InvalidManifest, match="version"):
            await registry.add(_URL)
        assert registry.all() == []

    @pytest.mark.asyncio
    async def test_concurrent_adds(self, registry, addon_client, manifest_payload) -> None:
        urls = [f"https://a{i}.example.com/manifest.json" for i in range(5)]
        for i, url in enumerate(urls):
            addon_client.responses[url] = dict(manifest_payload, id=f"addon.{i}")

        await asyncio.gather(*(registry.add(u) for u in urls))

        assert sorted(m.id for m in registry.all()) == [f"addon.{i}" for i in range(5)]


class TestRemove:
    @pytest.mark.asyncio
    async def test_remove_notifies_listeners(
        self, registry, addon_client, manifest_store, manifest_payload
    ) -> None:
        removed: list[str] = []
        registry.on_remove(removed.append)
        addon_client.responses[_URL] = manifest_payload
        await registry.add(_URL)

        assert await registry.remove("org.example.cinema") is True

        assert registry.get("org.example.cinema") is None
        assert await manifest_store.load() == []
        assert removed == ["org.example.cinema"]

    @pytest.mark.asyncio
    async def test_remove_unknown(self, registry) -> None:
        assert await registry.remove("missing") is False


class TestQueries:
    @pytest.mark.asyncio
    async def test_supports_and_find_catalog(
        self, registry, addon_client, manifest_payload
    ) -> None:
        addon_client.responses[_URL] = manifest_payload
        await registry.add(_URL)

        assert registry.supports("org.example.cinema", "catalog") is True
        assert registry.supports("org.example.cinema", "stream") is False
        assert registry.supports("missing", "catalog") is False
        assert registry.find_catalog("movie", "top").id == "org.example.cinema"
        assert registry.find_catalog("series", "top") is None


class TestLoad:
    @pytest.mark.asyncio
    async def test_restores_in_order_and_skips_invalid(self, addon_client) -> None:
        persisted: list[dict[str, Any]] = [
            {"id": "b", "version": "1", "name": "B", "baseUrl": "https://b"},
            {"id": "broken"},
            {"id": "a", "version": "1", "name": "A", "baseUrl": "https://a"},
        ]
        registry = ManifestRegistry(
            client=addon_client, store=InMemoryManifestStore(persisted)
        )

        assert await registry.load() == 2
        assert [m.id for m in registry.all()] == ["b", "a"]
