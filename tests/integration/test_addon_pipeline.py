"""Integration tests for registry persistence and stream aggregation.

Real ManifestRegistry, DiskcacheManifestStore, HttpxAddonClient and
normalizer; only the addon HTTP endpoints are mocked.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

from addonarr.application.use_cases import TEST_STREAM, StreamAggregator
from addonarr.domain.entities import InvalidManifest, StreamKind
from addonarr.infrastructure.addons.client import HttpxAddonClient
from addonarr.infrastructure.addons.registry import ManifestRegistry
from addonarr.infrastructure.circuit_breaker import AddonCircuitBreaker
from addonarr.infrastructure.config import AddonsConfig
from addonarr.infrastructure.persistence.manifest_store import DiskcacheManifestStore
from addonarr.infrastructure.streams.normalizer import normalize

pytestmark = pytest.mark.integration

_ALPHA = "https://alpha.example.com"
_BRAVO = "https://bravo.example.com"
_HASH = "0123456789abcdef0123456789abcdef01234567"


def _manifest(addon_id: str, name: str) -> dict:
    return {
        "id": addon_id,
        "version": "1.0.0",
        "name": name,
        "resources": ["stream"],
        "types": ["movie", "series"],
        "catalogs": [],
    }


def _mock_addons(router: respx.MockRouter) -> None:
    router.get(f"{_ALPHA}/manifest.json").mock(
        return_value=httpx.Response(200, json=_manifest("org.alpha", "Alpha"))
    )
    router.get(f"{_BRAVO}/manifest.json").mock(
        return_value=httpx.Response(200, json=_manifest("org.bravo", "Bravo"))
    )


class TestRegistryPersistence:
    @pytest.mark.asyncio()
    async def test_added_addons_survive_restart(
        self,
        respx_mock: respx.MockRouter,
        http_addon_client: HttpxAddonClient,
        disk_store: DiskcacheManifestStore,
        registry_dir: Path,
    ) -> None:
        _mock_addons(respx_mock)
        registry = ManifestRegistry(client=http_addon_client, store=disk_store)

        await registry.add(f"{_ALPHA}/")
        await registry.add(_BRAVO)
        await registry.remove("org.alpha")
        await disk_store.aclose()

        async with DiskcacheManifestStore(registry_dir) as reopened:
            restored = ManifestRegistry(client=http_addon_client, store=reopened)
            assert await restored.load() == 1
            (manifest,) = restored.all()

        assert manifest.id == "org.bravo"
        assert manifest.base_url == _BRAVO
        assert manifest.supports("stream")

    @pytest.mark.asyncio()
    async def test_unreachable_manifest_is_invalid(
        self,
        respx_mock: respx.MockRouter,
        http_addon_client: HttpxAddonClient,
        disk_store: DiskcacheManifestStore,
    ) -> None:
        respx_mock.get(f"{_ALPHA}/manifest.json").mock(return_value=httpx.Response(500))
        registry = ManifestRegistry(client=http_addon_client, store=disk_store)

        with pytest.raises(InvalidManifest):
            await registry.add(_ALPHA)

        assert registry.all() == []
        assert await disk_store.load() == []


class TestStreamAggregation:
    @pytest.mark.asyncio()
    async def test_merges_addons_and_tries_alternate_paths(
        self,
        respx_mock: respx.MockRouter,
        http_addon_client: HttpxAddonClient,
        disk_store: DiskcacheManifestStore,
    ) -> None:
        _mock_addons(respx_mock)
        respx_mock.get(f"{_ALPHA}/stream/movie/tt0111161.json").mock(
            return_value=httpx.Response(
                200,
                json={"streams": [{"infoHash": _HASH, "title": "Movie 2160p", "seeders": 40}]},
            )
        )
        respx_mock.get(f"{_BRAVO}/stream/movie/tt0111161.json").mock(
            return_value=httpx.Response(404)
        )
        alternate = respx_mock.get(f"{_BRAVO}/stream/movie/tt0111161").mock(
            return_value=httpx.Response(
                200, json={"data": {"sources": [{"file": "https://cdn.bravo/m.m3u8"}]}}
            )
        )

        registry = ManifestRegistry(client=http_addon_client, store=disk_store)
        await registry.add(_ALPHA)
        await registry.add(_BRAVO)
        aggregator = StreamAggregator(
            registry=registry,
            client=http_addon_client,
            normalize_fn=normalize,
            config=AddonsConfig(fallback_stream_addon_url=None, stream_timeout_seconds=2.0),
            breaker=AddonCircuitBreaker(),
        )

        streams = await aggregator.find_streams("movie", "tmdb-278-tt0111161")

        assert [s.source_addon_id for s in streams] == ["org.alpha", "org.bravo"]
        assert streams[0].kind is StreamKind.TORRENT
        assert _HASH in streams[0].url
        assert streams[1].url == "https://cdn.bravo/m.m3u8"
        assert streams[1].kind is StreamKind.HLS
        assert alternate.called

    @pytest.mark.asyncio()
    async def test_all_failing_yields_test_stream(
        self,
        respx_mock: respx.MockRouter,
        http_addon_client: HttpxAddonClient,
        disk_store: DiskcacheManifestStore,
    ) -> None:
        respx_mock.get(f"{_ALPHA}/manifest.json").mock(
            return_value=httpx.Response(200, json=_manifest("org.alpha", "Alpha"))
        )
        respx_mock.get(url__startswith=f"{_ALPHA}/").mock(return_value=httpx.Response(503))

        registry = ManifestRegistry(client=http_addon_client, store=disk_store)
        await registry.add(_ALPHA)
        aggregator = StreamAggregator(
            registry=registry,
            client=http_addon_client,
            normalize_fn=normalize,
            config=AddonsConfig(fallback_stream_addon_url=None, stream_timeout_seconds=2.0),
        )

        assert await aggregator.find_streams("movie", "tt1") == [TEST_STREAM]
