"""Shared test fixtures for the Addonarr test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import pytest

from addonarr.domain.entities import (
    AddonManifest,
    CatalogDescriptor,
    ExtraParamSpec,
    NetworkFailure,
)
from addonarr.infrastructure.addons.registry import ManifestRegistry
from addonarr.infrastructure.persistence.manifest_store import InMemoryManifestStore

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeAddonClient:
    """Scripted AddonClientPort keyed by full URL.

    A scripted value may be a payload, an exception instance (raised), or
    a zero-argument coroutine function (awaited, so tests can add delays).
    Unscripted URLs answer like a 404.
    """

    def __init__(self, responses: Mapping[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        self.calls.append((url, dict(params) if params else None))
        if url not in self.responses:
            raise NetworkFailure(url, "HTTP 404", status_code=404)
        value = self.responses[url]
        if isinstance(value, BaseException):
            raise value
        if callable(value):
            return await value()
        return value

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


def delayed(seconds: float, payload: Any) -> Callable[[], Awaitable[Any]]:
    """Scripted response that answers after *seconds*."""

    async def _respond() -> Any:
        await asyncio.sleep(seconds)
        return payload

    return _respond


def make_manifest(
    addon_id: str = "org.example.addon",
    *,
    base_url: str | None = None,
    name: str | None = None,
    resources: tuple[str, ...] = ("catalog", "meta"),
    catalogs: tuple[tuple[str, str], ...] = (("movie", "top"),),
    version: str = "1.0.0",
) -> AddonManifest:
    return AddonManifest(
        id=addon_id,
        version=version,
        name=name or addon_id,
        base_url=base_url or f"https://{addon_id}.example.com",
        resources=frozenset(resources),
        types=frozenset({"movie", "series"}),
        catalogs=tuple(
            CatalogDescriptor(
                type=t,
                id=c,
                name=c.title(),
                extra_params=(ExtraParamSpec(name="search"),),
            )
            for t, c in catalogs
        ),
    )


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def manifest_payload() -> dict[str, Any]:
    """Minimal valid raw manifest body as served by an addon."""
    return {
        "id": "org.example.cinema",
        "version": "1.2.0",
        "name": "Example Cinema",
        "description": "Movie catalogs",
        "resources": ["catalog", {"name": "meta", "types": ["movie"]}],
        "types": ["movie", "series"],
        "catalogs": [
            {
                "type": "movie",
                "id": "top",
                "name": "Top Movies",
                "extra": [{"name": "search", "isRequired": False}],
            }
        ],
        "idPrefixes": ["tt"],
    }


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def addon_client() -> FakeAddonClient:
    return FakeAddonClient()


@pytest.fixture()
def manifest_store() -> InMemoryManifestStore:
    return InMemoryManifestStore()


@pytest.fixture()
def registry(
    addon_client: FakeAddonClient, manifest_store: InMemoryManifestStore
) -> ManifestRegistry:
    return ManifestRegistry(client=addon_client, store=manifest_store)


@pytest.fixture()
def manifest_factory() -> Callable[..., AddonManifest]:
    """The ``make_manifest`` builder, for tests that need several addons."""
    return make_manifest


@pytest.fixture()
def delayed_response() -> Callable[[float, Any], Callable[[], Awaitable[Any]]]:
    return delayed


@pytest.fixture()
def seed_registry(
    registry: ManifestRegistry, manifest_store: InMemoryManifestStore
) -> Callable[..., Awaitable[ManifestRegistry]]:
    """Persist manifests and reload the registry from the store."""

    async def _seed(*manifests: AddonManifest) -> ManifestRegistry:
        for manifest in manifests:
            await manifest_store.save(manifest.to_dict())
        await registry.load()
        return registry

    return _seed
