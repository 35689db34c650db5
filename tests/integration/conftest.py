"""Shared fixtures for integration tests.

These tests use real infrastructure components (DiskcacheManifestStore,
HttpxAddonClient, ManifestRegistry) with mocked HTTP via respx.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

from addonarr.infrastructure.addons.client import HttpxAddonClient
from addonarr.infrastructure.persistence.manifest_store import DiskcacheManifestStore


@pytest.fixture()
def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    return httpx.AsyncClient()


@pytest.fixture()
def http_addon_client(http_client: httpx.AsyncClient) -> HttpxAddonClient:
    return HttpxAddonClient(http_client=http_client, default_timeout=2.0)


@pytest.fixture()
def registry_dir(tmp_path: Path) -> Path:
    return tmp_path / "registry"


@pytest.fixture()
async def disk_store(registry_dir: Path) -> DiskcacheManifestStore:
    """Real DiskcacheManifestStore backed by tmp_path (auto-cleaned)."""
    store = DiskcacheManifestStore(registry_dir)
    async with store:
        yield store


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router
