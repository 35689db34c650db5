"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from addonarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from addonarr.application.use_cases import (
        CatalogResolver,
        DebridResolver,
        MetaResolver,
        PlaybackHandoff,
        StreamAggregator,
    )
    from addonarr.infrastructure.addons.registry import ManifestRegistry
    from addonarr.infrastructure.circuit_breaker import AddonCircuitBreaker
    from addonarr.infrastructure.persistence.manifest_store import (
        DiskcacheManifestStore,
    )


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    manifest_store: DiskcacheManifestStore
    circuit_breaker: AddonCircuitBreaker

    # Addon registry
    registry: ManifestRegistry

    # Use cases
    catalog_uc: CatalogResolver
    meta_uc: MetaResolver
    stream_uc: StreamAggregator
    debrid_uc: DebridResolver
    playback_uc: PlaybackHandoff
