"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from addonarr.application.use_cases import (
    CatalogResolver,
    DebridResolver,
    MetaResolver,
    PlaybackHandoff,
    StreamAggregator,
)
from addonarr.domain.entities.errors import InvalidManifest
from addonarr.infrastructure.addons.client import HttpxAddonClient
from addonarr.infrastructure.addons.registry import ManifestRegistry
from addonarr.infrastructure.circuit_breaker import AddonCircuitBreaker
from addonarr.infrastructure.config.schema import AppConfig
from addonarr.infrastructure.debrid import (
    AllDebridClient,
    PremiumizeClient,
    RealDebridClient,
    StaticCredentialSource,
)
from addonarr.infrastructure.persistence.manifest_store import DiskcacheManifestStore
from addonarr.infrastructure.players import NullPlayerLauncher, SystemPlayerLauncher
from addonarr.infrastructure.streams.normalizer import normalize
from addonarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


async def _seed_default_addons(registry: ManifestRegistry, config: AppConfig) -> None:
    """Install the configured default addons into an empty registry."""
    if registry.all():
        return
    for url in config.addons.default_urls:
        try:
            await registry.add(url)
        except InvalidManifest as e:
            log.warning("default_addon_unavailable", url=url, reason=e.reason)


def _wire_debrid(state: AppState, config: AppConfig) -> DebridResolver:
    timeout = config.debrid.timeout_seconds
    providers = [
        RealDebridClient(http_client=state.http_client, timeout_seconds=timeout),
        AllDebridClient(
            http_client=state.http_client,
            agent=config.debrid.agent,
            timeout_seconds=timeout,
        ),
        PremiumizeClient(http_client=state.http_client, timeout_seconds=timeout),
    ]
    credentials = StaticCredentialSource.from_config(config.debrid)
    log.info(
        "debrid_configured",
        providers=[p.value for p in credentials.configured()],
    )
    return DebridResolver(providers=providers, credentials=credentials)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (shared by addons and debrid providers)
        2. Manifest store + registry (restored, then seeded)
        3. Use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)
    addon_client = HttpxAddonClient(
        http_client=state.http_client,
        default_timeout=config.http_timeout_seconds,
    )

    # 2) Registry
    state.manifest_store = DiskcacheManifestStore(config.storage_dir / "registry")
    await state.manifest_store.__aenter__()

    state.registry = ManifestRegistry(
        client=addon_client,
        store=state.manifest_store,
        timeout_seconds=config.http_timeout_seconds,
    )
    await state.registry.load()
    await _seed_default_addons(state.registry, config)

    state.circuit_breaker = AddonCircuitBreaker(
        failure_threshold=config.addons.breaker_failure_threshold,
        cooldown_seconds=config.addons.breaker_cooldown_seconds,
    )
    state.registry.on_remove(state.circuit_breaker.forget)

    # 3) Use cases
    state.catalog_uc = CatalogResolver(
        registry=state.registry,
        client=addon_client,
        page_size=config.addons.catalog_page_size,
        timeout_seconds=config.http_timeout_seconds,
    )
    state.meta_uc = MetaResolver(
        registry=state.registry,
        client=addon_client,
        timeout_seconds=config.http_timeout_seconds,
    )
    state.stream_uc = StreamAggregator(
        registry=state.registry,
        client=addon_client,
        normalize_fn=normalize,
        config=config.addons,
        breaker=state.circuit_breaker,
    )
    state.debrid_uc = _wire_debrid(state, config)
    launcher = (
        SystemPlayerLauncher()
        if config.player.launch_mode == "system"
        else NullPlayerLauncher()
    )
    state.playback_uc = PlaybackHandoff(
        resolver=state.debrid_uc,
        launcher=launcher,
        settings=config.player,
    )
    log.info("use_cases_initialized", addons=len(state.registry.all()))

    try:
        yield
    finally:
        cancelled = state.stream_uc.cancel_all()
        if cancelled:
            log.info("stream_searches_cancelled", count=cancelled)

        await state.playback_uc.aclose()

        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.manifest_store.aclose()

        log.info("app_shutdown_complete")
