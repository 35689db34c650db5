"""Stream search use case: fan out to every stream-capable addon.

Flow:
    1. Select eligible addons (declared ``stream`` resource or heuristic match)
       and make sure the fallback torrent-indexing addon is registered.
    2. Rewrite composite ids to their embedded IMDb id.
    3. Query all addons concurrently, trying alternate path templates for
       non-canonical providers; each template request has its own deadline.
    4. Normalize every response; failures are logged and excluded.
    5. Concatenate in registry order; synthesize a test stream if empty.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Sequence
from typing import Any, Protocol

import structlog

from addonarr.application.fallback import settle_all
from addonarr.domain.entities.addon import AddonManifest, looks_like_stream_provider
from addonarr.domain.entities.errors import (
    AddonarrError,
    NetworkFailure,
    NormalizationEmpty,
)
from addonarr.domain.entities.stream import StreamCandidate, StreamKind
from addonarr.domain.ports.addon_client import AddonClientPort
from addonarr.domain.ports.addon_registry import AddonRegistryPort

log = structlog.get_logger(__name__)

_IMDB_ID_RE = re.compile(r"tt\d+")

# Templates tried, in order, for providers not known to be canonical.
ALTERNATE_PATH_TEMPLATES: tuple[str, ...] = (
    "/stream/{type}/{id}",
    "/streams/{type}/{id}",
    "/api/stream/{type}/{id}",
)
CANONICAL_PATH_TEMPLATE = "/stream/{type}/{id}.json"

TEST_STREAM = StreamCandidate(
    source_addon_id="builtin",
    url="https://test-streams.mux.dev/x36xhzz/x36xhzz.m3u8",
    title="Test Stream (HLS)",
    quality="HD",
    kind=StreamKind.HLS,
)

# Normalizer callback: (payload, addon_id=, addon_name=) -> candidates.
NormalizeFn = Callable[..., list[StreamCandidate]]


class _StreamSearchConfig(Protocol):
    stream_timeout_seconds: float
    fallback_stream_addon_url: str | None
    canonical_hosts: list[str]


class _Breaker(Protocol):
    def allow(self, addon_id: str) -> bool: ...
    def record_success(self, addon_id: str) -> None: ...
    def record_failure(self, addon_id: str) -> None: ...


def query_id_for(item_id: str) -> str:
    """Extract the IMDb id embedded in a composite id (e.g. ``tmdb-1-tt123``).

    Plain IMDb ids, including series episode ids like ``tt123:1:2``, are
    returned unchanged.
    """
    if item_id.startswith("tt"):
        return item_id
    m = _IMDB_ID_RE.search(item_id)
    return m.group(0) if m else item_id


def _base_of(manifest_url: str) -> str:
    return manifest_url.rstrip("/").removesuffix("/manifest.json")


class StreamAggregator:
    """Collect stream candidates for ``(type, id)`` from all eligible addons.

    Identical concurrent searches share one in-flight task.  ``cancel()``
    aborts a search for every caller waiting on it.
    """

    def __init__(
        self,
        *,
        registry: AddonRegistryPort,
        client: AddonClientPort,
        normalize_fn: NormalizeFn,
        config: _StreamSearchConfig,
        breaker: _Breaker | None = None,
    ) -> None:
        self._registry = registry
        self._client = client
        self._normalize = normalize_fn
        self._timeout = config.stream_timeout_seconds
        self._fallback_url = config.fallback_stream_addon_url
        self._canonical_hosts = tuple(h.lower() for h in config.canonical_hosts)
        self._breaker = breaker
        self._inflight: dict[tuple[str, str], asyncio.Task[list[StreamCandidate]]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def find_streams(self, type_: str, item_id: str) -> list[StreamCandidate]:
        key = (type_, item_id)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._search(type_, item_id))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            log.debug("stream_search_coalesced", type=type_, id=item_id)
        # Shield: one caller going away must not cancel the shared search.
        return await asyncio.shield(task)

    def cancel(self, type_: str, item_id: str) -> bool:
        """Abort the in-flight search for ``(type, id)``; False if none."""
        task = self._inflight.get((type_, item_id))
        if task is None or task.done():
            return False
        task.cancel()
        log.info("stream_search_cancelled", type=type_, id=item_id)
        return True

    def cancel_all(self) -> int:
        cancelled = 0
        for task in list(self._inflight.values()):
            if not task.done():
                task.cancel()
                cancelled += 1
        return cancelled

    def eligible_addons(self) -> list[AddonManifest]:
        return [
            m
            for m in self._registry.all()
            if m.supports("stream") or looks_like_stream_provider(m.base_url, m.name)
        ]

    def is_canonical(self, manifest: AddonManifest) -> bool:
        base = manifest.base_url.lower()
        return any(host in base for host in self._canonical_hosts)

    def stream_urls(self, manifest: AddonManifest, type_: str, item_id: str) -> list[str]:
        """Candidate URLs for one addon, in the order they are tried."""
        templates: Sequence[str] = (CANONICAL_PATH_TEMPLATE,)
        if not self.is_canonical(manifest):
            templates = (CANONICAL_PATH_TEMPLATE, *ALTERNATE_PATH_TEMPLATES)
        return [
            manifest.base_url + t.format(type=type_, id=item_id) for t in templates
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _forget(self, key: tuple[str, str], task: asyncio.Task[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _ensure_fallback_addon(self, eligible: list[AddonManifest]) -> list[AddonManifest]:
        if not self._fallback_url:
            return eligible
        fallback_base = _base_of(self._fallback_url)
        if any(m.base_url == fallback_base for m in eligible):
            return eligible
        try:
            await self._registry.add(self._fallback_url)
        except AddonarrError as e:
            log.warning("fallback_addon_register_failed", url=self._fallback_url, error=str(e))
            return eligible
        return self.eligible_addons()

    async def _search(self, type_: str, item_id: str) -> list[StreamCandidate]:
        eligible = await self._ensure_fallback_addon(self.eligible_addons())
        query_id = query_id_for(item_id)

        addons = [m for m in eligible if self._breaker is None or self._breaker.allow(m.id)]
        skipped = len(eligible) - len(addons)

        attempts = [
            (m.id, lambda m=m: self._query_addon(m, type_, query_id)) for m in addons
        ]
        outcomes = await settle_all(attempts, accept=bool)

        streams: list[StreamCandidate] = []
        for outcome in outcomes:
            if self._breaker is not None:
                # Only unreachable addons count against the breaker; an
                # empty answer still proves the addon is up.
                if isinstance(outcome.error, (NetworkFailure, TimeoutError)):
                    self._breaker.record_failure(outcome.name)
                else:
                    self._breaker.record_success(outcome.name)
            if outcome.value:
                streams.extend(outcome.value)

        log.info(
            "stream_search_complete",
            type=type_,
            id=item_id,
            query_id=query_id,
            addons=len(addons),
            skipped_by_breaker=skipped,
            succeeded=sum(1 for o in outcomes if o.ok),
            streams=len(streams),
        )

        if not streams:
            return [TEST_STREAM]
        return streams

    async def _query_addon(
        self, manifest: AddonManifest, type_: str, item_id: str
    ) -> list[StreamCandidate]:
        payload = await self._fetch_first_ok(manifest, type_, item_id)
        candidates = self._normalize(payload, addon_id=manifest.id, addon_name=manifest.name)
        if not candidates:
            raise NormalizationEmpty(manifest.id)
        return candidates

    async def _fetch_first_ok(
        self, manifest: AddonManifest, type_: str, item_id: str
    ) -> Any:
        """First decoded answer among the path templates.

        Each template gets its own deadline, so a hanging canonical path
        still leaves the alternates their turn.
        """
        last_error: NetworkFailure | None = None
        for url in self.stream_urls(manifest, type_, item_id):
            try:
                return await asyncio.wait_for(
                    self._client.get_json(url, timeout=self._timeout),
                    timeout=self._timeout,
                )
            except TimeoutError:
                log.warning(
                    "addon_stream_timeout", addon_id=manifest.id, url=url, timeout=self._timeout
                )
                last_error = NetworkFailure(url, "timeout")
            except NetworkFailure as e:
                if e.status_code is not None and 200 <= e.status_code < 300:
                    # 2xx with an undecodable body: this template answered.
                    raise
                log.debug("addon_stream_path_failed", addon_id=manifest.id, url=url, reason=e.reason)
                last_error = e
        raise last_error or NetworkFailure(manifest.base_url, "no stream path answered")
