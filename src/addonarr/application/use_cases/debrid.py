"""Debrid resolution use case: prioritized, sequential provider chain."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from addonarr.application.fallback import first_success
from addonarr.domain.entities.errors import AllProvidersExhausted, NetworkFailure
from addonarr.domain.entities.stream import (
    DEBRID_PRIORITY,
    DebridProvider,
    DebridResolution,
    ResolvedPlaybackTarget,
)
from addonarr.domain.ports.debrid import CredentialSourcePort, DebridProviderPort

log = structlog.get_logger(__name__)


class DebridResolver:
    """Turn a restricted or magnet link into a direct URL.

    Providers run strictly in ``DEBRID_PRIORITY`` order, unconfigured ones
    are skipped, and the chain stops at the first usable URL.  Each
    provider call costs API quota, so there is no fan-out.
    """

    def __init__(
        self,
        *,
        providers: Sequence[DebridProviderPort],
        credentials: CredentialSourcePort,
    ) -> None:
        by_kind = {p.provider: p for p in providers}
        self._providers = [by_kind[k] for k in DEBRID_PRIORITY if k in by_kind]
        self._credentials = credentials

    def configured(self) -> list[DebridProvider]:
        """Providers that have both a client and a credential, in chain order."""
        return [
            p.provider
            for p in self._providers
            if self._credentials.get(p.provider) is not None
        ]

    async def _attempt(self, original_url: str) -> tuple[DebridResolution, list[str]]:
        attempts = []
        for client in self._providers:
            credential = self._credentials.get(client.provider)
            if credential is None:
                continue

            async def _call(client=client, credential=credential) -> str | None:
                return await client.unrestrict(original_url, credential)

            attempts.append((client.provider.value, _call))

        outcome, tried = await first_success(attempts)
        if outcome is None:
            return DebridResolution(url=None), tried
        return DebridResolution(url=outcome.value, provider=DebridProvider(outcome.name)), tried

    async def resolve(self, original_url: str) -> DebridResolution:
        """Return ``{url, provider}`` or ``{url: None}``; never raises for provider errors."""
        resolution, tried = await self._attempt(original_url)
        log.info(
            "debrid_resolve_finished",
            resolved=resolution.resolved,
            provider=resolution.provider.value if resolution.provider else None,
            attempted=tried,
        )
        return resolution

    async def resolve_or_raise(self, original_url: str) -> DebridResolution:
        """Like :meth:`resolve` but raises ``AllProvidersExhausted`` when unresolved."""
        resolution, tried = await self._attempt(original_url)
        if not resolution.resolved:
            raise AllProvidersExhausted(original_url, tried)
        return resolution

    async def resolve_target(self, original_url: str) -> ResolvedPlaybackTarget:
        """Playback target for one attempt, falling back to the original URL.

        Computed fresh on every call: debrid links may be single-use.
        """
        resolution = await self.resolve(original_url)
        return ResolvedPlaybackTarget(
            original_url=original_url,
            resolved_url=resolution.url or original_url,
            resolving_provider=resolution.provider,
        )

    async def test_credential(self, provider: DebridProvider) -> bool:
        """Validate the stored credential with a lightweight account lookup."""
        credential = self._credentials.get(provider)
        client = next((p for p in self._providers if p.provider is provider), None)
        if credential is None or client is None:
            return False
        try:
            ok = await client.check_account(credential)
        except NetworkFailure as e:
            log.warning("debrid_credential_check_failed", provider=provider.value, reason=e.reason)
            return False
        log.info("debrid_credential_checked", provider=provider.value, valid=ok)
        return ok
