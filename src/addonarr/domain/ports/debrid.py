"""Ports for debrid providers and the credentials they read."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from addonarr.domain.entities.stream import DebridCredential, DebridProvider


@runtime_checkable
class DebridProviderPort(Protocol):
    """One debrid service: a single unrestrict call and an account check."""

    @property
    def provider(self) -> DebridProvider:
        """Which service this client talks to."""
        ...

    async def unrestrict(self, link: str, credential: DebridCredential) -> str | None:
        """Return a direct URL for ``link`` or None if the service refused it.

        Transport errors raise ``NetworkFailure``.
        """
        ...

    async def check_account(self, credential: DebridCredential) -> bool:
        """Lightweight account lookup used to validate a credential."""
        ...


@runtime_checkable
class CredentialSourcePort(Protocol):
    """Read-only view of the user's debrid credentials."""

    def get(self, provider: DebridProvider) -> DebridCredential | None:
        """Return the credential for ``provider`` or None if unconfigured."""
        ...
