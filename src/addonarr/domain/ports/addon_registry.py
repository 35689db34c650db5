"""Port for the process-wide addon registry."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from addonarr.domain.entities.addon import AddonManifest


@runtime_checkable
class AddonRegistryPort(Protocol):
    """Read/write access to registered addon manifests."""

    async def add(self, url: str) -> AddonManifest:
        """Fetch, validate and insert (or replace) a manifest.

        Raises ``InvalidManifest`` on any failure; state is unchanged then.
        """
        ...

    async def remove(self, addon_id: str) -> bool:
        """Remove an addon. Returns False if it was not registered."""
        ...

    def get(self, addon_id: str) -> AddonManifest | None:
        """Return the manifest for ``addon_id`` or None."""
        ...

    def all(self) -> list[AddonManifest]:
        """All manifests in registration order."""
        ...

    def supports(self, addon_id: str, resource: str) -> bool:
        """Capability check (False for unknown addons)."""
        ...

    def find_catalog(
        self, type_: str, catalog_id: str
    ) -> AddonManifest | None:
        """First addon that declares catalog ``(type, id)``."""
        ...
