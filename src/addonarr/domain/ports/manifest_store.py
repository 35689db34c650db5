"""Port for persisting the addon registry between process runs."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ManifestStorePort(Protocol):
    """Serialization port for manifests, keyed by addon id.

    The registry owns control flow; the store only reads and writes
    the JSON-compatible dicts produced by ``AddonManifest.to_dict()``.
    """

    async def load(self) -> list[dict[str, Any]]:
        """Return all persisted manifests in insertion order."""
        ...

    async def save(self, manifest: dict[str, Any]) -> None:
        """Insert or replace the manifest with ``manifest["id"]``."""
        ...

    async def delete(self, addon_id: str) -> None:
        """Remove a manifest (no-op when absent)."""
        ...
