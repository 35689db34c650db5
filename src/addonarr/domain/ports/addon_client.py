"""Port for talking to addons over HTTP."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AddonClientPort(Protocol):
    """Fetches JSON documents from addon endpoints.

    Implementations translate every transport problem (timeout,
    connection error, non-2xx, undecodable body) into ``NetworkFailure``.
    """

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET ``url`` and return the decoded JSON body."""
        ...
