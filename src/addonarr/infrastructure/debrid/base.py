"""Shared httpx plumbing for debrid provider clients.

Subclasses set ``provider`` and ``api_base`` and implement
``unrestrict()`` / ``check_account()`` on top of ``_request()``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from addonarr.domain.entities.errors import NetworkFailure
from addonarr.domain.entities.stream import DebridProvider

DEFAULT_TIMEOUT = 10.0


class DebridClientBase:
    provider: DebridProvider
    api_base: str = ""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        timeout_seconds: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._timeout = httpx.Timeout(timeout_seconds)
        self._log = structlog.get_logger(__name__).bind(provider=self.provider.value)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request; transport failures become ``NetworkFailure``."""
        url = f"{self.api_base}{path}"
        try:
            return await self._http.request(method, url, timeout=self._timeout, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkFailure(url, "timeout") from exc
        except httpx.HTTPError as exc:
            raise NetworkFailure(url, f"{type(exc).__name__}: {exc}") from exc

    def _json(self, resp: httpx.Response) -> dict[str, Any] | None:
        """Decoded JSON object body, or None when the body is not an object."""
        try:
            data = resp.json()
        except ValueError:
            self._log.warning("debrid_invalid_json", status=resp.status_code)
            return None
        return data if isinstance(data, dict) else None
