"""httpx-backed client for addon HTTP endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from addonarr.domain.entities.errors import NetworkFailure

log = structlog.get_logger(__name__)


class HttpxAddonClient:
    """Implements ``AddonClientPort`` on top of a shared ``httpx.AsyncClient``.

    Every call carries an explicit timeout; httpx exceptions are
    translated to ``NetworkFailure`` and never leave this class.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        default_timeout: float = 8.0,
    ) -> None:
        self._http = http_client
        self._default_timeout = default_timeout

    def _timeout(self, timeout: float | None) -> httpx.Timeout:
        return httpx.Timeout(timeout if timeout is not None else self._default_timeout)

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        try:
            resp = await self._http.get(
                url,
                params=dict(params) if params else None,
                timeout=self._timeout(timeout),
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise NetworkFailure(url, "timeout") from exc
        except httpx.HTTPError as exc:
            raise NetworkFailure(url, f"{type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            raise NetworkFailure(
                url, f"HTTP {resp.status_code}", status_code=resp.status_code
            )

        try:
            return resp.json()
        except ValueError as exc:
            log.debug("addon_response_not_json", url=url, status_code=resp.status_code)
            raise NetworkFailure(
                url, "response body is not valid JSON", status_code=resp.status_code
            ) from exc
