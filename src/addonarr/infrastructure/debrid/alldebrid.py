"""All-Debrid client (API v4, key and agent in the query string)."""

from __future__ import annotations

import httpx

from addonarr.domain.entities.stream import DebridCredential, DebridProvider

from .base import DEFAULT_TIMEOUT, DebridClientBase


class AllDebridClient(DebridClientBase):
    provider = DebridProvider.ALL_DEBRID
    api_base = "https://api.alldebrid.com/v4"

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        agent: str = "addonarr",
        timeout_seconds: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(http_client=http_client, timeout_seconds=timeout_seconds)
        self._agent = agent

    async def unrestrict(self, link: str, credential: DebridCredential) -> str | None:
        resp = await self._request(
            "GET",
            "/link/unlock",
            params={"agent": self._agent, "apikey": credential.api_key, "link": link},
        )
        if not resp.is_success:
            self._log.info("debrid_unrestrict_refused", status=resp.status_code)
            return None
        data = (self._json(resp) or {}).get("data")
        if not isinstance(data, dict):
            return None
        unlocked = data.get("link")
        return unlocked if isinstance(unlocked, str) and unlocked else None

    async def check_account(self, credential: DebridCredential) -> bool:
        resp = await self._request(
            "GET",
            "/user",
            params={"agent": self._agent, "apikey": credential.api_key},
        )
        return (self._json(resp) or {}).get("status") == "success"
