"""Premiumize.me client (API key in the query string)."""

from __future__ import annotations

from addonarr.domain.entities.stream import DebridCredential, DebridProvider

from .base import DebridClientBase


class PremiumizeClient(DebridClientBase):
    provider = DebridProvider.PREMIUMIZE
    api_base = "https://www.premiumize.me/api"

    async def unrestrict(self, link: str, credential: DebridCredential) -> str | None:
        resp = await self._request(
            "GET",
            "/transfer/directdl",
            params={"apikey": credential.api_key, "src": link},
        )
        if not resp.is_success:
            self._log.info("debrid_unrestrict_refused", status=resp.status_code)
            return None
        location = (self._json(resp) or {}).get("location")
        return location if isinstance(location, str) and location else None

    async def check_account(self, credential: DebridCredential) -> bool:
        resp = await self._request(
            "GET", "/account/info", params={"apikey": credential.api_key}
        )
        return (self._json(resp) or {}).get("status") == "success"
