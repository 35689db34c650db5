"""Real-Debrid client (REST 1.0, Bearer auth)."""

from __future__ import annotations

from addonarr.domain.entities.stream import DebridCredential, DebridProvider

from .base import DebridClientBase


class RealDebridClient(DebridClientBase):
    provider = DebridProvider.REAL_DEBRID
    api_base = "https://api.real-debrid.com/rest/1.0"

    @staticmethod
    def _auth(credential: DebridCredential) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential.api_key}"}

    async def unrestrict(self, link: str, credential: DebridCredential) -> str | None:
        resp = await self._request(
            "POST",
            "/unrestrict/link",
            headers=self._auth(credential),
            data={"link": link},
        )
        if not resp.is_success:
            self._log.info("debrid_unrestrict_refused", status=resp.status_code)
            return None
        data = self._json(resp) or {}
        download = data.get("download")
        return download if isinstance(download, str) and download else None

    async def check_account(self, credential: DebridCredential) -> bool:
        resp = await self._request("GET", "/user", headers=self._auth(credential))
        return resp.is_success
