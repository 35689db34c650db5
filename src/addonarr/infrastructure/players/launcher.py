"""Hand custom-scheme player URLs to the operating system."""

from __future__ import annotations

import asyncio
import webbrowser

import structlog

log = structlog.get_logger(__name__)


class SystemPlayerLauncher:
    """Opens URLs with the OS handler for their scheme.

    ``webbrowser.open`` blocks while it spawns the handler, so it runs in a
    worker thread.  A False return means no handler accepted the URL.
    """

    async def launch(self, url: str) -> None:
        scheme = url.split(":", 1)[0]
        opened = await asyncio.to_thread(webbrowser.open, url)
        if not opened:
            raise RuntimeError(f"No handler accepted the {scheme}:// URL")
        log.debug("player_url_opened", scheme=scheme)


class NullPlayerLauncher:
    """Launcher for headless deployments: records nothing, opens nothing.

    The built player URL is still returned to the API caller, which is
    expected to open it on the client device.
    """

    async def launch(self, url: str) -> None:
        log.debug("player_url_not_opened", scheme=url.split(":", 1)[0])
