"""Port for handing a URL off to the operating system."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PlayerLauncherPort(Protocol):
    """Fire-and-forget OS hand-off of a custom-scheme player URL.

    There is no response channel: returning normally only means the OS
    accepted the URL, not that a player actually started.
    """

    async def launch(self, url: str) -> None:
        """Open ``url``. Raises on an immediate, detectable failure."""
        ...
