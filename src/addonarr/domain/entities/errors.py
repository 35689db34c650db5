"""Error taxonomy for the addon and stream resolution engine."""

from __future__ import annotations

from collections.abc import Sequence


class AddonarrError(Exception):
    """Base error for all domain/use-case failures."""


class InvalidManifest(AddonarrError):
    """Manifest could not be fetched, parsed or validated."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid addon manifest at {url}: {reason}")


class UnknownAddon(AddonarrError):
    """No addon with the given id is registered."""

    def __init__(self, addon_id: str) -> None:
        self.addon_id = addon_id
        super().__init__(f"Addon not registered: {addon_id}")


class UnsupportedResource(AddonarrError):
    """Addon does not declare the requested capability (or catalog)."""

    def __init__(self, addon_id: str, resource: str) -> None:
        self.addon_id = addon_id
        self.resource = resource
        super().__init__(f"Addon {addon_id} does not support {resource}")


class NetworkFailure(AddonarrError):
    """Timeout, connection error, non-2xx response or undecodable body."""

    def __init__(
        self,
        url: str,
        reason: str,
        *,
        status_code: int | None = None,
    ) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Request to {url} failed: {reason}")


class NormalizationEmpty(AddonarrError):
    """Response parsed fine but yielded no usable stream candidates."""

    def __init__(self, addon_id: str) -> None:
        self.addon_id = addon_id
        super().__init__(f"Addon {addon_id} returned no usable streams")


class AllProvidersExhausted(AddonarrError):
    """Debrid chain produced no direct link."""

    def __init__(self, url: str, attempted: Sequence[str]) -> None:
        self.url = url
        self.attempted = tuple(attempted)
        tried = ", ".join(self.attempted) if self.attempted else "none configured"
        super().__init__(f"No debrid provider could resolve {url} ({tried})")


class UnsupportedFormat(AddonarrError):
    """External player cannot play the stream's format family."""

    def __init__(self, player: str, format_family: str) -> None:
        self.player = player
        self.format_family = format_family
        super().__init__(f"Format {format_family!r} not supported by {player}")


class PlayerLaunchFailed(AddonarrError):
    """Primary and fallback external players both failed to launch."""

    def __init__(self, players: Sequence[str], reason: str) -> None:
        self.players = tuple(players)
        self.reason = reason
        super().__init__(f"Failed to launch {', '.join(self.players)}: {reason}")
