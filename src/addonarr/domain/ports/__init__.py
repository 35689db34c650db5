from .addon_client import AddonClientPort
from .addon_registry import AddonRegistryPort
from .debrid import CredentialSourcePort, DebridProviderPort
from .manifest_store import ManifestStorePort
from .player_launcher import PlayerLauncherPort

__all__ = [
    "AddonClientPort",
    "AddonRegistryPort",
    "CredentialSourcePort",
    "DebridProviderPort",
    "ManifestStorePort",
    "PlayerLauncherPort",
]
