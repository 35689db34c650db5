from .addon import (
    MANIFEST_SUFFIX,
    STREAM_HINT_RE,
    AddonManifest,
    CatalogDescriptor,
    CatalogItem,
    ContentType,
    ExtraParamSpec,
    MetaItem,
    MetaVideo,
    Subtitle,
    looks_like_stream_provider,
)
from .errors import (
    AddonarrError,
    AllProvidersExhausted,
    InvalidManifest,
    NetworkFailure,
    NormalizationEmpty,
    PlayerLaunchFailed,
    UnknownAddon,
    UnsupportedFormat,
    UnsupportedResource,
)
from .player import (
    PLAYERS,
    ExternalPlayer,
    FormatFamily,
    PlayerName,
    PlayerRequest,
    encode_component,
    format_family,
)
from .stream import (
    DEBRID_PRIORITY,
    DebridCredential,
    DebridProvider,
    DebridResolution,
    PlaybackVideo,
    ResolvedPlaybackTarget,
    StreamCandidate,
    StreamKind,
    kind_from_url,
)

__all__ = [
    "DEBRID_PRIORITY",
    "MANIFEST_SUFFIX",
    "PLAYERS",
    "STREAM_HINT_RE",
    "AddonManifest",
    "AddonarrError",
    "AllProvidersExhausted",
    "CatalogDescriptor",
    "CatalogItem",
    "ContentType",
    "DebridCredential",
    "DebridProvider",
    "DebridResolution",
    "ExternalPlayer",
    "ExtraParamSpec",
    "FormatFamily",
    "InvalidManifest",
    "MetaItem",
    "MetaVideo",
    "NetworkFailure",
    "NormalizationEmpty",
    "PlaybackVideo",
    "PlayerLaunchFailed",
    "PlayerName",
    "PlayerRequest",
    "ResolvedPlaybackTarget",
    "StreamCandidate",
    "StreamKind",
    "Subtitle",
    "UnknownAddon",
    "UnsupportedFormat",
    "UnsupportedResource",
    "encode_component",
    "format_family",
    "kind_from_url",
    "looks_like_stream_provider",
]
