"""Domain entities for addon manifests and catalogs.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal

ContentType = Literal["movie", "series"]

MANIFEST_SUFFIX = "/manifest.json"

# Substrings suggesting an addon serves streams even when it does not
# declare the "stream" resource.
STREAM_HINT_RE = re.compile(r"torrent|scraper|stream|watch|movie|series|play", re.I)


def looks_like_stream_provider(*texts: str | None) -> bool:
    """True if any of *texts* matches the stream-provider heuristic."""
    return any(t and STREAM_HINT_RE.search(t) for t in texts)


@dataclass(frozen=True)
class ExtraParamSpec:
    """A declared extra query parameter of a catalog (e.g. ``search``, ``genre``)."""

    name: str
    options: tuple[str, ...] = ()
    is_required: bool = False


@dataclass(frozen=True)
class CatalogDescriptor:
    """One queryable catalog inside an addon.

    Two descriptors denote the same catalog iff ``(addon_id, type, id)`` match;
    the addon id is implied by the manifest that owns the descriptor.
    """

    type: str
    id: str
    name: str = ""
    extra_params: tuple[ExtraParamSpec, ...] = ()


@dataclass(frozen=True)
class AddonManifest:
    """Validated addon self-description.

    ``resources`` is always a flat set of strings regardless of the wire
    shape the addon used.  ``base_url`` never ends with ``/manifest.json``.
    """

    id: str
    version: str
    name: str
    base_url: str
    description: str = ""
    resources: frozenset[str] = frozenset()
    types: frozenset[str] = frozenset()
    catalogs: tuple[CatalogDescriptor, ...] = ()
    id_prefixes: tuple[str, ...] = ()
    behavior_hints: dict[str, Any] = field(default_factory=dict, hash=False)
    logo: str = ""

    def __post_init__(self) -> None:
        if not self.id or not self.version:
            raise ValueError("AddonManifest requires non-empty id and version")

    @property
    def manifest_url(self) -> str:
        return f"{self.base_url}{MANIFEST_SUFFIX}"

    def supports(self, resource: str) -> bool:
        return resource in self.resources

    def catalog(self, type_: str, catalog_id: str) -> CatalogDescriptor | None:
        """Return the descriptor for ``(type, id)`` or ``None``."""
        for descriptor in self.catalogs:
            if descriptor.type == type_ and descriptor.id == catalog_id:
                return descriptor
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict (persistence shape)."""
        return {
            "id": self.id,
            "version": self.version,
            "name": self.name,
            "baseUrl": self.base_url,
            "description": self.description,
            "resources": sorted(self.resources),
            "types": sorted(self.types),
            "catalogs": [
                {
                    "type": c.type,
                    "id": c.id,
                    "name": c.name,
                    "extra": [
                        {
                            "name": p.name,
                            "options": list(p.options),
                            "isRequired": p.is_required,
                        }
                        for p in c.extra_params
                    ],
                }
                for c in self.catalogs
            ],
            "idPrefixes": list(self.id_prefixes),
            "behaviorHints": dict(self.behavior_hints),
            "logo": self.logo,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AddonManifest:
        """Rebuild a manifest previously produced by :meth:`to_dict`."""
        catalogs = tuple(
            CatalogDescriptor(
                type=c["type"],
                id=c["id"],
                name=c.get("name", ""),
                extra_params=tuple(
                    ExtraParamSpec(
                        name=p["name"],
                        options=tuple(p.get("options", ())),
                        is_required=bool(p.get("isRequired", False)),
                    )
                    for p in c.get("extra", ())
                ),
            )
            for c in data.get("catalogs", ())
        )
        return cls(
            id=data["id"],
            version=data["version"],
            name=data.get("name", ""),
            base_url=data["baseUrl"],
            description=data.get("description", ""),
            resources=frozenset(data.get("resources", ())),
            types=frozenset(data.get("types", ())),
            catalogs=catalogs,
            id_prefixes=tuple(data.get("idPrefixes", ())),
            behavior_hints=dict(data.get("behaviorHints", {})),
            logo=data.get("logo", ""),
        )


@dataclass(frozen=True)
class CatalogItem:
    """Canonical catalog entry handed to the browsing caller."""

    id: str
    title: str
    type: ContentType
    poster: str | None = None
    year: int | None = None
    rating: float | None = None


@dataclass(frozen=True)
class MetaVideo:
    """One episode/video entry of a series meta."""

    id: str
    title: str
    season: int | None = None
    episode: int | None = None
    released: str | None = None
    thumbnail: str | None = None


@dataclass(frozen=True)
class MetaItem:
    """Per-title metadata served by an addon's ``meta`` resource."""

    id: str
    type: str
    name: str
    poster: str | None = None
    background: str | None = None
    description: str | None = None
    release_info: str | None = None
    imdb_rating: float | None = None
    genres: tuple[str, ...] = ()
    cast: tuple[str, ...] = ()
    videos: tuple[MetaVideo, ...] = ()


@dataclass(frozen=True)
class Subtitle:
    """Subtitle track served by an addon's ``subtitles`` resource."""

    id: str
    url: str
    lang: str
