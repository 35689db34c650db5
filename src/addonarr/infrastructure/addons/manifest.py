"""Parsing of raw addon manifest payloads into ``AddonManifest``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from addonarr.domain.entities.addon import (
    MANIFEST_SUFFIX,
    AddonManifest,
    CatalogDescriptor,
    ExtraParamSpec,
    looks_like_stream_provider,
)


def normalize_manifest_url(url: str) -> str:
    """Strip a trailing slash and make sure the URL ends in ``/manifest.json``."""
    cleaned = url.strip().rstrip("/")
    if cleaned.endswith(MANIFEST_SUFFIX):
        return cleaned
    return f"{cleaned}{MANIFEST_SUFFIX}"


def base_url_of(manifest_url: str) -> str:
    return manifest_url.removesuffix(MANIFEST_SUFFIX)


def _resource_name(entry: Any) -> str | None:
    if isinstance(entry, str):
        return entry or None
    if isinstance(entry, Mapping):
        name = entry.get("name") or entry.get("type")
        return name if isinstance(name, str) and name else None
    return None


def coerce_resources(raw: Any) -> frozenset[str]:
    """Flatten the observed wire shapes of ``resources`` into a set of names.

    Accepts a list of strings, a list of ``{name|type}`` objects, or a
    single scalar/object.  Anything unrecognisable contributes nothing.
    """
    if raw is None:
        return frozenset()
    entries = raw if isinstance(raw, list) else [raw]
    return frozenset(n for n in map(_resource_name, entries) if n is not None)


def _string_list(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, list):
        return ()
    return tuple(x for x in raw if isinstance(x, str))


def _parse_extra(catalog: Mapping[str, Any]) -> tuple[ExtraParamSpec, ...]:
    extra = catalog.get("extra")
    if isinstance(extra, list):
        return tuple(
            ExtraParamSpec(
                name=e["name"],
                options=_string_list(e.get("options")),
                is_required=bool(e.get("isRequired", False)),
            )
            for e in extra
            if isinstance(e, Mapping) and isinstance(e.get("name"), str)
        )

    # Legacy shape: extraSupported / extraRequired name lists.
    required = set(_string_list(catalog.get("extraRequired")))
    return tuple(
        ExtraParamSpec(name=name, is_required=name in required)
        for name in _string_list(catalog.get("extraSupported"))
    )


def _parse_catalogs(raw: Any) -> tuple[CatalogDescriptor, ...]:
    if not isinstance(raw, list):
        return ()
    out: list[CatalogDescriptor] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        type_, catalog_id = entry.get("type"), entry.get("id")
        if not isinstance(type_, str) or not isinstance(catalog_id, str):
            continue
        name = entry.get("name")
        out.append(
            CatalogDescriptor(
                type=type_,
                id=catalog_id,
                name=name if isinstance(name, str) else "",
                extra_params=_parse_extra(entry),
            )
        )
    return tuple(out)


def parse_manifest(payload: Any, manifest_url: str) -> AddonManifest:
    """Validate a decoded manifest body.

    Raises ``ValueError`` with a human-readable reason when the payload is
    not an object or lacks ``id``/``version``.
    """
    if not isinstance(payload, Mapping):
        raise ValueError(f"manifest must be a JSON object, got {type(payload).__name__}")

    addon_id = payload.get("id")
    version = payload.get("version")
    if not addon_id or not isinstance(addon_id, str):
        raise ValueError("manifest is missing 'id'")
    if version is None or version == "":
        raise ValueError("manifest is missing 'version'")

    name = payload.get("name")
    name = name if isinstance(name, str) else addon_id
    resources = coerce_resources(payload.get("resources"))

    if "stream" not in resources and looks_like_stream_provider(
        manifest_url, name, *resources
    ):
        resources = resources | {"stream"}

    description = payload.get("description")
    behavior_hints = payload.get("behaviorHints")
    logo = payload.get("logo")

    return AddonManifest(
        id=addon_id,
        version=str(version),
        name=name,
        base_url=base_url_of(manifest_url),
        description=description if isinstance(description, str) else "",
        resources=resources,
        types=frozenset(_string_list(payload.get("types"))),
        catalogs=_parse_catalogs(payload.get("catalogs")),
        id_prefixes=_string_list(payload.get("idPrefixes")),
        behavior_hints=dict(behavior_hints) if isinstance(behavior_hints, Mapping) else {},
        logo=logo if isinstance(logo, str) else "",
    )
