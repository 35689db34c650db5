"""JSON presenters for domain entities."""

from __future__ import annotations

from typing import Any

from addonarr.application.use_cases import (
    HandoffSession,
    InternalPlayerSource,
    PlaybackOutcome,
)
from addonarr.domain.entities import (
    CatalogItem,
    MetaItem,
    ResolvedPlaybackTarget,
    StreamCandidate,
    Subtitle,
)


def present_catalog_item(item: CatalogItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "type": item.type,
        "poster": item.poster,
        "year": item.year,
        "rating": item.rating,
    }


def present_meta(meta: MetaItem) -> dict[str, Any]:
    return {
        "id": meta.id,
        "type": meta.type,
        "name": meta.name,
        "poster": meta.poster,
        "background": meta.background,
        "description": meta.description,
        "releaseInfo": meta.release_info,
        "imdbRating": meta.imdb_rating,
        "genres": list(meta.genres),
        "cast": list(meta.cast),
        "videos": [
            {
                "id": v.id,
                "title": v.title,
                "season": v.season,
                "episode": v.episode,
                "released": v.released,
                "thumbnail": v.thumbnail,
            }
            for v in meta.videos
        ],
    }


def present_subtitle(subtitle: Subtitle) -> dict[str, Any]:
    return {"id": subtitle.id, "url": subtitle.url, "lang": subtitle.lang}


def present_stream(stream: StreamCandidate) -> dict[str, Any]:
    return {
        "addonId": stream.source_addon_id,
        "url": stream.url,
        "title": stream.title,
        "quality": stream.quality,
        "kind": stream.kind.value,
        "size": stream.size_hint,
        "seeds": stream.seed_hint,
        "source": stream.source_hint,
        "behaviorHints": dict(stream.behavior_hints),
    }


def present_target(target: ResolvedPlaybackTarget) -> dict[str, Any]:
    return {
        "originalUrl": target.original_url,
        "resolvedUrl": target.resolved_url,
        "provider": (
            target.resolving_provider.value if target.resolving_provider else None
        ),
    }


def _present_source(source: InternalPlayerSource) -> dict[str, Any]:
    return {
        "url": source.url,
        "mimeType": source.mime_type,
        "kind": source.kind.value,
        "title": source.title,
        "poster": source.poster,
        "subtitle": source.subtitle,
        "trackers": list(source.trackers),
    }


def present_session(session: HandoffSession) -> dict[str, Any]:
    return {
        "id": session.id,
        "primary": session.primary,
        "fallback": session.fallback,
        "state": session.state.value,
    }


def present_outcome(outcome: PlaybackOutcome) -> dict[str, Any]:
    body: dict[str, Any] = {
        "mode": outcome.mode,
        "target": present_target(outcome.target),
    }
    if outcome.mode == "internal" and outcome.source is not None:
        body["source"] = _present_source(outcome.source)
    else:
        body["player"] = outcome.player
        body["playerUrl"] = outcome.player_url
        body["session"] = (
            present_session(outcome.session) if outcome.session is not None else None
        )
    return body
