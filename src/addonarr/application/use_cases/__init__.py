from .catalog import CatalogResolver, placeholder_items
from .debrid import DebridResolver
from .meta import MetaResolver
from .playback import (
    HandoffSession,
    HandoffState,
    InternalPlayerSource,
    PlaybackHandoff,
    PlaybackOutcome,
)
from .stream_search import TEST_STREAM, StreamAggregator, query_id_for

__all__ = [
    "TEST_STREAM",
    "CatalogResolver",
    "DebridResolver",
    "HandoffSession",
    "HandoffState",
    "InternalPlayerSource",
    "MetaResolver",
    "PlaybackHandoff",
    "PlaybackOutcome",
    "StreamAggregator",
    "placeholder_items",
    "query_id_for",
]
