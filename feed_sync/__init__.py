"""feed_sync - feed subscription sync pipeline.

Fetches syndicated feeds, skips unchanged payloads by content identity,
detects RSS or Atom, normalizes entries and hands them to a storage engine
chosen by name.
"""

from feed_sync.config import SyncConfig, get_config, load_config
from feed_sync.errors import (
    BackendNotImplemented,
    FeedSyncError,
    FetchFailed,
    InvalidEncoding,
    InvalidInput,
    InvalidLength,
    MissingFeedURL,
    ParseFailed,
    ReadFailed,
    SubscriptionUnreachable,
    UnknownBackend,
    UnknownFormat,
)
from feed_sync.models import (
    Algo,
    FormatKind,
    Identifier,
    ParsedEntry,
    ParsedFeed,
    Subscription,
)
from feed_sync.services import FormatDetector, HttpFetcher, SyncEngine
from feed_sync.storage import Store, resolve

__all__ = [
    "SyncConfig",
    "get_config",
    "load_config",
    "BackendNotImplemented",
    "FeedSyncError",
    "FetchFailed",
    "InvalidEncoding",
    "InvalidInput",
    "InvalidLength",
    "MissingFeedURL",
    "ParseFailed",
    "ReadFailed",
    "SubscriptionUnreachable",
    "UnknownBackend",
    "UnknownFormat",
    "Algo",
    "FormatKind",
    "Identifier",
    "ParsedEntry",
    "ParsedFeed",
    "Subscription",
    "FormatDetector",
    "HttpFetcher",
    "SyncEngine",
    "Store",
    "resolve",
]
