"""Data models for feed_sync."""

from .identifier import Algo, Identifier, DEFAULT_ALGO, digest_size
from .schemas import FormatKind, ParsedEntry, ParsedFeed, Subscription

__all__ = [
    "Algo",
    "Identifier",
    "DEFAULT_ALGO",
    "digest_size",
    "FormatKind",
    "ParsedEntry",
    "ParsedFeed",
    "Subscription",
]
