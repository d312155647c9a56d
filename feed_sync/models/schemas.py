"""Data models for feed_sync.

This module defines the core data structures for subscriptions and the
feeds parsed from them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple
from urllib.parse import urlsplit

from feed_sync.errors import InvalidInput
from feed_sync.models.identifier import Identifier


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FormatKind(str, Enum):
    """Recognized syndication wire formats."""

    RSS = "rss"
    ATOM = "atom"


@dataclass
class Subscription:
    """Represents a watched feed endpoint and its sync bookkeeping."""

    id: Identifier
    feed_url: str
    last_content_checksum: Optional[Identifier] = None
    unreachable: bool = False
    created_at: datetime = field(default_factory=utcnow)
    last_synced_at: Optional[datetime] = None

    @classmethod
    def new(cls, feed_url: str) -> "Subscription":
        """Create a subscription for a feed URL.

        The subscription id is derived from the URL string exactly as given
        and stays fixed for the life of the subscription.

        Raises:
            InvalidInput: If the URL is empty, unparseable or not absolute
        """
        if not feed_url:
            raise InvalidInput("Feed URL must not be empty")
        try:
            parts = urlsplit(feed_url)
        except ValueError as e:
            raise InvalidInput(f"Invalid feed URL: {feed_url}") from e
        if not parts.scheme or not parts.netloc:
            raise InvalidInput(f"Feed URL must include a scheme and host: {feed_url}")

        return cls(id=Identifier.from_content(feed_url), feed_url=feed_url)

    @property
    def is_offline(self) -> bool:
        return self.unreachable

    def mark_reachable(self) -> None:
        """Clear the reachability latch so the next sync hits the network."""
        self.unreachable = False


@dataclass(frozen=True)
class ParsedEntry:
    """Represents a normalized entry from a feed."""

    title: str
    url: str
    guid: str = ""
    published_date: Optional[datetime] = None
    summary: str = ""

    @property
    def key(self) -> str:
        """Dedup key for the entry within its subscription."""
        return self.guid or self.url


@dataclass(frozen=True)
class ParsedFeed:
    """Write-once snapshot of one fetch's entries."""

    kind: FormatKind
    title: str = ""
    link: str = ""
    entries: Tuple[ParsedEntry, ...] = ()
    subscription_id: Optional[Identifier] = None
    content_checksum: Optional[Identifier] = None
