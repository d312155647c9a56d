"""In-memory storage engine."""

from typing import Dict, List, Optional

from feed_sync.errors import InvalidInput
from feed_sync.models.identifier import Identifier
from feed_sync.models.schemas import ParsedEntry, ParsedFeed
from feed_sync.storage.base import Store
from feed_sync.storage.selector import register_backend


@register_backend("memory")
class MemoryStore(Store):
    """Keeps snapshots and deduplicated entries per subscription in memory."""

    name = "memory"

    def __init__(self):
        self._snapshots: Dict[str, List[ParsedFeed]] = {}
        self._entries: Dict[str, Dict[str, ParsedEntry]] = {}

    async def save(self, feed: ParsedFeed) -> int:
        if feed.subscription_id is None:
            raise InvalidInput("Feed must be stamped with a subscription id before saving")

        key = feed.subscription_id.hex_string
        self._snapshots.setdefault(key, []).append(feed)
        known = self._entries.setdefault(key, {})

        added_count = 0
        for entry in feed.entries:
            if entry.key in known:
                continue
            known[entry.key] = entry
            added_count += 1
        return added_count

    def snapshots(self, subscription_id: Optional[Identifier] = None) -> List[ParsedFeed]:
        """Return stored snapshots, for one subscription or all of them."""
        if subscription_id is not None:
            return list(self._snapshots.get(subscription_id.hex_string, []))
        return [feed for feeds in self._snapshots.values() for feed in feeds]

    def entries(self, subscription_id: Identifier) -> List[ParsedEntry]:
        return list(self._entries.get(subscription_id.hex_string, {}).values())
