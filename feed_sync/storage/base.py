"""Storage engine contract."""

from abc import ABC, abstractmethod

from feed_sync.models.schemas import ParsedFeed


class Store(ABC):
    """Interface that storage engines implement."""

    name: str = ""

    @abstractmethod
    async def save(self, feed: ParsedFeed) -> int:
        """Persist a stamped feed snapshot.

        Returns:
            Number of entries that were new for the feed's subscription
        """

    async def close(self) -> None:
        """Release any resources held by the backend."""
