"""Subscription sync pipeline.

One sync fetches a subscription's feed, fingerprints the payload, skips
unchanged content, then detects, parses, stamps and stores the rest.

The subscription record is owned by the caller for the duration of a sync:
concurrent syncs of the same subscription must be serialized by the caller,
while different subscriptions can be synced concurrently.
"""

from contextlib import AsyncExitStack
from dataclasses import replace
from typing import Optional

from feed_sync.config import SyncConfig, get_config
from feed_sync.errors import (
    FetchFailed,
    MissingFeedURL,
    ParseFailed,
    ReadFailed,
    SubscriptionUnreachable,
    UnknownFormat,
)
from feed_sync.log_system.correlation import (
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from feed_sync.log_system.unified_logger import UnifiedLogger
from feed_sync.models.identifier import Identifier
from feed_sync.models.schemas import ParsedFeed, Subscription, utcnow
from feed_sync.services.fetcher import TRANSPORT_ERRORS, Fetcher, HttpFetcher
from feed_sync.services.format_detector import FormatDetector
from feed_sync.storage.base import Store
from feed_sync.storage.selector import resolve

HTTP_OK = 200


class SyncEngine:
    """Runs the fetch, dedup, parse and persist cycle for subscriptions.

    Args:
        store: Resolved storage engine receiving parsed feeds
        fetcher: Fetch capability (defaults to HttpFetcher)
        detector: Format detector (defaults to RSS and Atom)
        reprocess_on_parse_failure: When True, a payload that fails detection
            or parsing is not recorded as seen, so the same bytes are
            processed again on the next sync
    """

    def __init__(
        self,
        store: Store,
        fetcher: Optional[Fetcher] = None,
        detector: Optional[FormatDetector] = None,
        reprocess_on_parse_failure: bool = False,
    ):
        self.store = store
        self.fetcher = fetcher if fetcher is not None else HttpFetcher()
        self.detector = detector if detector is not None else FormatDetector()
        self.reprocess_on_parse_failure = reprocess_on_parse_failure

    @classmethod
    def from_config(cls, config: Optional[SyncConfig] = None) -> "SyncEngine":
        """Build an engine from configuration.

        Raises:
            UnknownBackend: If the configured store is not recognized
            BackendNotImplemented: If the configured store is unfinished
        """
        if config is None:
            config = get_config()

        if not UnifiedLogger.is_initialized():
            UnifiedLogger.initialize_default(config)

        return cls(
            store=resolve(config.store_backend, **config.store_options()),
            fetcher=HttpFetcher(timeout=config.fetch_timeout, user_agent=config.user_agent),
            reprocess_on_parse_failure=config.reprocess_on_parse_failure,
        )

    async def sync(self, subscription: Subscription) -> Optional[ParsedFeed]:
        """Sync one subscription.

        Updates the subscription's unreachable flag, content checksum and
        last_synced_at as a side effect, whether or not the sync succeeds.

        Args:
            subscription: Subscription to sync

        Returns:
            The stored ParsedFeed, or None if the content was unchanged

        Raises:
            MissingFeedURL: If the subscription has no feed URL
            SubscriptionUnreachable: If the reachability latch is set
            FetchFailed: On transport failure or a non-200 status
            ReadFailed: If the response body cannot be read
            UnknownFormat: If the payload matches no known format
            ParseFailed: If the payload is malformed
        """
        token = set_correlation_id(generate_correlation_id())
        try:
            return await self._sync(subscription)
        finally:
            reset_correlation_id(token)

    async def _sync(self, subscription: Subscription) -> Optional[ParsedFeed]:
        logger = UnifiedLogger.get_logger(__name__)

        url = subscription.feed_url
        if not url:
            raise MissingFeedURL("subscription has no feed URL")
        if subscription.unreachable:
            raise SubscriptionUnreachable(url)

        logger.info(f"Syncing subscription {subscription.id} from {url}")
        payload = await self._fetch(subscription)

        checksum = Identifier.from_content(payload)
        if checksum == subscription.last_content_checksum:
            logger.info(f"No new content for {url}")
            return None

        previous_checksum = subscription.last_content_checksum
        subscription.last_content_checksum = checksum

        try:
            kind = self.detector.detect(payload)
            parsed = self.detector.parse(kind, payload)
        except (UnknownFormat, ParseFailed) as e:
            if self.reprocess_on_parse_failure:
                subscription.last_content_checksum = previous_checksum
            logger.warning(f"Failed to process {url}: {e}")
            raise

        feed = replace(parsed, subscription_id=subscription.id, content_checksum=checksum)
        added = await self.store.save(feed)
        logger.info(
            f"Stored {kind.value} feed for {url}: "
            f"{len(feed.entries)} entries, {added} new"
        )
        return feed

    async def _fetch(self, subscription: Subscription) -> bytes:
        """Fetch the subscription's payload and track reachability."""
        logger = UnifiedLogger.get_logger(__name__)
        url = subscription.feed_url

        async with AsyncExitStack() as stack:
            try:
                response = await stack.enter_async_context(self.fetcher.open(url))
            except TRANSPORT_ERRORS as e:
                subscription.unreachable = True
                logger.warning(f"Fetch failed for {url}: {e}")
                raise FetchFailed(url, reason=str(e)) from e
            finally:
                subscription.last_synced_at = utcnow()

            if response.status_code != HTTP_OK:
                subscription.unreachable = True
                logger.warning(f"Fetch failed for {url}: status {response.status_code}")
                raise FetchFailed(url, status_code=response.status_code)
            subscription.unreachable = False

            try:
                return await response.aread()
            except TRANSPORT_ERRORS as e:
                logger.warning(f"Failed to read body from {url}: {e}")
                raise ReadFailed(url) from e
