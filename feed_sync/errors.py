"""Error types for feed_sync.

Every failure of a sync attempt, identifier decode or backend lookup is
raised as a subclass of FeedSyncError so callers can scope handling to a
single subscription.
"""

from typing import Optional


class FeedSyncError(Exception):
    """Base class for all feed_sync errors."""


class InvalidInput(FeedSyncError, ValueError):
    """Raised for a bad URL, bad hex string or bad configuration value."""


class InvalidLength(InvalidInput):
    """Raised when a hex string does not match the algorithm's digest size."""


class InvalidEncoding(InvalidInput):
    """Raised when a hex string contains non-hex characters."""


class MissingFeedURL(InvalidInput):
    """Raised when a subscription has no feed URL to sync."""


class SubscriptionUnreachable(FeedSyncError):
    """Raised without a network attempt while the reachability latch is set."""

    def __init__(self, url: str):
        super().__init__(f"{url} is unreachable")
        self.url = url


class FetchFailed(FeedSyncError):
    """Raised on a transport failure or a non-success status code."""

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = ""):
        if status_code is not None:
            message = f"sync failure ({status_code}): {url}"
        else:
            message = f"sync failure: {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ReadFailed(FeedSyncError):
    """Raised when the response body cannot be fully consumed."""

    def __init__(self, url: str):
        super().__init__(f"failed to read response body: {url}")
        self.url = url


class UnknownFormat(FeedSyncError):
    """Raised when no registered format matches a payload."""


class ParseFailed(FeedSyncError):
    """Raised when a payload of a recognized format is malformed."""

    def __init__(self, kind: str, diagnostic: str):
        super().__init__(f"failed to parse {kind} feed: {diagnostic}")
        self.kind = kind
        self.diagnostic = diagnostic


class UnknownBackend(FeedSyncError, LookupError):
    """Raised when a storage backend name is not recognized."""


class BackendNotImplemented(FeedSyncError, NotImplementedError):
    """Raised for a recognized storage backend that is not usable yet."""
