"""Services for feed_sync."""

from .feed_parser import parse_atom, parse_rss
from .fetcher import Fetcher, FetchResponse, HttpFetcher
from .format_detector import FormatDetector, FormatHandler, RootElement, sniff_root
from .sync_engine import SyncEngine

__all__ = [
    "parse_atom",
    "parse_rss",
    "Fetcher",
    "FetchResponse",
    "HttpFetcher",
    "FormatDetector",
    "FormatHandler",
    "RootElement",
    "sniff_root",
    "SyncEngine",
]
