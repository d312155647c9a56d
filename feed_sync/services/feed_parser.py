"""Feed parser service.

This module turns RSS/Atom payloads into ParsedFeed snapshots using
feedparser. One parser is exposed per format so each can be registered with
the format detector.
"""

import xml.sax
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional

import feedparser
from bs4 import BeautifulSoup

from feed_sync.errors import ParseFailed
from feed_sync.log_system.unified_logger import UnifiedLogger
from feed_sync.models.schemas import FormatKind, ParsedEntry, ParsedFeed


def parse_rss(payload: bytes) -> ParsedFeed:
    """Parse an RSS payload."""
    return _parse(FormatKind.RSS, payload)


def parse_atom(payload: bytes) -> ParsedFeed:
    """Parse an Atom payload."""
    return _parse(FormatKind.ATOM, payload)


def _parse(kind: FormatKind, payload: bytes) -> ParsedFeed:
    """Parse a payload and normalize its entries.

    Args:
        kind: Format the payload was detected as
        payload: Raw feed bytes

    Returns:
        ParsedFeed without a subscription id

    Raises:
        ParseFailed: If the payload is not well-formed XML, or feedparser
            flags it and finds no entries
    """
    logger = UnifiedLogger.get_logger(__name__)

    feed = feedparser.parse(payload)

    if feed.bozo:
        exc = feed.get("bozo_exception")
        # Well-formedness errors reject the payload even when the loose
        # parser salvaged entries; encoding overrides and the like pass.
        if isinstance(exc, xml.sax.SAXException) or not feed.entries:
            raise ParseFailed(kind.value, str(exc or "malformed feed"))

    entries = _parse_entries(feed.entries)
    logger.debug(f"Parsed {len(entries)} entries from {kind.value} feed")

    return ParsedFeed(
        kind=kind,
        title=feed.feed.get("title", "").strip(),
        link=feed.feed.get("link", "").strip(),
        entries=tuple(entries),
    )


def _parse_entries(raw_entries: list) -> List[ParsedEntry]:
    entries = []
    for entry in raw_entries:
        url = entry.get("link", "").strip()
        if not url:
            # Try alternate link
            for link in entry.get("links", []):
                if link.get("rel") == "alternate" or link.get("href"):
                    url = link.get("href", "").strip()
                    break

        guid = entry.get("id", "").strip()
        if not url and not guid:
            continue

        entries.append(ParsedEntry(
            title=entry.get("title", "").strip(),
            url=url,
            guid=guid,
            published_date=_parse_date(entry),
            summary=_plain_text(entry.get("summary", "")),
        ))

    return entries


def _plain_text(html: str) -> str:
    if not html:
        return ""
    if "<" not in html:
        return html.strip()
    return BeautifulSoup(html, "lxml").get_text(" ", strip=True)


def _parse_date(entry: dict) -> Optional[datetime]:
    """Parse the publication date from a feed entry.

    Args:
        entry: Feed entry dict

    Returns:
        datetime if parsed successfully, None otherwise
    """
    for field in ["published", "updated", "created"]:
        # feedparser's struct_time values are already normalized to UTC
        parsed = entry.get(f"{field}_parsed")
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (ValueError, TypeError):
                pass

        date_str = entry.get(field, "")
        if not date_str:
            continue

        # Try RFC 2822 format (common in RSS)
        try:
            return parsedate_to_datetime(date_str)
        except (ValueError, TypeError):
            pass

        # Try ISO format
        try:
            return datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            pass

    return None
