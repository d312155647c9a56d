"""SQLite storage engine for feed_sync.

This module persists feed snapshots and their entries with aiosqlite.
Database location: the db_path option, else FEED_SYNC_DB_PATH, else
~/.feed_sync/feed_sync.db
"""

import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import aiosqlite

from feed_sync.errors import InvalidInput
from feed_sync.models.identifier import Identifier
from feed_sync.models.schemas import ParsedEntry, ParsedFeed, utcnow
from feed_sync.storage.base import Store
from feed_sync.storage.selector import register_backend


def _get_db_path() -> Path:
    """Get the database path, respecting FEED_SYNC_DB_PATH env var for testing."""
    env_path = os.environ.get("FEED_SYNC_DB_PATH")
    if env_path:
        return Path(env_path)
    return Path.home() / ".feed_sync" / "feed_sync.db"


async def init_database(db: aiosqlite.Connection) -> None:
    """Initialize database tables if they don't exist.

    Args:
        db: Open database connection
    """
    await db.execute("""
        CREATE TABLE IF NOT EXISTS feed_snapshots (
            id INTEGER PRIMARY KEY,
            subscription_id TEXT NOT NULL,
            content_checksum TEXT,
            kind TEXT NOT NULL,
            title TEXT,
            link TEXT,
            entry_count INTEGER NOT NULL,
            stored_at TIMESTAMP NOT NULL
        )
    """)

    await db.execute("""
        CREATE TABLE IF NOT EXISTS entries (
            id INTEGER PRIMARY KEY,
            subscription_id TEXT NOT NULL,
            entry_key TEXT NOT NULL,
            title TEXT NOT NULL,
            url TEXT NOT NULL,
            guid TEXT,
            published_date TIMESTAMP,
            summary TEXT,
            discovered_date TIMESTAMP NOT NULL,
            UNIQUE (subscription_id, entry_key)
        )
    """)

    # Create index for faster lookups
    await db.execute("""
        CREATE INDEX IF NOT EXISTS idx_snapshots_subscription_id
        ON feed_snapshots(subscription_id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS idx_entries_subscription_id
        ON entries(subscription_id)
    """)

    await db.commit()


@register_backend("sqlite")
class SQLiteStore(Store):
    """Stores snapshots and deduplicated entries in SQLite.

    The connection is opened on first use, so constructing the store does
    no I/O.

    Args:
        db_path: Database file path, or ":memory:"
    """

    name = "sqlite"

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = str(db_path) if db_path is not None else None
        self._db: Optional[aiosqlite.Connection] = None

    async def connection(self) -> aiosqlite.Connection:
        """Get or create the store's database connection."""
        if self._db is None:
            if self.db_path is None:
                path = _get_db_path()
                # Ensure directory exists
                path.parent.mkdir(parents=True, exist_ok=True)
                self.db_path = str(path)

            self._db = await aiosqlite.connect(self.db_path)
            self._db.row_factory = aiosqlite.Row
            await init_database(self._db)

        return self._db

    async def save(self, feed: ParsedFeed) -> int:
        """Store a snapshot row and add its new entries, skipping duplicates.

        Args:
            feed: Feed stamped with its subscription id

        Returns:
            Number of entries actually added (excludes duplicates)
        """
        if feed.subscription_id is None:
            raise InvalidInput("Feed must be stamped with a subscription id before saving")

        db = await self.connection()
        try:
            added_count = await self._insert_feed(db, feed)
        except Exception:
            # Drop the partial snapshot so a later commit cannot persist it
            await db.rollback()
            raise

        await db.commit()
        return added_count

    async def _insert_feed(self, db: aiosqlite.Connection, feed: ParsedFeed) -> int:
        subscription_id = feed.subscription_id.hex_string
        stored_at = utcnow().isoformat()

        await db.execute(
            """
            INSERT INTO feed_snapshots
                (subscription_id, content_checksum, kind, title, link, entry_count, stored_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                subscription_id,
                feed.content_checksum.hex_string if feed.content_checksum else None,
                feed.kind.value,
                feed.title,
                feed.link,
                len(feed.entries),
                stored_at,
            ),
        )

        added_count = 0
        for entry in feed.entries:
            try:
                await db.execute(
                    """
                    INSERT INTO entries
                        (subscription_id, entry_key, title, url, guid,
                         published_date, summary, discovered_date)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        subscription_id,
                        entry.key,
                        entry.title,
                        entry.url,
                        entry.guid or None,
                        entry.published_date.isoformat() if entry.published_date else None,
                        entry.summary or None,
                        stored_at,
                    ),
                )
                added_count += 1
            except aiosqlite.IntegrityError:
                # Entry already stored for this subscription, skip
                pass

        return added_count

    async def list_entries(
        self,
        subscription_id: Identifier,
        limit: int = 50,
        since: Optional[datetime] = None,
    ) -> List[ParsedEntry]:
        """List stored entries for a subscription, newest first.

        Date filtering uses published_date when available, falling back to
        discovered_date for entries without one.

        Args:
            subscription_id: Subscription to list entries for
            limit: Maximum number of entries to return (default: 50)
            since: Only return entries published/discovered after this datetime

        Returns:
            List of ParsedEntry objects
        """
        db = await self.connection()

        query = "SELECT * FROM entries WHERE subscription_id = ?"
        params: List = [subscription_id.hex_string]

        if since:
            query += " AND COALESCE(published_date, discovered_date) >= ?"
            params.append(since.isoformat())

        query += " ORDER BY COALESCE(published_date, discovered_date) DESC, id DESC LIMIT ?"
        params.append(limit)

        cursor = await db.execute(query, params)

        entries = []
        async for row in cursor:
            entries.append(ParsedEntry(
                title=row["title"],
                url=row["url"],
                guid=row["guid"] or "",
                published_date=datetime.fromisoformat(row["published_date"])
                if row["published_date"]
                else None,
                summary=row["summary"] or "",
            ))

        return entries

    async def count_snapshots(self, subscription_id: Identifier) -> int:
        db = await self.connection()

        cursor = await db.execute(
            "SELECT COUNT(*) as count FROM feed_snapshots WHERE subscription_id = ?",
            (subscription_id.hex_string,),
        )
        row = await cursor.fetchone()
        return row["count"]

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
