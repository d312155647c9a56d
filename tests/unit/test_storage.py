"""Unit tests for storage selection and the built-in backends.

The SQLite backend is tested against an in-memory database.
"""

import sqlite3

import pytest

from feed_sync.errors import BackendNotImplemented, InvalidInput, UnknownBackend
from feed_sync.models.identifier import Identifier
from feed_sync.models.schemas import FormatKind, ParsedEntry, ParsedFeed
from feed_sync.storage import (
    MemoryStore,
    SQLiteStore,
    available_backends,
    register_backend,
    register_pending_backend,
    resolve,
    unregister_backend,
)


# Mark all tests as async
pytestmark = pytest.mark.anyio

SUBSCRIPTION_ID = Identifier.from_content("https://example.com/feed.xml")


def make_feed(*urls, subscription_id=SUBSCRIPTION_ID) -> ParsedFeed:
    return ParsedFeed(
        kind=FormatKind.RSS,
        title="Test Blog",
        link="https://example.com",
        entries=tuple(ParsedEntry(title=f"Post {url}", url=url) for url in urls),
        subscription_id=subscription_id,
        content_checksum=Identifier.from_content(",".join(urls)),
    )


@pytest.fixture
async def sqlite_store():
    """Create an in-memory SQLite store for testing."""
    store = SQLiteStore(db_path=":memory:")
    yield store
    await store.close()


class TestResolve:
    """Tests for resolving backends by name."""

    def test_memory_resolves(self):
        """Test that the memory backend resolves."""
        store = resolve("memory")

        assert isinstance(store, MemoryStore)
        assert store.name == "memory"

    def test_sqlite_resolves_without_io(self, tmp_path):
        """Test that resolving sqlite does not open a connection."""
        db_path = tmp_path / "feeds.db"

        store = resolve("sqlite", db_path=db_path)

        assert isinstance(store, SQLiteStore)
        assert not db_path.exists()

    @pytest.mark.parametrize("name", ["mysql", "mariadb"])
    def test_pending_backend_not_implemented(self, name):
        """Test that known-but-unfinished backends fail explicitly."""
        with pytest.raises(BackendNotImplemented):
            resolve(name)

    def test_unknown_backend(self):
        """Test that an unrecognized name fails with UnknownBackend."""
        with pytest.raises(UnknownBackend):
            resolve("postgres")

    def test_resolution_is_repeatable(self):
        """Test that the same name resolves to the same backend kind."""
        assert type(resolve("memory")) is type(resolve("memory"))
        for _ in range(2):
            with pytest.raises(UnknownBackend):
                resolve("postgres")

    def test_available_backends(self):
        """Test that only usable backends are listed."""
        names = available_backends()

        assert "memory" in names
        assert "sqlite" in names
        assert "mysql" not in names


class TestRegistration:
    """Tests for backend self-registration."""

    def test_register_and_unregister(self):
        """Test that a registered factory is used by resolve."""
        register_backend("scratch", MemoryStore)
        try:
            assert isinstance(resolve("scratch"), MemoryStore)
        finally:
            unregister_backend("scratch")

        with pytest.raises(UnknownBackend):
            resolve("scratch")

    def test_registering_pending_backend_makes_it_usable(self):
        """Test that finishing a pending backend replaces the pending mark."""
        register_pending_backend("cockroach")
        try:
            with pytest.raises(BackendNotImplemented):
                resolve("cockroach")

            register_backend("cockroach", MemoryStore)

            assert isinstance(resolve("cockroach"), MemoryStore)
        finally:
            unregister_backend("cockroach")

    def test_options_passed_to_factory(self):
        """Test that resolve forwards keyword options."""
        received = {}

        def factory(**options):
            received.update(options)
            return MemoryStore()

        register_backend("with-options", factory)
        try:
            resolve("with-options", db_path="x.db")
        finally:
            unregister_backend("with-options")

        assert received == {"db_path": "x.db"}


class TestMemoryStore:
    """Tests for the in-memory backend."""

    async def test_save_returns_new_entry_count(self):
        """Test that duplicate entries across snapshots are not counted."""
        store = MemoryStore()

        assert await store.save(make_feed("https://example.com/1", "https://example.com/2")) == 2
        assert await store.save(make_feed("https://example.com/2", "https://example.com/3")) == 1

        assert len(store.snapshots(SUBSCRIPTION_ID)) == 2
        assert [e.url for e in store.entries(SUBSCRIPTION_ID)] == [
            "https://example.com/1",
            "https://example.com/2",
            "https://example.com/3",
        ]

    async def test_subscriptions_are_isolated(self):
        """Test that entries are deduplicated per subscription only."""
        store = MemoryStore()
        other = Identifier.from_content("https://other.com/feed.xml")

        await store.save(make_feed("https://example.com/1"))
        added = await store.save(make_feed("https://example.com/1", subscription_id=other))

        assert added == 1
        assert len(store.snapshots()) == 2

    async def test_unstamped_feed_rejected(self):
        """Test that a feed without a subscription id cannot be saved."""
        with pytest.raises(InvalidInput):
            await MemoryStore().save(make_feed("https://example.com/1", subscription_id=None))


class TestSQLiteStore:
    """Tests for the SQLite backend."""

    async def test_init_creates_tables(self, sqlite_store):
        """Test that the first connection creates the schema."""
        db = await sqlite_store.connection()
        cursor = await db.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = [row[0] for row in await cursor.fetchall()]

        assert "feed_snapshots" in tables
        assert "entries" in tables

    async def test_save_skips_duplicates(self, sqlite_store):
        """Test that entries already stored are skipped."""
        first = await sqlite_store.save(make_feed("https://example.com/1", "https://example.com/2"))
        second = await sqlite_store.save(make_feed("https://example.com/2", "https://example.com/3"))

        assert first == 2
        assert second == 1
        assert await sqlite_store.count_snapshots(SUBSCRIPTION_ID) == 2

    async def test_list_entries(self, sqlite_store):
        """Test listing stored entries for a subscription."""
        await sqlite_store.save(make_feed("https://example.com/1", "https://example.com/2"))

        entries = await sqlite_store.list_entries(SUBSCRIPTION_ID)

        assert {e.url for e in entries} == {"https://example.com/1", "https://example.com/2"}

    async def test_list_entries_limit(self, sqlite_store):
        """Test that the limit caps the result size."""
        await sqlite_store.save(make_feed(*[f"https://example.com/{i}" for i in range(5)]))

        entries = await sqlite_store.list_entries(SUBSCRIPTION_ID, limit=3)

        assert len(entries) == 3

    async def test_list_entries_other_subscription_empty(self, sqlite_store):
        """Test that entries are scoped to their subscription."""
        await sqlite_store.save(make_feed("https://example.com/1"))

        other = Identifier.from_content("https://other.com/feed.xml")

        assert await sqlite_store.list_entries(other) == []

    async def test_close_is_idempotent(self, sqlite_store):
        """Test that closing twice does not raise."""
        await sqlite_store.connection()
        await sqlite_store.close()
        await sqlite_store.close()

    async def test_default_path_from_env(self, tmp_path, monkeypatch):
        """Test that FEED_SYNC_DB_PATH is used when no path is given."""
        db_path = tmp_path / "nested" / "feeds.db"
        monkeypatch.setenv("FEED_SYNC_DB_PATH", str(db_path))
        store = SQLiteStore()

        try:
            await store.save(make_feed("https://example.com/1"))
        finally:
            await store.close()

        assert db_path.exists()

    async def test_unstamped_feed_rejected(self, sqlite_store):
        """Test that unstamped feeds fail inside the error taxonomy."""
        with pytest.raises(InvalidInput):
            await sqlite_store.save(make_feed("https://example.com/1", subscription_id=None))

    async def test_failed_save_rolls_back(self, sqlite_store):
        """Test that a save failing partway leaves nothing behind."""
        broken = ParsedFeed(
            kind=FormatKind.RSS,
            entries=(
                ParsedEntry(title="Good", url="https://example.com/good"),
                ParsedEntry(title="Bad", url="https://example.com/bad", summary=object()),
            ),
            subscription_id=SUBSCRIPTION_ID,
        )

        with pytest.raises(sqlite3.Error):
            await sqlite_store.save(broken)

        added = await sqlite_store.save(make_feed("https://example.com/other"))

        assert added == 1
        assert await sqlite_store.count_snapshots(SUBSCRIPTION_ID) == 1
        entries = await sqlite_store.list_entries(SUBSCRIPTION_ID)
        assert [e.url for e in entries] == ["https://example.com/other"]
