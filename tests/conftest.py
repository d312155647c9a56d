"""Shared pytest configuration."""

import pytest


@pytest.fixture
def anyio_backend():
    # aiosqlite runs on asyncio only
    return "asyncio"


RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
    <channel>
        <title>Test Blog</title>
        <link>https://example.com</link>
        <item>
            <title>First Post</title>
            <link>https://example.com/post1</link>
            <guid>https://example.com/post1</guid>
            <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
            <description>&lt;p&gt;Hello &lt;b&gt;world&lt;/b&gt;&lt;/p&gt;</description>
        </item>
        <item>
            <title>Second Post</title>
            <link>https://example.com/post2</link>
        </item>
    </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>Atom Blog</title>
    <link href="https://example.org/"/>
    <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
    <updated>2024-01-15T10:30:00Z</updated>
    <entry>
        <title>Atom Post</title>
        <link href="https://example.org/atom-post"/>
        <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
        <updated>2024-01-15T10:30:00Z</updated>
    </entry>
</feed>
"""


@pytest.fixture
def rss_feed() -> bytes:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> bytes:
    return ATOM_FEED
