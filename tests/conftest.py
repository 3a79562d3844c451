"""Pytest configuration and shared fixtures."""

import pytest

# Add project root to path
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))


SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Feed</title>
    <link>https://example.com/</link>
    <description>Example description</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/first</link>
      <description>First summary</description>
      <content:encoded><![CDATA[<p>First body</p>]]></content:encoded>
      <dc:creator>Jane Doe</dc:creator>
      <category>Space</category>
      <category>Science</category>
      <category>Space</category>
      <guid isPermaLink="true">https://example.com/first?id=1</guid>
      <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/second</link>
      <description>Second summary</description>
      <guid isPermaLink="false">second-guid</guid>
      <pubDate>Tue, 02 Jan 2024 08:30:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

SAMPLE_ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Example</title>
  <subtitle>Atom subtitle</subtitle>
  <link href="https://atom.example.com/"/>
  <id>urn:uuid:feed</id>
  <updated>2024-03-01T10:00:00Z</updated>
  <entry>
    <title>Atom Entry</title>
    <link href="https://atom.example.com/entry"/>
    <id>urn:uuid:entry-1</id>
    <updated>2024-03-01T09:15:00Z</updated>
    <summary>Atom summary</summary>
    <author><name>John Smith</name></author>
    <category term="Tech"/>
  </entry>
</feed>
"""


class FakeResponse:
    """Stand-in for an aiohttp response used as `async with session.post(...)`."""

    def __init__(self, status: int, text: str = ""):
        self.status = status
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


@pytest.fixture
def sample_rss():
    return SAMPLE_RSS


@pytest.fixture
def sample_atom():
    return SAMPLE_ATOM


@pytest.fixture
def sample_feed():
    """Provide a NormalizedFeed with two articles."""
    from feedcache.ingestion.interfaces import Article, Author, NormalizedFeed
    return NormalizedFeed(
        title="Example Feed",
        description="Example description",
        link="https://example.com/",
        items=[
            Article(
                title="First Article",
                description="First summary",
                content="<p>First body</p>",
                link="https://example.com/first",
                url="https://example.com/first?id=1",
                published_at="2024-01-01T12:00:00Z",
                author=Author(name="Jane Doe"),
                categories=["Space", "Science"],
            ),
            Article(
                title="Second Article",
                description="Second summary",
                link="https://example.com/second",
                url="https://example.com/second",
                published_at="2024-01-02T08:30:00Z",
            ),
        ],
    )


@pytest.fixture
def registry_file(tmp_path):
    """Write a small YAML registry and return its path."""
    path = tmp_path / "config" / "feeds.yml"
    path.parent.mkdir(parents=True)
    path.write_text(
        "- name: A\n"
        "  url: http://x\n"
        "- name: B\n"
        "  url: http://y\n"
    )
    return path


@pytest.fixture
def feed_cache(tmp_path):
    from feedcache.storage.cache import FeedCache
    return FeedCache(tmp_path / "cache")


@pytest.fixture
def oracle_session():
    """Session double for the token oracle: accepts only the token 'good'."""
    from unittest.mock import MagicMock

    def post(url, json=None):
        return FakeResponse(200 if json and json.get("Token") == "good" else 401)

    session = MagicMock()
    session.post = MagicMock(side_effect=post)
    return session
