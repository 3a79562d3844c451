"""Unit tests for the query service."""

import pytest
from unittest.mock import AsyncMock, MagicMock

# Add project root to path
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from feedcache.api.query import QueryService, parse_index
from feedcache.config.registry import RegistryStore
from feedcache.exceptions import AccessDenied, ArticleIndexError, FeedNotFound
from feedcache.ingestion.interfaces import RegistryEntry, deserialize_feed

BODY = b'{"Token": "good"}'


def _service(registry_file, feed_cache, allow=True) -> QueryService:
    registry = RegistryStore(registry_file)
    registry.load()
    gate = MagicMock()
    gate.require = AsyncMock(side_effect=None if allow else AccessDenied("Token rejected"))
    return QueryService(registry, feed_cache, gate)


@pytest.mark.asyncio
class TestQueryService:
    """Tests for QueryService."""

    async def test_list_feeds(self, registry_file, feed_cache):
        service = _service(registry_file, feed_cache)
        feeds = await service.list_feeds(BODY)
        assert [f.name for f in feeds] == ["A", "B"]
        service.gate.require.assert_awaited_once_with(BODY)

    async def test_get_feed_returns_stored_bytes(self, registry_file, feed_cache, sample_feed):
        path = feed_cache.persist(RegistryEntry("A", "http://x"), sample_feed)
        service = _service(registry_file, feed_cache)

        assert await service.get_feed(BODY, "A") == path.read_bytes()

    async def test_get_feed_missing(self, registry_file, feed_cache):
        """Unknown name with no cache file is FeedNotFound."""
        service = _service(registry_file, feed_cache)
        with pytest.raises(FeedNotFound):
            await service.get_feed(BODY, "missing")

    async def test_get_article_matches_direct_parse(self, registry_file, feed_cache, sample_feed):
        """Every valid index returns the same Article as parsing the file."""
        path = feed_cache.persist(RegistryEntry("A", "http://x"), sample_feed)
        direct = deserialize_feed(path.read_bytes())
        service = _service(registry_file, feed_cache)

        for i in range(len(direct.items)):
            assert await service.get_article(BODY, "A", i) == direct.items[i]
            assert await service.get_article(BODY, "A", str(i)) == direct.items[i]

    async def test_get_article_out_of_range(self, registry_file, feed_cache, sample_feed):
        """Indices past the end raise, never a default Article."""
        feed_cache.persist(RegistryEntry("A", "http://x"), sample_feed)
        service = _service(registry_file, feed_cache)

        for index in (2, 3, 100, "2"):
            with pytest.raises(ArticleIndexError):
                await service.get_article(BODY, "A", index)

    async def test_get_article_negative_does_not_wrap(self, registry_file, feed_cache, sample_feed):
        feed_cache.persist(RegistryEntry("A", "http://x"), sample_feed)
        service = _service(registry_file, feed_cache)

        for index in (-1, "-1", "abc", "1.0", ""):
            with pytest.raises(ArticleIndexError):
                await service.get_article(BODY, "A", index)

    async def test_denied_before_any_work(self, registry_file, feed_cache):
        """Denial wins even when the requested feed does not exist."""
        service = _service(registry_file, feed_cache, allow=False)

        with pytest.raises(AccessDenied):
            await service.list_feeds(b"")
        with pytest.raises(AccessDenied):
            await service.get_feed(b"", "missing")
        with pytest.raises(AccessDenied):
            await service.get_article(b"", "missing", 0)


class TestParseIndex:
    """Tests for article index validation."""

    def test_valid(self):
        assert parse_index("A", "0", 1) == 0
        assert parse_index("A", 4, 5) == 4

    def test_empty_feed_has_no_articles(self):
        with pytest.raises(ArticleIndexError):
            parse_index("A", 0, 0)

    def test_error_is_index_error(self):
        with pytest.raises(IndexError):
            parse_index("A", 9, 1)
