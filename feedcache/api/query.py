"""Read path over the registry and the feed cache."""

from datetime import datetime
from typing import List, Union

import structlog

from .auth import AccessGate
from ..config.registry import RegistryStore
from ..exceptions import ArticleIndexError
from ..ingestion.interfaces import Article, RegistryEntry
from ..storage.cache import FeedCache

logger = structlog.get_logger()


def parse_index(name: str, raw: Union[str, int], size: int) -> int:
    """Validate an article index. No wrapping, no clamping."""
    if isinstance(raw, int):
        index = raw
    else:
        text = raw.strip()
        if not (text.isascii() and text.isdigit()):
            raise ArticleIndexError(name, raw, size)
        index = int(text)
    if index < 0 or index >= size:
        raise ArticleIndexError(name, raw, size)
    return index


class QueryService:
    """Every operation passes the access gate before touching any data."""

    def __init__(self, registry: RegistryStore, cache: FeedCache, gate: AccessGate):
        self.registry = registry
        self.cache = cache
        self.gate = gate

    async def list_feeds(self, body: bytes) -> List[RegistryEntry]:
        await self.gate.require(body)
        return self.registry.list()

    async def get_feed(self, body: bytes, name: str) -> bytes:
        """Stored snapshot bytes, unmodified."""
        await self.gate.require(body)
        return self.cache.read_raw(name)

    async def get_article(self, body: bytes, name: str, index: Union[str, int]) -> Article:
        await self.gate.require(body)
        feed = self.cache.read_feed(name)
        position = parse_index(name, index, len(feed.items))
        logger.debug("article_served", feed=name, index=position)
        return feed.items[position]

    def feed_updated_at(self, name: str) -> datetime:
        return self.cache.last_modified(name)
