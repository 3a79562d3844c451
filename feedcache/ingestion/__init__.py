"""Data ingestion - fetching and normalizing RSS/Atom feeds."""

from .interfaces import RegistryEntry, NormalizedFeed, Article, Author, FetcherInterface
from .fetcher import FeedFetcher, RetryPolicy

__all__ = [
    "RegistryEntry", "NormalizedFeed", "Article", "Author",
    "FetcherInterface", "FeedFetcher", "RetryPolicy"
]
