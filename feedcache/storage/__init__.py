"""Feed snapshot storage."""

from .cache import FeedCache

__all__ = ["FeedCache"]
