"""Interface definitions for data ingestion."""

import json
from dataclasses import dataclass, field
from typing import List


def _require_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _require_mapping(value, what: str) -> dict:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


def is_valid_feed_name(name) -> bool:
    """Feed names become filenames: no separators, no NUL, no leading dot."""
    return (
        isinstance(name, str)
        and bool(name.strip())
        and not name.startswith(".")
        and not any(c in name for c in ("/", "\\", "\x00"))
    )


@dataclass(frozen=True)
class RegistryEntry:
    """A known feed source. `name` doubles as the cache filename."""
    name: str
    url: str

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url}


@dataclass
class Author:
    name: str = ""


@dataclass
class Article:
    """A single normalized feed item."""
    title: str = ""
    description: str = ""
    content: str = ""
    link: str = ""
    url: str = ""
    published_at: str = ""
    author: Author = field(default_factory=Author)
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to the JSON shape stored on disk and served over HTTP."""
        return {
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "link": self.link,
            "url": self.url,
            "publishedAt": self.published_at,
            "author": {"name": self.author.name},
            "categories": list(self.categories),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Article":
        """Strict inverse of to_dict; raises KeyError/TypeError on bad input."""
        data = _require_mapping(data, "article")
        author = _require_mapping(data["author"], "author")
        categories = data["categories"]
        if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
            raise TypeError("categories must be a list of strings")
        return cls(
            title=_require_str(data, "title"),
            description=_require_str(data, "description"),
            content=_require_str(data, "content"),
            link=_require_str(data, "link"),
            url=_require_str(data, "url"),
            published_at=_require_str(data, "publishedAt"),
            author=Author(name=_require_str(author, "name")),
            categories=categories,
        )


@dataclass
class NormalizedFeed:
    """The persisted form of a feed; raw feed data is never kept."""
    title: str = ""
    description: str = ""
    link: str = ""
    items: List[Article] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "link": self.link,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NormalizedFeed":
        data = _require_mapping(data, "feed")
        items = data["items"]
        if not isinstance(items, list):
            raise TypeError("items must be a list")
        return cls(
            title=_require_str(data, "title"),
            description=_require_str(data, "description"),
            link=_require_str(data, "link"),
            items=[Article.from_dict(item) for item in items],
        )


def serialize_feed(feed: NormalizedFeed) -> bytes:
    """Deterministic JSON encoding used for the cache files."""
    return json.dumps(feed.to_dict(), ensure_ascii=False).encode("utf-8")


def deserialize_feed(raw: bytes) -> NormalizedFeed:
    """Decode cache bytes. Raises ValueError, KeyError or TypeError when malformed."""
    return NormalizedFeed.from_dict(json.loads(raw.decode("utf-8")))


class FetcherInterface:
    """Interface for feed fetching."""

    async def fetch(self, url: str) -> NormalizedFeed:
        """Fetch and normalize a single feed."""
        raise NotImplementedError
