"""Map feedparser results onto NormalizedFeed/Article."""

import time
from typing import Any, List

from ..exceptions import ParseError, TransportError
from .interfaces import Article, Author, NormalizedFeed


def check_parsed(parsed: Any, url: str) -> None:
    """Raise a FetchError if feedparser did not produce a usable document.

    feedparser reports problems through `bozo` rather than raising; a
    document is still accepted when it is slightly malformed but carries
    entries or a feed title.
    """
    status = parsed.get("status")
    if status is not None and status >= 400:
        raise TransportError(url, f"HTTP {status}")

    has_content = bool(parsed.entries) or bool(parsed.feed.get("title"))
    if parsed.get("bozo") and not has_content:
        exc = parsed.get("bozo_exception")
        if isinstance(exc, OSError):
            raise TransportError(url, str(exc))
        raise ParseError(url, f"Invalid RSS/Atom feed ({exc})" if exc else "Invalid RSS/Atom feed")

    if not parsed.get("version") and not has_content:
        raise ParseError(url, "Not an RSS/Atom document")


def _text(obj: Any, key: str) -> str:
    value = obj.get(key)
    return value.strip() if isinstance(value, str) else ""


def _published(entry: Any) -> str:
    for attr in ("published_parsed", "updated_parsed"):
        parsed = entry.get(attr)
        if isinstance(parsed, time.struct_time):
            return time.strftime("%Y-%m-%dT%H:%M:%SZ", parsed)
    return ""


def _categories(entry: Any) -> List[str]:
    # Ordered, first occurrence wins
    seen = set()
    out = []
    for tag in entry.get("tags") or []:
        term = tag.get("term") if hasattr(tag, "get") else None
        if isinstance(term, str) and term.strip() and term.strip() not in seen:
            seen.add(term.strip())
            out.append(term.strip())
    return out


def _author(entry: Any) -> Author:
    detail = entry.get("author_detail") or {}
    name = detail.get("name") if hasattr(detail, "get") else None
    if not isinstance(name, str) or not name.strip():
        name = entry.get("author")
    return Author(name=name.strip() if isinstance(name, str) else "")


def _content(entry: Any) -> str:
    content = entry.get("content")
    if content:
        value = content[0].get("value")
        if isinstance(value, str):
            return value.strip()
    return ""


def _permalink(entry: Any, link: str) -> str:
    guid = _text(entry, "id")
    if guid.startswith(("http://", "https://")):
        return guid
    return link


def to_article(entry: Any) -> Article:
    """Convert one feedparser entry; fields outside the model are dropped."""
    link = _text(entry, "link")
    return Article(
        title=_text(entry, "title"),
        description=_text(entry, "summary"),
        content=_content(entry),
        link=link,
        url=_permalink(entry, link),
        published_at=_published(entry),
        author=_author(entry),
        categories=_categories(entry),
    )


def to_normalized_feed(parsed: Any) -> NormalizedFeed:
    """Convert a feedparser result into the persisted feed shape."""
    channel = parsed.feed
    description = _text(channel, "subtitle") or _text(channel, "description")
    return NormalizedFeed(
        title=_text(channel, "title"),
        description=description,
        link=_text(channel, "link"),
        items=[to_article(entry) for entry in parsed.entries],
    )
