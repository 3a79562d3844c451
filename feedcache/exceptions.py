"""Domain errors raised by the refresh pipeline and the read path."""


class FeedCacheError(Exception):
    """Base class for all feedcache errors."""


class FetchError(FeedCacheError):
    """Raised when a feed cannot be fetched or parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class TransportError(FetchError):
    """Network failure: connection, DNS, timeout or a non-success HTTP status."""


class ParseError(FetchError):
    """The retrieved payload is not a usable RSS/Atom document."""


class RegistryError(FeedCacheError):
    """The feed registry could not be read, written or understood."""


class FeedNotFound(FeedCacheError):
    """No cached snapshot exists for the requested feed name."""

    def __init__(self, name: str):
        super().__init__(f"No cached feed named {name!r}")
        self.name = name


class CorruptCache(FeedCacheError):
    """A cached snapshot exists but does not deserialize into a feed."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Cached feed {name!r} is corrupt: {reason}")
        self.name = name
        self.reason = reason


class ArticleIndexError(FeedCacheError, IndexError):
    """Requested article index is outside the feed's item list."""

    def __init__(self, name: str, index, size: int):
        super().__init__(f"Feed {name!r} has {size} items, no article at {index!r}")
        self.name = name
        self.index = index
        self.size = size


class AccessDenied(FeedCacheError):
    """The token oracle rejected the request token."""


class AuthServiceUnavailable(FeedCacheError):
    """The token oracle could not be reached."""
