"""Flat-file feed cache: one JSON snapshot per registry entry."""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import structlog

from ..config.settings import settings
from ..exceptions import CorruptCache, FeedNotFound
from ..ingestion.interfaces import (
    NormalizedFeed, RegistryEntry, deserialize_feed, is_valid_feed_name, serialize_feed
)

logger = structlog.get_logger()


class FeedCache:
    """Reads and writes normalized feed snapshots under `cache_dir`.

    Files are named after the registry entry and replaced atomically, so a
    concurrent reader sees either the previous snapshot or the new one.
    """

    def __init__(self, cache_dir: str = None):
        self.cache_dir = Path(cache_dir) if cache_dir else settings.cache_dir

    def path_for(self, name: str) -> Path:
        """Resolve the snapshot path, rejecting names that leave cache_dir."""
        if not is_valid_feed_name(name):
            raise FeedNotFound(name)
        return self.cache_dir / name

    def persist(self, entry: RegistryEntry, feed: NormalizedFeed) -> Path:
        """Overwrite the snapshot for `entry` (write to temp, then rename)."""
        path = self.path_for(entry.name)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        payload = serialize_feed(feed)

        fd, temp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(temp_path, path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        logger.info("cache_written", feed=entry.name, items=len(feed.items), bytes=len(payload))
        return path

    def read_raw(self, name: str) -> bytes:
        """Return the stored bytes verbatim."""
        path = self.path_for(name)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise FeedNotFound(name) from e

    def read_feed(self, name: str) -> NormalizedFeed:
        """Deserialize a snapshot; malformed content raises CorruptCache."""
        raw = self.read_raw(name)
        try:
            return deserialize_feed(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.error("cache_corrupt", feed=name, error=str(e))
            raise CorruptCache(name, str(e)) from e

    def last_modified(self, name: str) -> datetime:
        path = self.path_for(name)
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError as e:
            raise FeedNotFound(name) from e
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

