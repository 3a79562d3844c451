"""Feed registry - the set of known feed sources, persisted as YAML."""

import os
import tempfile
from pathlib import Path
from typing import List, Optional

import yaml
import structlog

from .settings import settings
from ..exceptions import RegistryError
from ..ingestion.interfaces import RegistryEntry, is_valid_feed_name

logger = structlog.get_logger()

# Installed on first run when no registry file exists
DEFAULT_FEEDS = [
    RegistryEntry(name="SpaceFlightNow", url="https://spaceflightnow.com/feed/"),
    RegistryEntry(name="The Guardian", url="https://www.theguardian.com/international/rss"),
    RegistryEntry(name="Heise Online", url="https://www.heise.de/newsticker/heise-atom.xml"),
    RegistryEntry(name="reddit", url="https://www.reddit.com/.rss"),
    RegistryEntry(name="New York Times", url="http://rss.nytimes.com/services/xml/rss/nyt/World.xml"),
]


def parse_registry(data) -> List[RegistryEntry]:
    """Validate a decoded YAML document and turn it into entries."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise RegistryError("Registry must be a list of {name, url} mappings")

    entries = []
    seen = set()
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise RegistryError(f"Registry entry {i} is not a mapping")
        name, url = item.get("name"), item.get("url")
        if not isinstance(name, str) or not name.strip():
            raise RegistryError(f"Registry entry {i} has no name")
        if not is_valid_feed_name(name):
            raise RegistryError(f"Feed name {name!r} cannot be used as a cache filename")
        if not isinstance(url, str) or not url.strip():
            raise RegistryError(f"Registry entry {name!r} has no url")
        if name in seen:
            raise RegistryError(f"Duplicate feed name in registry: {name!r}")
        seen.add(name)
        entries.append(RegistryEntry(name=name, url=url.strip()))
    return entries


class RegistryStore:
    """Owns the in-memory feed registry.

    Entries are read once by `load()` and never mutated afterwards, so the
    scheduler and the HTTP handlers can share the store without locking.
    """

    def __init__(self, config_path: str = None):
        self.config_path = Path(config_path) if config_path else settings.registry_path
        self._entries: List[RegistryEntry] = []

    def load(self) -> List[RegistryEntry]:
        """Read the registry file, bootstrapping the defaults if it is missing."""
        logger.info("registry_loading", path=str(self.config_path))
        if not self.config_path.exists():
            logger.info("registry_not_found", path=str(self.config_path))
            self._bootstrap()
        else:
            try:
                with open(self.config_path) as f:
                    data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                logger.error("registry_read_failed", path=str(self.config_path), error=str(e))
                raise RegistryError(f"Cannot read registry {self.config_path}: {e}") from e
            self._entries = parse_registry(data)
            logger.info("registry_loaded", feeds=len(self._entries))
        return self.list()

    def list(self) -> List[RegistryEntry]:
        """Return the known feeds."""
        return list(self._entries)

    def get(self, name: str) -> Optional[RegistryEntry]:
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def _bootstrap(self) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self._save(DEFAULT_FEEDS)
        except OSError as e:
            logger.error("registry_bootstrap_failed", path=str(self.config_path), error=str(e))
            raise RegistryError(f"Cannot create registry {self.config_path}: {e}") from e
        self._entries = list(DEFAULT_FEEDS)
        logger.info("registry_bootstrapped", feeds=len(self._entries))

    def _save(self, entries: List[RegistryEntry]) -> None:
        """Save registry atomically (write to temp, then rename)."""
        fd, temp_path = tempfile.mkstemp(
            dir=self.config_path.parent,
            suffix=".yml"
        )
        try:
            with os.fdopen(fd, 'w') as f:
                yaml.safe_dump([e.to_dict() for e in entries], f, sort_keys=False, allow_unicode=True)
            os.replace(temp_path, self.config_path)
            logger.info("registry_saved", path=str(self.config_path))
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
