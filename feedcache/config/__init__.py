"""Configuration: settings and the feed registry."""

from .settings import Settings, settings
from .registry import RegistryStore, DEFAULT_FEEDS

__all__ = ["Settings", "settings", "RegistryStore", "DEFAULT_FEEDS"]
