"""feedcache - periodically cache RSS/Atom feeds and serve them over HTTP."""

__version__ = "0.1.0"
