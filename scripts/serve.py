#!/usr/bin/env python3
"""Serve cached feeds over HTTP and keep them refreshed.

Usage:
    python scripts/serve.py [--host HOST] [--port PORT]

Environment Variables:
    FC_REGISTRY_PATH: YAML feed registry (created with defaults if missing)
    FC_CACHE_DIR: directory holding one JSON snapshot per feed
    FC_AUTH_URL: token oracle endpoint
    FC_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog
import uvicorn

from feedcache.api.app import create_app
from feedcache.config.registry import RegistryStore
from feedcache.config.settings import settings
from feedcache.exceptions import RegistryError

logger = structlog.get_logger()


def configure_logging(level: str):
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    args = parser.parse_args()

    configure_logging(settings.log_level)

    registry = RegistryStore()
    try:
        registry.load()
    except RegistryError as e:
        logger.error("startup_failed", error=str(e))
        sys.exit(1)

    app = create_app(registry=registry)
    logger.info("listening", host=args.host, port=args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
