#!/usr/bin/env python3
"""Run a single refresh pass over the registry and exit."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from feedcache.config.registry import RegistryStore
from feedcache.ingestion.fetcher import FeedFetcher
from feedcache.pipeline.refresh import RefreshScheduler
from feedcache.storage.cache import FeedCache


async def refresh() -> dict:
    registry = RegistryStore()
    registry.load()
    cache = FeedCache()
    async with FeedFetcher() as fetcher:
        scheduler = RefreshScheduler(registry, fetcher, cache)
        return await scheduler.run_pass()


def main():
    print("\n" + "=" * 50)
    print("FEED CACHE REFRESH")
    print("=" * 50 + "\n")

    stats = asyncio.run(refresh())

    print("RESULTS:")
    print(f"  Refreshed: {stats['refreshed']}")
    print(f"  Failed:    {stats['failed']}\n")
    return 0 if stats["failed"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
