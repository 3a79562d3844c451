"""RSS/Atom fetcher with a structured primary path and a raw HTTP fallback."""

import asyncio
import time
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, Optional

import aiohttp
import feedparser
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential
import structlog

from .interfaces import FetcherInterface, NormalizedFeed
from .normalizer import check_parsed, to_normalized_feed
from ..config.settings import settings
from ..exceptions import FetchError, ParseError, TransportError

logger = structlog.get_logger()


@dataclass
class RetryPolicy:
    """How the fallback path retries.

    `max_attempts` counts fallback GETs only; with the default of 1 a fetch is
    exactly two attempts (primary, then one fallback).
    """
    max_attempts: int = 1
    multiplier: float = 1.0
    min_seconds: float = 1.0
    max_seconds: float = 60.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.fetch_fallback_max_attempts,
            multiplier=settings.fetch_backoff_multiplier,
            min_seconds=settings.fetch_backoff_min_seconds,
            max_seconds=settings.fetch_backoff_max_seconds,
        )


class FeedFetcher(FetcherInterface):
    """Resolves a feed URL into a NormalizedFeed.

    The primary attempt lets feedparser fetch and parse the URL itself. If that
    fails, the fetcher waits `fallback_delay` seconds, downloads the document
    with aiohttp and parses the body bytes. A failing fallback raises; the next
    scheduled refresh is the retry.
    """

    def __init__(
        self,
        policy: RetryPolicy = None,
        fallback_delay: float = None,
        timeout: float = None,
        user_agent: str = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.policy = policy or RetryPolicy.from_settings()
        self.fallback_delay = (
            settings.fetch_fallback_delay_seconds if fallback_delay is None else fallback_delay
        )
        self.timeout = timeout or settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.fetch_user_agent
        self.session: Optional[aiohttp.ClientSession] = None
        self._sleep = sleep

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent}
        )
        return self

    async def __aexit__(self, *args):
        if self.session:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> NormalizedFeed:
        """Fetch one feed, falling back to a raw GET when the primary path fails."""
        start_time = time.time()
        try:
            feed = await self._fetch_structured(url)
            logger.info(
                "feed_fetched",
                url=url,
                items=len(feed.items),
                strategy="structured",
                time_ms=int((time.time() - start_time) * 1000),
            )
            return feed
        except FetchError as e:
            logger.error("feed_primary_failed", url=url, error=str(e))

        await self._sleep(self.fallback_delay)
        logger.info("feed_fallback_started", url=url)

        try:
            feed = await self._fetch_fallback(url)
        except FetchError as e:
            logger.error("feed_fallback_failed", url=url, error=str(e))
            raise

        logger.info(
            "feed_fetched",
            url=url,
            items=len(feed.items),
            strategy="fallback",
            time_ms=int((time.time() - start_time) * 1000),
        )
        return feed

    async def _fetch_structured(self, url: str) -> NormalizedFeed:
        # feedparser's urllib fetch has no timeout of its own; bound the wait here
        loop = asyncio.get_running_loop()
        try:
            parsed = await asyncio.wait_for(
                loop.run_in_executor(
                    None, partial(feedparser.parse, url, agent=self.user_agent)
                ),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(url, f"No response within {self.timeout}s") from e
        except OSError as e:
            raise TransportError(url, str(e)) from e
        check_parsed(parsed, url)
        return to_normalized_feed(parsed)

    async def _fetch_fallback(self, url: str) -> NormalizedFeed:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=wait_exponential(
                multiplier=self.policy.multiplier,
                min=self.policy.min_seconds,
                max=self.policy.max_seconds,
            ),
            retry=retry_if_exception_type(TransportError),
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                body = await self._http_get(url)

        try:
            parsed = feedparser.parse(body)
        except ValueError as e:
            raise ParseError(url, str(e)) from e
        check_parsed(parsed, url)
        return to_normalized_feed(parsed)

    async def _http_get(self, url: str) -> bytes:
        """Raw body bytes; feedparser works out the encoding from headers and the XML declaration."""
        if self.session is None:
            raise RuntimeError("FeedFetcher must be used as an async context manager")
        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    raise TransportError(url, f"HTTP {response.status}")
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e
