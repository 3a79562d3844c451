"""HTTP surface: FastAPI app serving cached feeds behind the access gate."""

from contextlib import AsyncExitStack, asynccontextmanager
from email.utils import format_datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
import structlog

from .auth import AccessGate
from .query import QueryService
from ..config.registry import RegistryStore
from ..exceptions import (
    AccessDenied, ArticleIndexError, AuthServiceUnavailable, CorruptCache, FeedNotFound
)
from ..ingestion.fetcher import FeedFetcher
from ..ingestion.interfaces import FetcherInterface
from ..pipeline.refresh import RefreshScheduler
from ..storage.cache import FeedCache

logger = structlog.get_logger()

# error type -> (status, body)
ERROR_RESPONSES = {
    AccessDenied: (403, "403 - Forbidden"),
    FeedNotFound: (404, "404 - Not Found"),
    ArticleIndexError: (404, "404 - Article Not Found"),
    CorruptCache: (500, "500 - Corrupt Cache"),
    AuthServiceUnavailable: (503, "503 - Service Unavailable"),
}

READ_METHODS = ["GET", "POST"]


def create_app(
    registry: RegistryStore = None,
    cache: FeedCache = None,
    gate: AccessGate = None,
    fetcher: FetcherInterface = None,
    run_scheduler: bool = True,
) -> FastAPI:
    """Build the application.

    Collaborators left as None are created from settings when the app starts;
    an injected registry is expected to be loaded already.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = registry
        if store is None:
            store = RegistryStore()
            store.load()
        feed_cache = cache or FeedCache()

        async with AsyncExitStack() as stack:
            access_gate = gate or await stack.enter_async_context(AccessGate())
            app.state.query = QueryService(store, feed_cache, access_gate)

            if run_scheduler:
                feed_fetcher = fetcher or await stack.enter_async_context(FeedFetcher())
                scheduler = RefreshScheduler(store, feed_fetcher, feed_cache)
                scheduler.start()
                stack.callback(scheduler.shutdown)
                app.state.scheduler = scheduler

            logger.info("service_started", feeds=len(store.list()), scheduler=run_scheduler)
            yield
        logger.info("service_stopped")

    app = FastAPI(title="Feed Cache", lifespan=lifespan)

    # This will allow access to the server even if the request originated somewhere else
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "OPTIONS", "HEAD"],
        allow_headers=["X-Requested-With", "Content-Type"],
    )

    for error_type, (status, body) in ERROR_RESPONSES.items():
        app.add_exception_handler(error_type, _plain_error(status, body))

    @app.api_route("/feeds", methods=READ_METHODS)
    async def get_feeds(request: Request):
        """All known feeds."""
        entries = await request.app.state.query.list_feeds(await request.body())
        return JSONResponse([e.to_dict() for e in entries])

    @app.api_route("/feed/{name}", methods=READ_METHODS)
    async def get_feed(name: str, request: Request):
        """Cached snapshot of a feed, byte for byte."""
        query = request.app.state.query
        content = await query.get_feed(await request.body(), name)
        headers = {"Last-Modified": format_datetime(query.feed_updated_at(name), usegmt=True)}
        return Response(content=content, media_type="application/json", headers=headers)

    @app.api_route("/feed/{name}/{article_id}", methods=READ_METHODS)
    async def get_article(name: str, article_id: str, request: Request):
        """Article at position `article_id` of a cached feed."""
        article = await request.app.state.query.get_article(await request.body(), name, article_id)
        return JSONResponse(article.to_dict())

    return app


def _plain_error(status: int, body: str):
    async def handler(request: Request, exc: Exception):
        logger.info("request_rejected", path=request.url.path, status=status, error=str(exc))
        return PlainTextResponse(body, status_code=status)
    return handler
