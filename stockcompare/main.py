"""
FastAPI Main Application
Wires market data providers, the comparison engine and the HTTP routes.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockcompare.config import settings
from stockcompare.core.logging import setup_logging
from stockcompare.domain.services.comparison_resolver import ComparisonResolver
from stockcompare.domain.services.portfolio_aggregator import AggregatorRegistry
from stockcompare.domain.services.treemap_layout_engine import TreemapLayoutEngine, TreemapThresholds
from stockcompare.infrastructure.finnhub.finnhub_client import FinnhubClient
from stockcompare.infrastructure.market_data.provider_factory import (
    get_search_provider,
    get_series_provider,
)
from stockcompare.infrastructure.watchlist.store import InMemoryWatchlistStore, JsonFileWatchlistStore
from stockcompare.utils.time import get_reference_tz

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def init_state(app: FastAPI) -> None:
    """Build the service graph and attach it to ``app.state``."""
    series_provider = get_series_provider()
    resolver = ComparisonResolver(
        series_provider,
        tz=get_reference_tz(settings.REFERENCE_TIMEZONE),
        max_anchor_gap_days=settings.MAX_ANCHOR_GAP_DAYS,
    )

    app.state.series_provider = series_provider
    app.state.search_provider = get_search_provider(series_provider)
    app.state.comparison_resolver = resolver
    app.state.aggregator_registry = AggregatorRegistry(resolver, max_sessions=settings.AGGREGATOR_MAX_SESSIONS)
    app.state.treemap_engine = TreemapLayoutEngine(TreemapThresholds.from_settings())
    app.state.finnhub_client = FinnhubClient(
        api_key=settings.FINNHUB_API_KEY,
        base_url=settings.FINNHUB_BASE_URL,
        timeout_seconds=settings.MARKET_DATA_TIMEOUT_SECONDS,
    )

    if settings.WATCHLIST_FILE:
        app.state.watchlist_store = JsonFileWatchlistStore(Path(settings.WATCHLIST_FILE))
        logger.info("Watchlists persisted to %s", settings.WATCHLIST_FILE)
    else:
        app.state.watchlist_store = InMemoryWatchlistStore()
        logger.info("Watchlists kept in memory")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    logger.info("Starting stock-compare (%s)", settings.APP_ENV)
    init_state(app)
    if not settings.FINNHUB_API_KEY:
        logger.warning("FINNHUB_API_KEY not set; company routes will return 500")
    logger.info("API ready on http://%s:%s", settings.API_HOST, settings.API_PORT)

    yield

    logger.info("stock-compare shutdown complete")


app = FastAPI(
    title="Stock Compare",
    description="Portfolio performance over a chosen look-back period",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    provider = getattr(app.state, "series_provider", None)
    return {
        "status": "healthy",
        "service": "stock-compare",
        "version": "1.0.0",
        "market_data": [p.name for p in getattr(provider, "providers", [])],
        "finnhub": "configured" if settings.FINNHUB_API_KEY else "not_configured",
    }


from stockcompare.api.routes import company, market, portfolio, stock, watchlist  # noqa: E402

app.include_router(stock.router, prefix="/api/v1/stock", tags=["Stock"])
app.include_router(market.router, prefix="/api/v1", tags=["Market"])
app.include_router(company.router, prefix="/api/v1/company", tags=["Company"])
app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
app.include_router(watchlist.router, prefix="/api/v1/watchlist", tags=["Watchlist"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stockcompare.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
