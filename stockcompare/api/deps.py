"""
Request-scoped accessors for services created in the application lifespan.
"""

from fastapi import HTTPException, Request

from stockcompare.domain.errors import DataUnavailableError
from stockcompare.domain.services.comparison_resolver import ComparisonResolver
from stockcompare.domain.services.portfolio_aggregator import AggregatorRegistry
from stockcompare.domain.services.treemap_layout_engine import TreemapLayoutEngine
from stockcompare.infrastructure.finnhub.finnhub_client import FinnhubClient
from stockcompare.infrastructure.market_data.types import SeriesProvider
from stockcompare.infrastructure.watchlist.store import WatchlistStore


def get_series_provider(request: Request) -> SeriesProvider:
    return request.app.state.series_provider


def get_search_provider(request: Request):
    return request.app.state.search_provider


def get_comparison_resolver(request: Request) -> ComparisonResolver:
    return request.app.state.comparison_resolver


def get_aggregator_registry(request: Request) -> AggregatorRegistry:
    return request.app.state.aggregator_registry


def get_treemap_engine(request: Request) -> TreemapLayoutEngine:
    return request.app.state.treemap_engine


def get_finnhub_client(request: Request) -> FinnhubClient:
    return request.app.state.finnhub_client


def get_watchlist_store(request: Request) -> WatchlistStore:
    return request.app.state.watchlist_store


def unavailable_to_http(exc: DataUnavailableError) -> HTTPException:
    """Upstream 4xx/5xx status is passed through; anything else is a 502."""
    status = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
    return HTTPException(status_code=status, detail=exc.message)
