import asyncio
from datetime import date, datetime, time
from typing import AsyncGenerator, Dict, Iterable, Optional
from zoneinfo import ZoneInfo

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from stockcompare.api.routes import company, market, portfolio, stock, watchlist
from stockcompare.domain.models import DailySeries, PriceSnapshot, SearchResult
from stockcompare.domain.services.comparison_resolver import ComparisonResolver
from stockcompare.domain.services.portfolio_aggregator import AggregatorRegistry
from stockcompare.domain.services.treemap_layout_engine import TreemapLayoutEngine
from stockcompare.infrastructure.finnhub.finnhub_client import FinnhubClient
from stockcompare.infrastructure.market_data.types import MarketDataUnavailable
from stockcompare.infrastructure.watchlist.store import InMemoryWatchlistStore

NY = ZoneInfo("America/New_York")

# Friday, mid-session
NOW = datetime(2024, 6, 14, 12, 0, tzinfo=NY)


def session_epoch(day: date) -> int:
    """Daily bars are stamped at the 09:30 New York open."""
    return int(datetime.combine(day, time(9, 30), tzinfo=NY).timestamp())


def make_series(
    symbol: str,
    closes: Dict[date, Optional[float]],
    current: Optional[float],
    volumes: Optional[Iterable[Optional[float]]] = None,
    previous_close: Optional[float] = None,
) -> DailySeries:
    days = sorted(closes)
    return DailySeries(
        symbol=symbol,
        timestamps=[session_epoch(d) for d in days],
        closes=[closes[d] for d in days],
        current_price_hint=current,
        previous_close=previous_close,
        volumes=list(volumes) if volumes is not None else [],
        exchange_name="NMS",
    )


class StubSeriesProvider:
    """In-memory SeriesProvider that records every call."""

    def __init__(
        self,
        prices: Optional[Dict[str, float]] = None,
        series: Optional[Dict[str, DailySeries]] = None,
        failures: Iterable[str] = (),
        delays: Optional[Dict[str, float]] = None,
    ):
        self.prices = prices or {}
        self.series = series or {}
        self.failures = set(failures)
        self.delays = delays or {}
        self.calls = []

    async def _pause(self, symbol: str) -> None:
        delay = self.delays.get(symbol)
        if delay:
            await asyncio.sleep(delay)

    async def get_current_price(self, symbol: str) -> PriceSnapshot:
        self.calls.append(("price", symbol))
        await self._pause(symbol)
        if symbol in self.failures or symbol not in self.prices:
            raise MarketDataUnavailable(f"No price data found for {symbol}", symbol=symbol, status_code=404)
        return PriceSnapshot(symbol=symbol, price=self.prices[symbol], market_state="REGULAR")

    async def get_daily_series(self, symbol: str, range_: str, interval: str = "1d") -> DailySeries:
        self.calls.append(("series", symbol, range_, interval))
        await self._pause(symbol)
        if symbol in self.failures or symbol not in self.series:
            raise MarketDataUnavailable(f"No data found for {symbol}", symbol=symbol, status_code=404)
        return self.series[symbol]

    async def search(self, query: str, limit: int = 10):
        self.calls.append(("search", query))
        return [SearchResult(symbol="AAPL", name="Apple Inc.", exchange="NMS", type="EQUITY")]

    def series_calls(self):
        return [c for c in self.calls if c[0] == "series"]


@pytest.fixture()
def stub_provider() -> StubSeriesProvider:
    aapl = make_series(
        "AAPL",
        {
            date(2024, 5, 10): 158.0,
            date(2024, 5, 13): 159.0,
            date(2024, 5, 14): 160.0,
            date(2024, 5, 15): None,
            date(2024, 5, 16): 162.0,
            date(2024, 6, 13): 179.0,
        },
        current=180.0,
        volumes=[1000, 2000, 3000, None, 4000, 5000],
    )
    return StubSeriesProvider(
        prices={"AAPL": 180.0, "MSFT": 310.0},
        series={"AAPL": aapl},
        failures={"MSFT"},
    )


@pytest.fixture()
def app(stub_provider) -> FastAPI:
    app = FastAPI()
    app.include_router(stock.router, prefix="/api/v1/stock", tags=["Stock"])
    app.include_router(market.router, prefix="/api/v1", tags=["Market"])
    app.include_router(company.router, prefix="/api/v1/company", tags=["Company"])
    app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
    app.include_router(watchlist.router, prefix="/api/v1/watchlist", tags=["Watchlist"])

    resolver = ComparisonResolver(stub_provider, tz=NY, max_anchor_gap_days=10)
    app.state.series_provider = stub_provider
    app.state.search_provider = stub_provider
    app.state.comparison_resolver = resolver
    app.state.aggregator_registry = AggregatorRegistry(resolver)
    app.state.treemap_engine = TreemapLayoutEngine()
    app.state.finnhub_client = FinnhubClient(api_key=None)
    app.state.watchlist_store = InMemoryWatchlistStore()
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
