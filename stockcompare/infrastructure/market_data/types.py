"""
Market data provider protocol for type hints.

Implementations must bound every upstream call with a timeout and raise
MarketDataUnavailable instead of hanging or leaking transport errors.
"""

from __future__ import annotations

from typing import List, Protocol

from stockcompare.domain.errors import DataUnavailableError
from stockcompare.domain.models import DailySeries, PriceSnapshot, SearchResult


class MarketDataUnavailable(DataUnavailableError):
    """Upstream fetch failed, timed out or returned malformed data"""


class SeriesProvider(Protocol):
    async def get_current_price(self, symbol: str) -> PriceSnapshot:
        ...

    async def get_daily_series(self, symbol: str, range_: str, interval: str = "1d") -> DailySeries:
        ...


class SymbolSearchProvider(Protocol):
    async def search(self, query: str, limit: int = 10) -> List[SearchResult]:
        ...
