"""
Provider chain - try primary, then fallbacks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from stockcompare.domain.errors import InvalidInputError
from stockcompare.domain.models import DailySeries, PriceSnapshot
from stockcompare.infrastructure.market_data.types import MarketDataUnavailable, SeriesProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedProvider:
    name: str
    provider: SeriesProvider


class ChainedSeriesProvider:
    def __init__(self, providers: List[NamedProvider]):
        if not providers:
            raise ValueError("At least one provider is required")
        self.providers = providers

    async def get_current_price(self, symbol: str) -> PriceSnapshot:
        last_error: MarketDataUnavailable | None = None
        for named in self.providers:
            try:
                snapshot = await named.provider.get_current_price(symbol)
            except InvalidInputError:
                raise
            except MarketDataUnavailable as exc:
                logger.debug("Provider %s has no price for %s: %s", named.name, symbol, exc)
                last_error = exc
                continue
            logger.debug("Price for %s served by %s", snapshot.symbol, named.name)
            return snapshot
        raise last_error or MarketDataUnavailable(f"No price data found for {symbol}", symbol=symbol)

    async def get_daily_series(self, symbol: str, range_: str, interval: str = "1d") -> DailySeries:
        last_error: MarketDataUnavailable | None = None
        for named in self.providers:
            try:
                series = await named.provider.get_daily_series(symbol, range_, interval)
            except InvalidInputError:
                raise
            except MarketDataUnavailable as exc:
                logger.debug("Provider %s has no series for %s: %s", named.name, symbol, exc)
                last_error = exc
                continue
            logger.debug("Series for %s served by %s", series.symbol, named.name)
            return series
        raise last_error or MarketDataUnavailable(f"No data found for {symbol}", symbol=symbol)
