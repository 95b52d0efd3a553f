"""
YFinance Market Data Provider
Async-safe Yahoo Finance integration through the yfinance library
"""

import asyncio
import logging
import random
import time
from datetime import datetime, timezone
from typing import Dict, Optional

import pandas as pd
import yfinance as yf

from stockcompare.domain.models import DailySeries, PriceSnapshot, normalize_symbol
from stockcompare.infrastructure.market_data.types import MarketDataUnavailable

logger = logging.getLogger(__name__)


class YFinanceProvider:
    """
    Yahoo Finance data provider backed by yfinance.
    Blocking calls are offloaded to threads and bounded by ``timeout_seconds``.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        cache_ttl_seconds: int = 60,
        retries: int = 1,
    ):
        self.timeout_seconds = timeout_seconds
        self.cache_ttl_seconds = cache_ttl_seconds
        self.retries = retries
        self._cache: Dict[str, tuple[float, object]] = {}

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    async def _history(self, ticker: yf.Ticker, **kwargs) -> pd.DataFrame:
        """
        Async-safe wrapper around yfinance history()
        """
        return await asyncio.wait_for(
            asyncio.to_thread(ticker.history, **kwargs),
            timeout=self.timeout_seconds,
        )

    async def _history_with_retry(self, symbol: str, **kwargs) -> pd.DataFrame:
        """
        Retry wrapper around history() to handle transient failures.
        """
        ticker = yf.Ticker(symbol)
        last_exc: Optional[Exception] = None
        for attempt in range(self.retries + 1):
            try:
                return await self._history(ticker, **kwargs)
            except asyncio.TimeoutError as exc:
                last_exc = exc
                logger.warning("yfinance history timed out for %s (attempt %d)", symbol, attempt + 1)
            except Exception as exc:
                last_exc = exc
                logger.warning("yfinance history failed for %s: %s", symbol, exc)
            if attempt < self.retries:
                await asyncio.sleep(0.4 * (2 ** attempt) + random.random() * 0.2)
        raise MarketDataUnavailable(f"Failed to fetch history for {symbol}", symbol=symbol) from last_exc

    def _cache_get(self, key: str) -> Optional[object]:
        cached = self._cache.get(key)
        if not cached:
            return None
        ts, value = cached
        if time.time() - ts > self.cache_ttl_seconds:
            return None
        return value

    def _cache_set(self, key: str, value: object) -> None:
        self._cache[key] = (time.time(), value)

    @staticmethod
    def _frame_to_series(symbol: str, hist: pd.DataFrame) -> DailySeries:
        if hist is None or hist.empty or "Close" not in hist:
            raise MarketDataUnavailable(f"No data found for {symbol}", symbol=symbol, status_code=404)

        index = pd.DatetimeIndex(hist.index)
        if index.tz is None:
            index = index.tz_localize("UTC")
        timestamps = [int(ts.timestamp()) for ts in index]
        closes = [None if pd.isna(c) else float(c) for c in hist["Close"]]
        volumes = (
            [None if pd.isna(v) else float(v) for v in hist["Volume"]]
            if "Volume" in hist else []
        )
        valid = [c for c in closes if c is not None]

        return DailySeries(
            symbol=symbol,
            timestamps=timestamps,
            closes=closes,
            current_price_hint=valid[-1] if valid else None,
            previous_close=valid[-2] if len(valid) > 1 else None,
            volumes=volumes,
            last_volume=next((v for v in reversed(volumes) if v is not None), None),
        )

    # ------------------------------------------------------------------
    # CURRENT PRICE
    # ------------------------------------------------------------------

    async def get_current_price(self, symbol: str) -> PriceSnapshot:
        symbol = normalize_symbol(symbol)
        series = await self.get_daily_series(symbol, "5d", "1d")
        if series.current_price_hint is None:
            raise MarketDataUnavailable(f"No price data found for {symbol}", symbol=symbol, status_code=404)
        return PriceSnapshot(
            symbol=symbol,
            price=series.current_price_hint,
            currency=series.currency,
            as_of=datetime.fromtimestamp(series.timestamps[-1], tz=timezone.utc),
        )

    # ------------------------------------------------------------------
    # DAILY SERIES
    # ------------------------------------------------------------------

    async def get_daily_series(self, symbol: str, range_: str, interval: str = "1d") -> DailySeries:
        symbol = normalize_symbol(symbol)
        cache_key = f"history:{symbol}:{range_}:{interval}"
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached  # type: ignore[return-value]

        hist = await self._history_with_retry(
            symbol,
            period=range_,
            interval=interval,
            auto_adjust=False,
        )
        series = self._frame_to_series(symbol, hist)
        self._cache_set(cache_key, series)
        return series
