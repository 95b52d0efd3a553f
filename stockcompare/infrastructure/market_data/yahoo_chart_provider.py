"""
Yahoo Finance chart API provider
Daily series, current price snapshots and symbol search over httpx.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from stockcompare.domain.models import DailySeries, PriceSnapshot, SearchResult, normalize_symbol
from stockcompare.infrastructure.market_data.types import MarketDataUnavailable

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
}


class YahooChartProvider:
    """
    Client for query1.finance.yahoo.com (v8 chart, v1 search).

    Every request is bounded by ``timeout_seconds``; failures surface as
    MarketDataUnavailable.
    """

    def __init__(
        self,
        base_url: str = "https://query1.finance.yahoo.com",
        timeout_seconds: float = 10.0,
        cache_ttl_seconds: int = 60,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.cache_ttl_seconds = cache_ttl_seconds
        self._client = client
        self._cache: Dict[str, tuple[float, object]] = {}

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

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

    async def _request_json(self, path: str, symbol: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, params=params, headers=DEFAULT_HEADERS, timeout=self.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(url, params=params, headers=DEFAULT_HEADERS)
        except httpx.TimeoutException as exc:
            raise MarketDataUnavailable(f"Timed out fetching data for {symbol}", symbol=symbol) from exc
        except httpx.HTTPError as exc:
            raise MarketDataUnavailable(f"Failed to fetch data for {symbol}: {exc}", symbol=symbol) from exc

        if response.status_code != 200:
            logger.debug("Yahoo API %s for %s: %s", response.status_code, symbol, response.text[:200])
            raise MarketDataUnavailable(
                f"Failed to fetch data for {symbol}",
                symbol=symbol,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise MarketDataUnavailable(f"Invalid response for {symbol}", symbol=symbol) from exc

    @staticmethod
    def _chart_result(payload: Any, symbol: str) -> dict:
        chart = payload.get("chart") if isinstance(payload, dict) else None
        result = chart.get("result") if isinstance(chart, dict) else None
        if not isinstance(result, list) or not result or not isinstance(result[0], dict):
            raise MarketDataUnavailable(f"No data found for {symbol}", symbol=symbol, status_code=404)
        return result[0]

    async def _chart(self, symbol: str, params: Optional[dict] = None) -> dict:
        symbol = normalize_symbol(symbol)
        cache_key = f"chart:{symbol}:{sorted((params or {}).items())}"
        cached = self._cache_get(cache_key)
        if cached is not None:
            return cached  # type: ignore[return-value]

        payload = await self._request_json(f"/v8/finance/chart/{symbol}", symbol, params=params)
        result = self._chart_result(payload, symbol)
        self._cache_set(cache_key, result)
        return result

    # ------------------------------------------------------------------
    # CURRENT PRICE
    # ------------------------------------------------------------------

    async def get_current_price(self, symbol: str) -> PriceSnapshot:
        result = await self._chart(symbol)
        try:
            meta = result.get("meta") or {}
            price = meta.get("regularMarketPrice")
            if not isinstance(price, (int, float)):
                raise MarketDataUnavailable(f"No price data found for {symbol}", symbol=symbol, status_code=404)

            as_of = None
            market_time = meta.get("regularMarketTime")
            if isinstance(market_time, (int, float)):
                as_of = datetime.fromtimestamp(market_time, tz=timezone.utc)

            return PriceSnapshot(
                symbol=normalize_symbol(symbol),
                price=float(price),
                currency=meta.get("currency") or "USD",
                as_of=as_of,
                market_state=meta.get("marketState"),
            )
        except (TypeError, ValueError, AttributeError, OverflowError, OSError) as exc:
            logger.debug("Malformed chart meta for %s: %s", symbol, exc)
            raise MarketDataUnavailable(f"Invalid data format for {symbol}", symbol=symbol) from exc

    # ------------------------------------------------------------------
    # DAILY SERIES
    # ------------------------------------------------------------------

    async def get_daily_series(self, symbol: str, range_: str, interval: str = "1d") -> DailySeries:
        result = await self._chart(symbol, params={"range": range_, "interval": interval})
        try:
            return self._to_series(symbol, result)
        except (TypeError, ValueError, AttributeError, IndexError) as exc:
            logger.debug("Malformed chart series for %s: %s", symbol, exc)
            raise MarketDataUnavailable(f"Invalid data format for {symbol}", symbol=symbol) from exc

    @staticmethod
    def _to_series(symbol: str, result: dict) -> DailySeries:
        meta = result.get("meta") or {}
        timestamps = result.get("timestamp")
        quote = (((result.get("indicators") or {}).get("quote")) or [{}])[0] or {}
        closes = quote.get("close")

        if not timestamps or not closes:
            raise MarketDataUnavailable(f"Invalid data format for {symbol}", symbol=symbol)

        volumes = quote.get("volume") or []
        current = meta.get("regularMarketPrice")
        previous = meta.get("chartPreviousClose")
        last_volume = meta.get("regularMarketVolume")

        return DailySeries(
            symbol=normalize_symbol(symbol),
            timestamps=[int(ts) for ts in timestamps],
            closes=[float(c) if c is not None else None for c in closes],
            current_price_hint=float(current) if isinstance(current, (int, float)) else None,
            previous_close=float(previous) if isinstance(previous, (int, float)) else None,
            volumes=[float(v) if v is not None else None for v in volumes],
            currency=meta.get("currency") or "USD",
            exchange_name=meta.get("exchangeName"),
            last_volume=float(last_volume) if isinstance(last_volume, (int, float)) else None,
        )

    # ------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------

    async def search(self, query: str, limit: int = 10) -> List[SearchResult]:
        query = (query or "").strip()
        if not query:
            return []

        payload = await self._request_json(
            "/v1/finance/search",
            query,
            params={"q": query, "quotesCount": limit, "newsCount": 0},
        )
        quotes = (payload.get("quotes") or []) if isinstance(payload, dict) else None
        if not isinstance(quotes, list):
            raise MarketDataUnavailable(f"Invalid search response for {query}", symbol=query)

        results: List[SearchResult] = []
        for quote in quotes:
            if not isinstance(quote, dict):
                continue
            symbol = quote.get("symbol")
            short_name = quote.get("shortname")
            if not symbol or not short_name:
                continue
            results.append(
                SearchResult(
                    symbol=symbol,
                    name=short_name or quote.get("longname") or symbol,
                    exchange=quote.get("exchange") or "",
                    type=quote.get("quoteType") or "EQUITY",
                )
            )
        return results
