"""
Finnhub client
Company profile and recent company news.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional

import httpx

from stockcompare.domain.errors import ConfigurationError
from stockcompare.domain.models import normalize_symbol
from stockcompare.infrastructure.market_data.types import MarketDataUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompanyProfile:
    ticker: str
    name: str = ""
    logo: str = ""
    country: str = ""
    currency: str = "USD"
    exchange: str = ""
    industry: str = ""
    ipo: str = ""
    market_cap: float = 0.0
    phone: str = ""
    share_outstanding: float = 0.0
    weburl: str = ""


@dataclass(frozen=True)
class NewsArticle:
    headline: str
    summary: str
    source: str
    url: str
    image: str
    datetime: Optional[datetime]


class FinnhubClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://finnhub.io/api/v1",
        timeout_seconds: float = 10.0,
    ):
        self.api_key = (api_key or "").strip() or None
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def _request_json(self, path: str, symbol: str, params: dict) -> Any:
        if not self.api_key:
            raise ConfigurationError("Finnhub API key not configured")

        url = f"{self.base_url}{path}"
        query = dict(params, token=self.api_key)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, params=query, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            raise MarketDataUnavailable(f"Failed to reach Finnhub for {symbol}", symbol=symbol) from exc

        if response.status_code != 200:
            logger.debug("Finnhub API %s for %s", response.status_code, symbol)
            raise MarketDataUnavailable(
                f"Failed to fetch Finnhub data for {symbol}",
                symbol=symbol,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise MarketDataUnavailable(f"Invalid Finnhub response for {symbol}", symbol=symbol) from exc

    async def get_company_profile(self, symbol: str) -> CompanyProfile:
        symbol = normalize_symbol(symbol)
        data = await self._request_json("/stock/profile2", symbol, {"symbol": symbol})

        # Finnhub answers unknown tickers with an empty object
        if not data:
            raise MarketDataUnavailable(
                f"No company information found for {symbol}", symbol=symbol, status_code=404
            )

        return CompanyProfile(
            ticker=symbol,
            name=data.get("name") or "",
            logo=data.get("logo") or "",
            country=data.get("country") or "",
            currency=data.get("currency") or "USD",
            exchange=data.get("exchange") or "",
            industry=data.get("finnhubIndustry") or "",
            ipo=data.get("ipo") or "",
            market_cap=float(data.get("marketCapitalization") or 0),
            phone=data.get("phone") or "",
            share_outstanding=float(data.get("shareOutstanding") or 0),
            weburl=data.get("weburl") or "",
        )

    async def get_company_news(
        self,
        symbol: str,
        days: int = 7,
        limit: int = 10,
        today: Optional[date] = None,
    ) -> List[NewsArticle]:
        symbol = normalize_symbol(symbol)
        to_date = today or date.today()
        from_date = to_date - timedelta(days=days)
        data = await self._request_json(
            "/company-news",
            symbol,
            {"symbol": symbol, "from": from_date.isoformat(), "to": to_date.isoformat()},
        )

        articles: List[NewsArticle] = []
        for item in (data or [])[:limit]:
            ts = item.get("datetime")
            articles.append(
                NewsArticle(
                    headline=item.get("headline") or "",
                    summary=item.get("summary") or "",
                    source=item.get("source") or "",
                    url=item.get("url") or "",
                    image=item.get("image") or "",
                    datetime=datetime.fromtimestamp(ts, tz=timezone.utc) if ts else None,
                )
            )
        return articles
