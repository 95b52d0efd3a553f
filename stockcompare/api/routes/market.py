"""
Market routes - index overview and symbol search.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from stockcompare.api.deps import get_search_provider, get_series_provider, unavailable_to_http
from stockcompare.api.schemas import IndexQuoteOut, SearchResultOut
from stockcompare.domain.errors import DataUnavailableError
from stockcompare.infrastructure.market_data.types import SeriesProvider
from stockcompare.services.market_overview_service import MarketOverviewService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/market")
async def market_overview(provider: SeriesProvider = Depends(get_series_provider)) -> Dict[str, List[IndexQuoteOut]]:
    """S&P 500, NASDAQ and DOW against their previous close."""
    quotes = await MarketOverviewService(provider).get_overview()
    return {
        "indices": [
            IndexQuoteOut(
                symbol=q.symbol,
                name=q.name,
                price=q.price,
                change=q.change,
                changePercent=q.change_percent,
                error=q.error,
            )
            for q in quotes
        ]
    }


@router.get("/search")
async def search_symbols(
    q: str = Query(""),
    provider=Depends(get_search_provider),
) -> Dict[str, List[SearchResultOut]]:
    """Ticker search; an empty query returns no results."""
    if not q.strip():
        return {"results": []}
    try:
        results = await provider.search(q)
    except DataUnavailableError as exc:
        logger.error("Error searching stocks: %s", exc)
        if exc.status_code:
            raise unavailable_to_http(exc)
        raise HTTPException(status_code=502, detail="Failed to search stocks")

    return {
        "results": [
            SearchResultOut(symbol=r.symbol, name=r.name, exchange=r.exchange, type=r.type)
            for r in results
        ]
    }
