"""
Stock routes - current price, history, period comparison and key stats.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from stockcompare.api.deps import (
    get_comparison_resolver,
    get_series_provider,
    unavailable_to_http,
)
from stockcompare.api.schemas import (
    CompareResponse,
    HistoryMeta,
    HistoryPoint,
    HistoryResponse,
    StatsResponse,
    StockPriceResponse,
)
from stockcompare.domain.errors import DataUnavailableError, InvalidInputError
from stockcompare.domain.models import normalize_symbol
from stockcompare.domain.services.comparison_resolver import ComparisonResolver
from stockcompare.domain.services.period_anchor_resolver import parse_period
from stockcompare.domain.services.series_stats import compute_series_stats
from stockcompare.infrastructure.market_data.types import SeriesProvider
from stockcompare.utils.time import epoch_to_date

logger = logging.getLogger(__name__)
router = APIRouter()


def _symbol_or_400(ticker: str) -> str:
    try:
        return normalize_symbol(ticker)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/{ticker}", response_model=StockPriceResponse)
async def get_stock_price(ticker: str, provider: SeriesProvider = Depends(get_series_provider)):
    """Current price snapshot."""
    symbol = _symbol_or_400(ticker)
    try:
        snapshot = await provider.get_current_price(symbol)
    except DataUnavailableError as exc:
        raise unavailable_to_http(exc)

    return StockPriceResponse(
        ticker=symbol,
        currentPrice=snapshot.price,
        currency=snapshot.currency,
        marketState=snapshot.market_state,
    )


@router.get("/{ticker}/history", response_model=HistoryResponse)
async def get_stock_history(
    ticker: str,
    range_: str = Query("1mo", alias="range"),
    interval: str = Query("1d"),
    provider: SeriesProvider = Depends(get_series_provider),
):
    """Dated closes for charting; days without a close are dropped."""
    symbol = _symbol_or_400(ticker)
    try:
        series = await provider.get_daily_series(symbol, range_, interval)
    except DataUnavailableError as exc:
        raise unavailable_to_http(exc)

    points = [
        HistoryPoint(date=epoch_to_date(p.timestamp), price=round(p.close, 2))
        for p in series.valid_points()
    ]
    return HistoryResponse(
        ticker=symbol,
        data=points,
        meta=HistoryMeta(
            currency=series.currency,
            exchangeName=series.exchange_name,
            symbol=series.symbol,
            currentPrice=series.current_price_hint,
        ),
    )


@router.get("/{ticker}/compare", response_model=CompareResponse)
async def compare_stock(
    ticker: str,
    period: str = Query("csv"),
    resolver: ComparisonResolver = Depends(get_comparison_resolver),
):
    """Current price against the close nearest the period anchor."""
    symbol = _symbol_or_400(ticker)
    try:
        resolved_period = parse_period(period)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    result = await resolver.resolve(symbol, resolved_period)
    if not result.ok:
        status = result.status_code if result.status_code and result.status_code >= 400 else 404
        raise HTTPException(status_code=status, detail=result.error)

    return CompareResponse(
        ticker=result.symbol,
        currentPrice=result.current_price,
        comparisonPrice=result.comparison_price,
        period=result.period or resolved_period.value,
        comparisonDate=result.comparison_date,
    )


@router.get("/{ticker}/stats", response_model=StatsResponse)
async def get_stock_stats(ticker: str, provider: SeriesProvider = Depends(get_series_provider)):
    """52-week range and volume figures from one year of daily data."""
    symbol = _symbol_or_400(ticker)
    try:
        series = await provider.get_daily_series(symbol, "1y", "1d")
    except DataUnavailableError as exc:
        logger.error(f"Error fetching stats for {symbol}: {exc}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch stats for {symbol}")

    stats = compute_series_stats(series)
    return StatsResponse(
        ticker=symbol,
        fiftyTwoWeekHigh=stats.high,
        fiftyTwoWeekLow=stats.low,
        currentPrice=stats.current_price,
        volume=stats.volume,
        avgVolume=stats.avg_volume,
    )
