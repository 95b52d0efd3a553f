"""
COMPARISON RESOLVER
Current price and anchor-period comparison price for one symbol.

RULES:
- csv period: current price only, the caller substitutes the cost basis
- other periods: nearest available close to the anchor date
- never raises; every failure becomes an errored ComparisonResult
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Union

from stockcompare.domain.errors import DataUnavailableError, InvalidInputError
from stockcompare.domain.models import ComparisonPeriod, ComparisonResult, normalize_symbol
from stockcompare.domain.services.nearest_timestamp import anchor_epoch_seconds, locate_nearest
from stockcompare.domain.services.period_anchor_resolver import resolve_period_anchor
from stockcompare.infrastructure.market_data.types import SeriesProvider
from stockcompare.utils.time import epoch_to_date, get_reference_tz, now_reference

logger = logging.getLogger(__name__)


def _is_positive(price: Optional[float]) -> bool:
    return price is not None and price > 0


class ComparisonResolver:
    """
    Resolves {current price, comparison price, comparison date} per symbol.
    """

    def __init__(
        self,
        provider: SeriesProvider,
        tz: Optional[tzinfo] = None,
        max_anchor_gap_days: Optional[int] = None,
    ):
        """
        Args:
            provider: Series provider (must enforce its own timeout)
            tz: Reference timezone for anchor dates
            max_anchor_gap_days: Reject a nearest sample farther than this from
                the anchor (None disables the check)
        """
        self.provider = provider
        self.tz = tz or get_reference_tz()
        self.max_anchor_gap_days = max_anchor_gap_days

    async def resolve(
        self,
        symbol: str,
        period: Union[str, ComparisonPeriod],
        now: Optional[datetime] = None,
    ) -> ComparisonResult:
        raw_symbol = (symbol or "").strip().upper()
        period_code = period.value if isinstance(period, ComparisonPeriod) else period
        try:
            return await self._resolve(symbol, period, now or now_reference(self.tz))
        except InvalidInputError as exc:
            logger.info("Rejected comparison for %r: %s", symbol, exc)
            return ComparisonResult.unavailable(raw_symbol, str(exc), period=period_code)
        except DataUnavailableError as exc:
            logger.warning("Comparison data unavailable for %s: %s", raw_symbol, exc)
            return ComparisonResult.unavailable(
                raw_symbol, str(exc), period=period_code, status_code=exc.status_code
            )

    async def _resolve(
        self,
        symbol: str,
        period: Union[str, ComparisonPeriod],
        now: datetime,
    ) -> ComparisonResult:
        symbol = normalize_symbol(symbol)
        anchor = resolve_period_anchor(period, now)

        if anchor.uses_cost_basis:
            snapshot = await self.provider.get_current_price(symbol)
            if not _is_positive(snapshot.price):
                raise DataUnavailableError(f"Invalid data format for {symbol}", symbol=symbol)
            return ComparisonResult(
                symbol=symbol,
                current_price=snapshot.price,
                comparison_price=None,
                period=anchor.period.value,
            )

        series = await self.provider.get_daily_series(
            symbol, anchor.required_range, anchor.required_interval
        )
        if not _is_positive(series.current_price_hint):
            raise DataUnavailableError(f"Invalid data format for {symbol}", symbol=symbol)

        points = series.valid_points()
        anchor_ts = anchor_epoch_seconds(anchor.anchor_date, self.tz)
        index = locate_nearest([p.timestamp for p in points], anchor_ts)
        if index is None:
            raise DataUnavailableError(f"No historical data found for {symbol}", symbol=symbol)

        closest = points[index]
        if self.max_anchor_gap_days is not None:
            gap = abs(closest.timestamp - anchor_ts)
            if gap > timedelta(days=self.max_anchor_gap_days).total_seconds():
                raise DataUnavailableError(
                    f"No price for {symbol} within {self.max_anchor_gap_days} days of {anchor.anchor_date}",
                    symbol=symbol,
                )

        return ComparisonResult(
            symbol=symbol,
            current_price=series.current_price_hint,
            comparison_price=round(closest.close, 2),
            comparison_date=epoch_to_date(closest.timestamp, self.tz),
            period=anchor.period.value,
        )
