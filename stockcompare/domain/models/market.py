"""
Market data value objects exchanged with series providers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class ComparisonPeriod(str, Enum):
    """Anchor periods a portfolio can be compared against"""
    CSV = "csv"
    ONE_DAY = "1d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"
    YEAR_TO_DATE = "ytd"
    ONE_YEAR = "1y"


@dataclass(frozen=True)
class PricePoint:
    timestamp: int
    close: Optional[float]


@dataclass(frozen=True)
class PriceSnapshot:
    symbol: str
    price: float
    currency: str = "USD"
    as_of: Optional[datetime] = None
    market_state: Optional[str] = None


@dataclass(frozen=True)
class DailySeries:
    """
    Daily close series as returned upstream.

    ``closes`` and ``volumes`` may contain None for holidays and gaps.
    ``current_price_hint`` is the provider's most recent known price, which can
    be fresher than the last close.
    """
    symbol: str
    timestamps: List[int]
    closes: List[Optional[float]]
    current_price_hint: Optional[float] = None
    previous_close: Optional[float] = None
    volumes: List[Optional[float]] = field(default_factory=list)
    currency: str = "USD"
    exchange_name: Optional[str] = None
    last_volume: Optional[float] = None

    def points(self) -> List[PricePoint]:
        return [PricePoint(ts, close) for ts, close in zip(self.timestamps, self.closes)]

    def valid_points(self) -> List[PricePoint]:
        """Points with a usable close, in timestamp order."""
        return [p for p in self.points() if p.close is not None]


@dataclass(frozen=True)
class PeriodAnchor:
    period: ComparisonPeriod
    anchor_date: Optional[date]
    required_range: Optional[str]
    required_interval: Optional[str]

    @property
    def uses_cost_basis(self) -> bool:
        return self.anchor_date is None


@dataclass(frozen=True)
class ComparisonResult:
    symbol: str
    current_price: Optional[float] = None
    comparison_price: Optional[float] = None
    comparison_date: Optional[date] = None
    period: Optional[str] = None
    error: Optional[str] = None
    # upstream HTTP status behind an errored result, when there was one
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.current_price is not None

    @classmethod
    def unavailable(
        cls,
        symbol: str,
        error: str,
        period: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> "ComparisonResult":
        return cls(symbol=symbol, period=period, error=error, status_code=status_code)


@dataclass(frozen=True)
class SearchResult:
    symbol: str
    name: str
    exchange: str = ""
    type: str = "EQUITY"
