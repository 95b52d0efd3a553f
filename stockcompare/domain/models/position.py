"""
Portfolio positions and their per-run comparison state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Optional

from stockcompare.domain.errors import InvalidInputError


def normalize_symbol(symbol: Optional[str]) -> str:
    """Upper-case and strip a ticker; blank tickers are rejected."""
    cleaned = (symbol or "").strip().upper()
    if not cleaned:
        raise InvalidInputError("Ticker is required")
    return cleaned


@dataclass(frozen=True)
class Position:
    """A holding loaded from an uploaded portfolio or the watchlist"""
    symbol: str
    quantity: float
    cost_basis_price: float
    cost_basis_market_value: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        if self.quantity < 0 or self.cost_basis_price < 0 or self.cost_basis_market_value < 0:
            raise InvalidInputError(f"Negative quantity or price for {self.symbol}")
        if not self.cost_basis_market_value:
            object.__setattr__(
                self, "cost_basis_market_value", self.quantity * self.cost_basis_price
            )


class PositionStatus(str, Enum):
    """Resolution state of one position within an aggregation run"""
    PENDING = "pending"
    RESOLVED = "resolved"
    ERROR = "error"


@dataclass(frozen=True)
class AggregatedPosition:
    """
    Position joined with its comparison result and derived P/L.

    Numeric comparison fields are only populated when status is RESOLVED.
    """
    position: Position
    status: PositionStatus = PositionStatus.PENDING
    current_price: Optional[float] = None
    comparison_price: Optional[float] = None
    comparison_date: Optional[date] = None
    profit_loss: Optional[float] = None
    percent_change: Optional[float] = None
    error: Optional[str] = None

    @property
    def symbol(self) -> str:
        return self.position.symbol

    @property
    def quantity(self) -> float:
        return self.position.quantity

    @property
    def market_value(self) -> float:
        return self.position.cost_basis_market_value

    @property
    def base_price(self) -> Optional[float]:
        if self.status is not PositionStatus.RESOLVED:
            return None
        if self.comparison_price is not None:
            return self.comparison_price
        return self.position.cost_basis_price

    @property
    def current_value(self) -> Optional[float]:
        if self.current_price is None:
            return None
        return self.current_price * self.position.quantity

    def failed(self, error: str) -> "AggregatedPosition":
        return AggregatedPosition(position=self.position, status=PositionStatus.ERROR, error=error)


@dataclass(frozen=True)
class AggregationSnapshot:
    """Consistent, possibly incomplete view of one aggregation run"""
    generation: int
    period: str
    entries: tuple[AggregatedPosition, ...] = field(default_factory=tuple)
    completed: int = 0

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def done(self) -> bool:
        return self.completed >= self.total

    def with_entry(self, index: int, entry: AggregatedPosition) -> "AggregationSnapshot":
        entries = list(self.entries)
        entries[index] = entry
        return replace(self, entries=tuple(entries), completed=self.completed + 1)
