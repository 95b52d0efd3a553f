"""
Portfolio-level totals over an aggregation snapshot.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

from stockcompare.domain.models import AggregatedPosition, PositionStatus


@dataclass(frozen=True)
class PortfolioTotals:
    base_value: float = 0.0
    current_value: float = 0.0
    profit_loss: float = 0.0
    percent_change: float = 0.0
    resolved_count: int = 0
    pending_count: int = 0
    errored_symbols: List[str] = field(default_factory=list)


def calculate_totals(entries: Iterable[AggregatedPosition]) -> PortfolioTotals:
    """
    Sum resolved positions.

    base_value is quantity x base price, so profit_loss equals the sum of the
    per-position figures.
    """
    base_value = 0.0
    current_value = 0.0
    resolved = 0
    pending = 0
    errored: List[str] = []

    for entry in entries:
        if entry.status is PositionStatus.ERROR:
            errored.append(entry.symbol)
            continue
        if entry.status is PositionStatus.PENDING:
            pending += 1
            continue
        resolved += 1
        base_value += entry.base_price * entry.quantity
        current_value += entry.current_value or 0.0

    profit_loss = current_value - base_value
    return PortfolioTotals(
        base_value=base_value,
        current_value=current_value,
        profit_loss=profit_loss,
        percent_change=(profit_loss / base_value) * 100 if base_value > 0 else 0.0,
        resolved_count=resolved,
        pending_count=pending,
        errored_symbols=errored,
    )
