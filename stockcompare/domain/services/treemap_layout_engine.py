"""
TREEMAP LAYOUT ENGINE
Proportional-area layout for a portfolio.

RESPONSIBILITIES:
- Share of portfolio value per valid position
- Coarse grid span per position (not pixel geometry)
- Deterministic largest-first ordering

Only positions with a current price and no error take part; shares are
relative to that subset alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from stockcompare.config import settings
from stockcompare.domain.models import AggregatedPosition, PositionStatus, SizeClass, TreemapCell


@dataclass(frozen=True)
class TreemapThresholds:
    """
    Grid bucketing parameters, in percent of portfolio value.

    min_visible_pct: floor applied to the display size so tiny positions stay clickable
    large_pct: above this a cell spans two columns
    tall_pct: above this a cell spans two rows
    small_pct: below this a cell is always 1x1
    """
    min_visible_pct: float = 8.0
    large_pct: float = 40.0
    tall_pct: float = 30.0
    small_pct: float = 15.0

    @classmethod
    def from_settings(cls) -> "TreemapThresholds":
        return cls(
            min_visible_pct=settings.TREEMAP_MIN_VISIBLE_PCT,
            large_pct=settings.TREEMAP_LARGE_PCT,
            tall_pct=settings.TREEMAP_TALL_PCT,
            small_pct=settings.TREEMAP_SMALL_PCT,
        )


def is_layout_eligible(entry: AggregatedPosition) -> bool:
    return (
        entry.status is not PositionStatus.ERROR
        and entry.error is None
        and entry.current_price is not None
    )


class TreemapLayoutEngine:
    """Treemap layout over aggregated positions"""

    def __init__(self, thresholds: TreemapThresholds | None = None):
        self.thresholds = thresholds or TreemapThresholds()

    def layout(self, entries: Iterable[AggregatedPosition]) -> List[TreemapCell]:
        """
        Lay out the eligible entries.

        Returns:
            Cells sorted by market value (largest first, ties by symbol); an
            empty list when nothing qualifies
        """
        valid = [e for e in entries if is_layout_eligible(e)]
        if not valid:
            return []

        total_value = sum(e.market_value for e in valid)
        if total_value <= 0:
            return []

        ordered = sorted(valid, key=lambda e: (-e.market_value, e.symbol))
        return [self._cell(e, total_value) for e in ordered]

    def _cell(self, entry: AggregatedPosition, total_value: float) -> TreemapCell:
        percentage = (entry.market_value / total_value) * 100
        size = max(percentage, self.thresholds.min_visible_pct)
        size_class, col_span, row_span = self._size_bucket(size)

        return TreemapCell(
            symbol=entry.symbol,
            market_value=entry.market_value,
            percentage_of_portfolio=percentage,
            display_size=size,
            size_class=size_class,
            col_span=col_span,
            row_span=row_span,
            is_positive=(entry.percent_change or 0) >= 0,
            percent_change=entry.percent_change,
            current_price=entry.current_price,
        )

    def _size_bucket(self, size: float) -> tuple[SizeClass, int, int]:
        t = self.thresholds
        if size < t.small_pct:
            return SizeClass.SMALL, 1, 1
        col_span = 2 if size > t.large_pct else 1
        row_span = 2 if size > t.tall_pct else 1
        if col_span == 2:
            return SizeClass.LARGE, col_span, row_span
        if row_span == 2:
            return SizeClass.TALL, col_span, row_span
        return SizeClass.REGULAR, col_span, row_span
