"""
Domain Models Package
Export all domain entities
"""

from .market import (
    ComparisonPeriod,
    ComparisonResult,
    DailySeries,
    PeriodAnchor,
    PricePoint,
    PriceSnapshot,
    SearchResult,
)
from .position import (
    AggregatedPosition,
    AggregationSnapshot,
    Position,
    PositionStatus,
    normalize_symbol,
)
from .treemap import SizeClass, TreemapCell

__all__ = [
    # Enums
    "ComparisonPeriod",
    "PositionStatus",
    "SizeClass",

    # Market data
    "ComparisonResult",
    "DailySeries",
    "PeriodAnchor",
    "PricePoint",
    "PriceSnapshot",
    "SearchResult",

    # Portfolio
    "AggregatedPosition",
    "AggregationSnapshot",
    "Position",
    "TreemapCell",
    "normalize_symbol",
]
