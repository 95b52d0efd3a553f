from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SizeClass(str, Enum):
    """Coarse grid bucket for a treemap cell"""
    LARGE = "large"
    TALL = "tall"
    REGULAR = "regular"
    SMALL = "small"


@dataclass(frozen=True)
class TreemapCell:
    symbol: str
    market_value: float
    percentage_of_portfolio: float
    display_size: float
    size_class: SizeClass
    col_span: int
    row_span: int
    is_positive: bool
    percent_change: Optional[float] = None
    current_price: Optional[float] = None
