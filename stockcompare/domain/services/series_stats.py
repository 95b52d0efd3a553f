"""
Range statistics over a daily series (52-week high/low, volume).
"""

from dataclasses import dataclass
from typing import Optional

from stockcompare.domain.models import DailySeries


@dataclass(frozen=True)
class SeriesStats:
    symbol: str
    current_price: Optional[float]
    high: Optional[float]
    low: Optional[float]
    volume: Optional[float]
    avg_volume: Optional[float]


def compute_series_stats(series: DailySeries) -> SeriesStats:
    """High/low over non-null closes; average over non-null volumes."""
    closes = [c for c in series.closes if c is not None]
    volumes = [v for v in series.volumes if v is not None]

    last_volume = series.last_volume
    if last_volume is None and series.volumes:
        last_volume = series.volumes[-1]

    return SeriesStats(
        symbol=series.symbol,
        current_price=series.current_price_hint,
        high=max(closes) if closes else None,
        low=min(closes) if closes else None,
        volume=last_volume,
        avg_volume=sum(volumes) / len(volumes) if volumes else None,
    )
