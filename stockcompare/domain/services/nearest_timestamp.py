"""
Nearest-timestamp search over unevenly sampled daily series.

Daily series skip weekends and holidays, so no uniform spacing is assumed: the
search is a plain linear scan.
"""

from datetime import date, tzinfo
from typing import Optional, Sequence

from stockcompare.utils.time import start_of_day_epoch


def anchor_epoch_seconds(anchor_date: date, tz: Optional[tzinfo] = None) -> int:
    """Midnight of the anchor date in the reference timezone."""
    return start_of_day_epoch(anchor_date, tz)


def locate_nearest(timestamps: Sequence[int], anchor: int) -> Optional[int]:
    """
    Index of the timestamp closest to ``anchor``.

    Ties go to the lowest index. Returns None for an empty sequence; an anchor
    outside the series resolves to the nearest edge.
    """
    if not timestamps:
        return None

    closest_index = 0
    min_diff = abs(timestamps[0] - anchor)
    for i in range(1, len(timestamps)):
        diff = abs(timestamps[i] - anchor)
        if diff < min_diff:
            min_diff = diff
            closest_index = i
    return closest_index
