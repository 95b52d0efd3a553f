"""
PERIOD ANCHOR RESOLVER
Translate a comparison period code into a calendar anchor date and the
history window that has to be fetched to contain it.

The fetch window always exceeds the anchor distance so the anchor lies inside
the returned series rather than at its edge; upstream series can start late or
skip recent days.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union

from stockcompare.domain.errors import InvalidInputError
from stockcompare.domain.models import ComparisonPeriod, PeriodAnchor

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = ComparisonPeriod.ONE_MONTH
DAILY_INTERVAL = "1d"

# period -> upstream range to fetch
FETCH_RANGES: Dict[ComparisonPeriod, str] = {
    ComparisonPeriod.ONE_DAY: "5d",
    ComparisonPeriod.ONE_WEEK: "1mo",
    ComparisonPeriod.ONE_MONTH: "3mo",
    ComparisonPeriod.THREE_MONTHS: "1y",
    ComparisonPeriod.YEAR_TO_DATE: "1y",
    ComparisonPeriod.ONE_YEAR: "2y",
}


def parse_period(code: Union[str, ComparisonPeriod, None]) -> ComparisonPeriod:
    """
    Parse a period code.

    Blank codes are invalid input; unrecognised codes fall back to one month.
    """
    if isinstance(code, ComparisonPeriod):
        return code
    cleaned = (code or "").strip().lower()
    if not cleaned:
        raise InvalidInputError("Period is required")
    try:
        return ComparisonPeriod(cleaned)
    except ValueError:
        logger.warning("Unknown comparison period %r, using %s", code, DEFAULT_PERIOD.value)
        return DEFAULT_PERIOD


def subtract_months(day: date, months: int) -> date:
    """Calendar month subtraction, clamping the day to the target month's end."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def resolve_period_anchor(
    period: Union[str, ComparisonPeriod, None],
    now: Union[datetime, date],
) -> PeriodAnchor:
    """
    Resolve ``period`` relative to ``now``.

    Args:
        period: Period code or enum member
        now: Reference instant (aware datetime in the reference timezone, or a date)

    Returns:
        PeriodAnchor; for ``csv`` the anchor and range are None
    """
    resolved = parse_period(period)
    today = now.date() if isinstance(now, datetime) else now

    if resolved is ComparisonPeriod.CSV:
        return PeriodAnchor(resolved, None, None, None)

    anchor = _anchor_date(resolved, today)
    return PeriodAnchor(
        period=resolved,
        anchor_date=anchor,
        required_range=FETCH_RANGES[resolved],
        required_interval=DAILY_INTERVAL,
    )


def _anchor_date(period: ComparisonPeriod, today: date) -> Optional[date]:
    if period is ComparisonPeriod.ONE_DAY:
        return today - timedelta(days=1)
    if period is ComparisonPeriod.ONE_WEEK:
        return today - timedelta(days=7)
    if period is ComparisonPeriod.ONE_MONTH:
        return subtract_months(today, 1)
    if period is ComparisonPeriod.THREE_MONTHS:
        return subtract_months(today, 3)
    if period is ComparisonPeriod.ONE_YEAR:
        return subtract_months(today, 12)
    if period is ComparisonPeriod.YEAR_TO_DATE:
        return date(today.year, 1, 1)
    raise InvalidInputError(f"No anchor for period {period.value}")
