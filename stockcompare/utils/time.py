"""Time utilities (reference timezone)."""

from datetime import date, datetime, time, tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from stockcompare.config import settings


@lru_cache(maxsize=8)
def get_reference_tz(name: Optional[str] = None) -> tzinfo:
    """Timezone every day-granularity comparison is made in."""
    return ZoneInfo(name or settings.REFERENCE_TIMEZONE)


def now_reference(tz: Optional[tzinfo] = None) -> datetime:
    """Current time as an aware datetime in the reference timezone."""
    return datetime.now(tz or get_reference_tz())


def epoch_to_date(ts: int, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of an epoch-seconds timestamp in the reference timezone."""
    return datetime.fromtimestamp(ts, tz or get_reference_tz()).date()


def start_of_day_epoch(day: date, tz: Optional[tzinfo] = None) -> int:
    """Epoch seconds of midnight on ``day`` in the reference timezone."""
    return int(datetime.combine(day, time.min, tzinfo=tz or get_reference_tz()).timestamp())
