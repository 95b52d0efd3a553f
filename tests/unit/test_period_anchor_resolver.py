import pytest
from datetime import date, datetime
from zoneinfo import ZoneInfo

from stockcompare.domain.errors import InvalidInputError
from stockcompare.domain.models import ComparisonPeriod
from stockcompare.domain.services.period_anchor_resolver import (
    parse_period,
    resolve_period_anchor,
    subtract_months,
)

NY = ZoneInfo("America/New_York")


def test_csv_has_no_anchor_or_fetch():
    anchor = resolve_period_anchor("csv", date(2024, 6, 14))
    assert anchor.period is ComparisonPeriod.CSV
    assert anchor.anchor_date is None
    assert anchor.required_range is None
    assert anchor.required_interval is None
    assert anchor.uses_cost_basis


@pytest.mark.parametrize(
    "period,expected_anchor,expected_range",
    [
        ("1d", date(2024, 6, 13), "5d"),
        ("1w", date(2024, 6, 7), "1mo"),
        ("1mo", date(2024, 5, 14), "3mo"),
        ("3mo", date(2024, 3, 14), "1y"),
        ("ytd", date(2024, 1, 1), "1y"),
        ("1y", date(2023, 6, 14), "2y"),
    ],
)
def test_anchor_and_fetch_window(period, expected_anchor, expected_range):
    anchor = resolve_period_anchor(period, datetime(2024, 6, 14, 12, 0, tzinfo=NY))
    assert anchor.anchor_date == expected_anchor
    assert anchor.required_range == expected_range
    assert anchor.required_interval == "1d"


@pytest.mark.parametrize(
    "today",
    [date(2023, 1, 1), date(2024, 2, 29), date(2024, 7, 4), date(2025, 12, 31)],
)
def test_ytd_is_always_january_first(today):
    assert resolve_period_anchor("ytd", today).anchor_date == date(today.year, 1, 1)


def test_month_subtraction_clamps_to_month_end():
    assert subtract_months(date(2024, 3, 31), 1) == date(2024, 2, 29)
    assert subtract_months(date(2023, 3, 31), 1) == date(2023, 2, 28)
    assert subtract_months(date(2024, 5, 31), 3) == date(2024, 2, 29)
    assert subtract_months(date(2024, 1, 15), 1) == date(2023, 12, 15)


def test_one_year_from_leap_day():
    assert resolve_period_anchor("1y", date(2024, 2, 29)).anchor_date == date(2023, 2, 28)


def test_parse_period_is_case_insensitive():
    assert parse_period(" 1MO ") is ComparisonPeriod.ONE_MONTH
    assert parse_period(ComparisonPeriod.YEAR_TO_DATE) is ComparisonPeriod.YEAR_TO_DATE


def test_unknown_period_falls_back_to_one_month(caplog):
    assert parse_period("5y") is ComparisonPeriod.ONE_MONTH
    assert "Unknown comparison period" in caplog.text


@pytest.mark.parametrize("code", ["", "   ", None])
def test_blank_period_is_invalid(code):
    with pytest.raises(InvalidInputError):
        resolve_period_anchor(code, date(2024, 6, 14))
