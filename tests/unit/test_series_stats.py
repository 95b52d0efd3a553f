from datetime import date

from conftest import make_series
from stockcompare.domain.services.series_stats import compute_series_stats


def test_stats_ignore_null_closes_and_volumes():
    series = make_series(
        "AAPL",
        {date(2024, 6, 10): 150.0, date(2024, 6, 11): None, date(2024, 6, 12): 190.0, date(2024, 6, 13): 170.0},
        current=171.0,
        volumes=[100, None, 300, 200],
    )

    stats = compute_series_stats(series)

    assert stats.high == 190.0
    assert stats.low == 150.0
    assert stats.current_price == 171.0
    assert stats.avg_volume == 200.0
    # no regularMarketVolume, so the last bar's volume
    assert stats.volume == 200


def test_stats_on_empty_series():
    series = make_series("AAPL", {}, current=None)
    stats = compute_series_stats(series)
    assert stats.high is None
    assert stats.low is None
    assert stats.avg_volume is None
    assert stats.volume is None
