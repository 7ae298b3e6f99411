import pandas as pd

from src.utils.date_utils import coerce_datetime, month_label, round_half_up, whole_days_between


def test_whole_days_floor_partial_days() -> None:
    start = pd.Series(pd.to_datetime(['2025-03-01 18:00', '2025-03-10', None]))
    days = whole_days_between(start, pd.Timestamp('2025-03-11 06:00'))
    assert days.iloc[0] == 9
    assert days.iloc[1] == 1
    assert pd.isna(days.iloc[2])


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-0.5) == 0
    assert round_half_up(7.49) == 7


def test_coerce_datetime_drops_timezone_and_bad_values() -> None:
    out = coerce_datetime(pd.Series(['2025-01-02T10:00:00Z', 'not a date']))
    assert out.iloc[0] == pd.Timestamp('2025-01-02 10:00:00')
    assert pd.isna(out.iloc[1])
    assert out.dt.tz is None


def test_month_label() -> None:
    assert month_label(pd.Period('2025-01', freq='M')) == 'Jan 2025'
