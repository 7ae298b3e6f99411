"""Date helpers shared across calculations and reporting layers."""

from __future__ import annotations

from datetime import date, datetime

import numpy as np
import pandas as pd

MONTH_LABEL_FORMAT = '%b %Y'


def to_timestamp(value: pd.Timestamp | datetime | date | str) -> pd.Timestamp:
    """Convert an input value to a timezone-naive pandas Timestamp."""
    ts = pd.Timestamp(value)
    if ts.tz is not None:
        ts = ts.tz_convert(None)
    return ts


def coerce_datetime(values: pd.Series) -> pd.Series:
    """Parse a column to datetime64; unparseable cells become NaT."""
    if pd.api.types.is_datetime64_any_dtype(values):
        out = pd.to_datetime(values)
    else:
        out = pd.to_datetime(values, errors='coerce', format='mixed', utc=True)
    if isinstance(out.dtype, pd.DatetimeTZDtype):
        out = out.dt.tz_convert(None)
    return out


def whole_days_between(start: pd.Series, end: pd.Series | pd.Timestamp) -> pd.Series:
    """Floor of elapsed days from start to end. NaN where either side is missing."""
    start = pd.to_datetime(start)
    delta = pd.to_datetime(end) - start if isinstance(end, pd.Series) else to_timestamp(end) - start
    return np.floor(delta / pd.Timedelta(days=1))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(np.floor(float(value) + 0.5))


def month_label(period: pd.Period) -> str:
    """Short month label such as 'Jan 2025'."""
    return period.start_time.strftime(MONTH_LABEL_FORMAT)
