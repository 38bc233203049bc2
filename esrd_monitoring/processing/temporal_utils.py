"""Day-resolution date helpers shared by the extract stages."""
from datetime import datetime
from typing import Union
import pandas as pd


def to_day(values: pd.Series) -> pd.Series:
    """Truncate timestamps to midnight; missing values stay NaT.

    Args:
        values: Series of timestamps (or parseable values)

    Returns:
        datetime64 Series at day resolution
    """
    return pd.to_datetime(values).dt.normalize().astype("datetime64[ns]")


def to_month_start(values: pd.Series) -> pd.Series:
    """Truncate timestamps to the first day of their month."""
    days = to_day(values)
    return days - pd.to_timedelta(days.dt.day - 1, unit="D")


def overlaps_interval(
    start: pd.Series,
    stop: pd.Series,
    window_start: Union[datetime, pd.Timestamp],
    window_end: Union[datetime, pd.Timestamp],
) -> pd.Series:
    """Test whether [start, stop] intersects [window_start, window_end].

    A missing stop is an open interval.

    Args:
        start: Interval starts
        stop: Interval stops (NaT = still open)
        window_start: First day of the window
        window_end: Last day of the window

    Returns:
        Boolean Series
    """
    window_start = pd.Timestamp(window_start)
    window_end = pd.Timestamp(window_end)
    return (start <= window_end) & (stop.isna() | (stop >= window_start))


def whole_years_between(
    birthdate: pd.Series,
    as_of: Union[datetime, pd.Timestamp],
) -> pd.Series:
    """Whole years elapsed from each birth date to as_of.

    Args:
        birthdate: Birth dates
        as_of: Reference date

    Returns:
        Nullable integer Series (Int64)
    """
    as_of = pd.Timestamp(as_of)
    birthdate = pd.to_datetime(birthdate)
    before_birthday = (
        (birthdate.dt.month > as_of.month) |
        ((birthdate.dt.month == as_of.month) & (birthdate.dt.day > as_of.day))
    )
    years = as_of.year - birthdate.dt.year - before_birthday.astype(int)
    return years.astype("Int64")
