"""Tests for day-resolution date helpers."""
import pytest
import pandas as pd
from esrd_monitoring.processing.temporal_utils import (
    to_day,
    to_month_start,
    overlaps_interval,
    whole_years_between,
)

YEAR_START = pd.Timestamp("2022-01-01")
YEAR_END = pd.Timestamp("2022-12-31")


def four_case_overlap(start, stop, year_start, year_end):
    """Unrolled overlap rule: start in year, stop in year, or open/late stop."""
    start_in_year = year_start <= start <= year_end
    stop_in_year = pd.notna(stop) and year_start <= stop <= year_end
    open_from_before = start < year_start and pd.isna(stop)
    stops_after_start = start < year_start and pd.notna(stop) and stop >= year_start
    return start_in_year or stop_in_year or open_from_before or stops_after_start


class TestToDay:
    """Tests for truncation to calendar days."""

    def test_drops_time_of_day(self):
        """Time component is removed."""
        result = to_day(pd.Series(["2022-03-05 14:30:00"]))
        assert result.iloc[0] == pd.Timestamp("2022-03-05")

    def test_missing_stays_missing(self):
        """Missing values become NaT."""
        result = to_day(pd.Series([None, "2022-01-01"]))
        assert pd.isna(result.iloc[0])


class TestToMonthStart:
    """Tests for truncation to first of month."""

    def test_mid_month(self):
        """Mid-month timestamp maps to the first."""
        result = to_month_start(pd.Series(["2022-03-20 09:00:00"]))
        assert result.iloc[0] == pd.Timestamp("2022-03-01")

    def test_last_day_of_month(self):
        """Last day of month stays in the same month."""
        result = to_month_start(pd.Series(["2022-02-28"]))
        assert result.iloc[0] == pd.Timestamp("2022-02-01")


class TestOverlapsInterval:
    """Tests for interval intersection with the extract year."""

    CASES = [
        ("2021-05-01", None),
        ("2022-03-01", None),
        ("2023-01-01", None),
        ("2020-01-01", "2021-06-01"),
        ("2020-01-01", "2022-01-01"),
        ("2020-01-01", "2023-06-01"),
        ("2022-02-01", "2022-05-01"),
        ("2022-12-31", "2023-02-01"),
        ("2021-12-31", "2021-12-31"),
        ("2023-01-01", "2023-05-01"),
        ("2022-01-01", "2022-01-01"),
    ]

    def test_matches_unrolled_rule(self):
        """Intersection test agrees with the four-case rule on valid intervals."""
        start = pd.to_datetime(pd.Series([c[0] for c in self.CASES]))
        stop = pd.to_datetime(pd.Series([c[1] for c in self.CASES]))
        result = overlaps_interval(start, stop, YEAR_START, YEAR_END)

        expected = [
            four_case_overlap(s, e, YEAR_START, YEAR_END)
            for s, e in zip(start, stop)
        ]
        assert result.tolist() == expected

    def test_open_interval_from_before(self):
        """Open interval started before the year overlaps."""
        start = pd.Series([pd.Timestamp("2019-01-01")])
        stop = pd.Series([pd.NaT])
        assert overlaps_interval(start, stop, YEAR_START, YEAR_END).iloc[0]

    def test_resolved_before_year(self):
        """Interval stopped before the year does not overlap."""
        start = pd.Series([pd.Timestamp("2019-01-01")])
        stop = pd.Series([pd.Timestamp("2021-12-31")])
        assert not overlaps_interval(start, stop, YEAR_START, YEAR_END).iloc[0]


class TestWholeYearsBetween:
    """Tests for age calculation."""

    def test_birthday_already_passed(self):
        """Birthday earlier in the year counts."""
        ages = whole_years_between(pd.Series([pd.Timestamp("1955-04-12")]), YEAR_END)
        assert ages.iloc[0] == 67

    def test_birthday_on_reference_day(self):
        """Birthday on the reference day counts."""
        ages = whole_years_between(pd.Series([pd.Timestamp("1950-12-31")]), YEAR_END)
        assert ages.iloc[0] == 72

    def test_birthday_not_yet_reached(self):
        """Birthday after the reference date does not count."""
        ages = whole_years_between(pd.Series([pd.Timestamp("1950-08-01")]), pd.Timestamp("2022-06-30"))
        assert ages.iloc[0] == 71

    def test_missing_birthdate(self):
        """Missing birth date gives missing age."""
        ages = whole_years_between(pd.Series([pd.NaT, pd.Timestamp("2000-01-01")]), YEAR_END)
        assert pd.isna(ages.iloc[0])
        assert ages.iloc[1] == 22
