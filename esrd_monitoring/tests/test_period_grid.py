"""Tests for patient-month grid expansion."""
import pytest
import pandas as pd
from esrd_monitoring.processing.condition_resolver import RESOLVED_COLUMNS
from esrd_monitoring.processing.period_grid import (
    GRID_COLUMNS,
    build_month_anchors,
    expand_period_grid,
)

ANCHORS = build_month_anchors(2022)


def make_resolved(rows):
    """Rows of (patient_id, esrd_begin, earliest_esrd_end)."""
    records = []
    for patient_id, begin, end in rows:
        records.append({
            "patient_id": patient_id,
            "name": f"Patient {patient_id}",
            "esrd_begin": pd.Timestamp(begin),
            "earliest_esrd_end": pd.Timestamp(end) if end else pd.NaT,
            "esrd_end": pd.NaT,
            "kidney_transplant_date": pd.NaT,
            "deathdate": pd.Timestamp(end) if end else pd.NaT,
            "race": "white",
            "birthdate": pd.Timestamp("1960-01-01"),
            "age": 62,
            "city": "Boston",
            "state": "Massachusetts",
            "county": "Suffolk County",
        })
    return pd.DataFrame(records, columns=RESOLVED_COLUMNS)


class TestMonthAnchors:
    """Tests for month anchor generation."""

    def test_twelve_months(self):
        """One anchor per month."""
        assert len(ANCHORS) == 12

    def test_first_of_month(self):
        """Anchors are first days from January to December."""
        assert ANCHORS[0] == pd.Timestamp("2022-01-01")
        assert ANCHORS[5] == pd.Timestamp("2022-06-01")
        assert ANCHORS[-1] == pd.Timestamp("2022-12-01")

    def test_matches_config_anchors(self):
        """Same anchors as the extract configuration for that year."""
        from esrd_monitoring.config.esrd_config import ExtractConfig
        assert build_month_anchors(2021).equals(ExtractConfig(extract_year=2021).month_anchors)


class TestExpandPeriodGrid:
    """Tests for grid expansion."""

    def test_open_interval_from_march(self):
        """Start 2022-03-01 with no end gives March through December."""
        grid = expand_period_grid(make_resolved([("P", "2022-03-01", None)]), ANCHORS)
        assert len(grid) == 10
        assert grid["month"].iloc[0] == pd.Timestamp("2022-03-01")
        assert grid["month"].iloc[-1] == pd.Timestamp("2022-12-01")

    def test_death_caps_months(self):
        """End 2022-06-15 keeps January through June."""
        grid = expand_period_grid(make_resolved([("Q", "2022-01-01", "2022-06-15")]), ANCHORS)
        assert grid["month"].tolist() == list(ANCHORS[:6])

    def test_mid_month_start_skips_anchor(self):
        """Start after the first of the month excludes that month."""
        grid = expand_period_grid(make_resolved([("P", "2022-03-15", None)]), ANCHORS)
        assert grid["month"].iloc[0] == pd.Timestamp("2022-04-01")
        assert len(grid) == 9

    def test_end_on_anchor_inclusive(self):
        """End exactly on a month anchor includes that month."""
        grid = expand_period_grid(make_resolved([("P", "2021-05-01", "2022-02-01")]), ANCHORS)
        assert grid["month"].tolist() == list(ANCHORS[:2])

    def test_start_before_year(self):
        """Start before the year gives all twelve months."""
        grid = expand_period_grid(make_resolved([("R", "2020-05-01", None)]), ANCHORS)
        assert len(grid) == 12

    def test_inverted_interval_no_rows(self):
        """End before start produces no rows."""
        grid = expand_period_grid(make_resolved([("E", "2022-04-01", "2022-01-05")]), ANCHORS)
        assert grid.empty

    def test_all_months_within_interval(self):
        """Every row satisfies esrd_begin <= month <= earliest_esrd_end."""
        grid = expand_period_grid(make_resolved([
            ("A", "2022-02-10", "2022-09-30"),
            ("B", "2019-01-01", None),
            ("C", "2022-11-01", "2022-11-20"),
        ]), ANCHORS)
        end = grid["earliest_esrd_end"]
        assert (grid["month"] >= grid["esrd_begin"]).all()
        assert (end.isna() | (grid["month"] <= end)).all()

    def test_attributes_preserved(self):
        """Resolver attributes are carried to every row."""
        grid = expand_period_grid(make_resolved([("P", "2022-11-01", None)]), ANCHORS)
        assert list(grid.columns) == GRID_COLUMNS
        assert (grid["name"] == "Patient P").all()
        assert (grid["age"] == 62).all()

    def test_sorted_by_patient_and_month(self):
        """Rows are ordered by patient then month."""
        grid = expand_period_grid(make_resolved([
            ("B", "2022-11-01", None),
            ("A", "2022-10-01", None),
        ]), ANCHORS)
        assert grid["patient_id"].tolist() == ["A", "A", "A", "B", "B"]
        assert grid[grid["patient_id"] == "A"]["month"].is_monotonic_increasing

    def test_empty_resolved(self):
        """No entries gives an empty grid with the schema."""
        grid = expand_period_grid(make_resolved([]), ANCHORS)
        assert grid.empty
        assert list(grid.columns) == GRID_COLUMNS
