"""Period grid expander: one row per patient and active calendar month."""
from typing import Sequence, Union
import logging
import pandas as pd

from ..config.esrd_config import ExtractConfig
from .condition_resolver import RESOLVED_COLUMNS

logger = logging.getLogger(__name__)

GRID_COLUMNS = ["month"] + RESOLVED_COLUMNS


def build_month_anchors(year: int) -> pd.DatetimeIndex:
    """First day of each of the twelve months of a year."""
    return ExtractConfig(extract_year=year).month_anchors


def expand_period_grid(
    resolved: pd.DataFrame,
    month_anchors: Union[pd.DatetimeIndex, Sequence[pd.Timestamp]],
) -> pd.DataFrame:
    """Cross resolved entries with month anchors inside the active interval.

    Keeps month anchors with esrd_begin <= month <= earliest_esrd_end; an
    unbounded (NaT) earliest_esrd_end accepts every month. Entries with no
    qualifying month produce no rows.

    Args:
        resolved: Output of resolve_esrd_cohort
        month_anchors: First-of-month timestamps

    Returns:
        DataFrame with GRID_COLUMNS sorted by patient_id, month
    """
    months = pd.DataFrame({"month": pd.to_datetime(pd.Index(month_anchors))})

    grid = resolved.merge(months, how="cross")
    begin = pd.to_datetime(grid["esrd_begin"])
    end = pd.to_datetime(grid["earliest_esrd_end"])
    in_interval = (grid["month"] >= begin) & (end.isna() | (grid["month"] <= end))
    grid = grid.loc[in_interval, GRID_COLUMNS]

    grid = grid.sort_values(["patient_id", "month", "esrd_begin"], kind="mergesort").reset_index(drop=True)
    logger.info(f"Period grid: {len(grid):,} patient-months for {grid['patient_id'].nunique():,} patients")
    return grid
