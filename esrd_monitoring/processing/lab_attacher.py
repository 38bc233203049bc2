"""Lab attacher: first value of each monitored lab per patient-month.

Observations are ranked within (patient, code, month) by ascending timestamp,
with source row order breaking ties between identical timestamps. The rank-1
value of each code is left-joined onto the period grid independently.
"""
from typing import List
import logging
import numpy as np
import pandas as pd

from ..config.esrd_config import ExtractConfig, EXTRACT_CONFIG
from .period_grid import GRID_COLUMNS
from .temporal_utils import to_day, to_month_start

logger = logging.getLogger(__name__)

RANKED_COLUMNS = ["patient", "code", "month", "date", "value", "lab_rank"]


def output_columns(config: ExtractConfig = EXTRACT_CONFIG) -> List[str]:
    """Final extract column order."""
    return GRID_COLUMNS + list(config.lab_columns.values())


def rank_lab_observations(
    observations: pd.DataFrame,
    config: ExtractConfig = EXTRACT_CONFIG,
) -> pd.DataFrame:
    """Rank extract-year observations of the monitored codes.

    Args:
        observations: Observations with 'patient', 'date', 'code', 'value'
        config: Extract configuration

    Returns:
        DataFrame with RANKED_COLUMNS; lab_rank 1 is the earliest observation
        of its (patient, code, month) group
    """
    obs = observations.reset_index(drop=True).copy()
    obs["source_order"] = np.arange(len(obs))
    obs["date"] = pd.to_datetime(obs["date"])

    obs_day = to_day(obs["date"])
    obs = obs[
        obs["code"].isin(list(config.lab_codes.values())) &
        (obs_day >= config.year_start) &
        (obs_day <= config.year_end)
    ].copy()
    obs["month"] = to_month_start(obs["date"])

    obs = obs.sort_values(["patient", "code", "month", "date", "source_order"], kind="mergesort")
    obs["lab_rank"] = obs.groupby(["patient", "code", "month"]).cumcount() + 1

    return obs[RANKED_COLUMNS].reset_index(drop=True)


def parse_lab_values(values: pd.DataFrame) -> pd.Series:
    """Parse raw lab values as floats.

    Missing values stay NaN. Any present value that does not parse, including
    an empty or whitespace-only string, raises ValueError.
    """
    raw = values["value"]
    parsed = pd.to_numeric(raw, errors="coerce")
    malformed = parsed.isna() & raw.notna()
    if malformed.any():
        bad = values[malformed].iloc[0]
        raise ValueError(
            f"Non-numeric lab value {bad['value']!r} for patient {bad['patient']}, "
            f"code {bad['code']}, month {bad['month']:%Y-%m}"
        )
    return parsed.astype(float)


def representative_lab_values(ranked: pd.DataFrame) -> pd.DataFrame:
    """Keep the rank-1 observation of each group with its value parsed.

    Args:
        ranked: Output of rank_lab_observations

    Returns:
        DataFrame with 'patient', 'code', 'month', 'lab_value'
    """
    first = ranked[ranked["lab_rank"] == 1].copy()
    first["lab_value"] = parse_lab_values(first)
    return first[["patient", "code", "month", "lab_value"]].reset_index(drop=True)


def attach_lab_values(
    grid: pd.DataFrame,
    observations: pd.DataFrame,
    config: ExtractConfig = EXTRACT_CONFIG,
) -> pd.DataFrame:
    """Left-join the representative value of each monitored lab onto the grid.

    Args:
        grid: Output of expand_period_grid
        observations: Observations relation
        config: Extract configuration

    Returns:
        DataFrame with output_columns(config)
    """
    representatives = representative_lab_values(rank_lab_observations(observations, config))

    result = grid.copy()
    for code, column in config.lab_columns.items():
        values = representatives.loc[
            representatives["code"] == code, ["patient", "month", "lab_value"]
        ].rename(columns={"patient": "patient_id", "lab_value": column})
        result = result.merge(values, on=["patient_id", "month"], how="left")
        logger.info(f"Lab attacher: {column} present on {result[column].notna().sum():,} rows")

    n_before = len(result)
    result = result.drop_duplicates().reset_index(drop=True)
    if len(result) < n_before:
        logger.warning(f"Lab attacher: dropped {n_before - len(result):,} duplicate rows")

    return result[output_columns(config)]
