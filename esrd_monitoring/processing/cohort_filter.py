"""Cohort filter: patients with an encounter in the lookback window."""
from typing import Set
import logging
import pandas as pd

from .temporal_utils import to_day

logger = logging.getLogger(__name__)


def filter_recent_patients(
    encounters: pd.DataFrame,
    window_start: pd.Timestamp,
    window_end: pd.Timestamp,
) -> Set:
    """Select patients with at least one encounter starting inside the window.

    Args:
        encounters: Encounters with 'patient' and 'start' columns
        window_start: First day of the window (inclusive)
        window_end: Last day of the window (inclusive)

    Returns:
        Set of patient ids, in the dtype of the encounters column
    """
    start_day = to_day(encounters["start"])
    mask = (
        (start_day >= pd.Timestamp(window_start).normalize()) &
        (start_day <= pd.Timestamp(window_end).normalize())
    )
    patient_ids = set(encounters.loc[mask, "patient"].dropna())

    logger.info(
        f"Cohort filter: {len(patient_ids):,} patients with encounters "
        f"{pd.Timestamp(window_start).date()} to {pd.Timestamp(window_end).date()}"
    )
    return patient_ids
