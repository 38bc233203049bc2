"""Condition resolver: ESRD-active interval per qualifying condition.

Each qualifying ESRD condition becomes one resolved cohort entry carrying the
diagnosis start, the condition stop, the earliest kidney transplant, the
death date and the earliest of those terminating events. An unbounded
earliest_esrd_end is represented as NaT.
"""
from typing import Iterable
import logging
import pandas as pd

from ..config.esrd_config import ExtractConfig, EXTRACT_CONFIG
from .temporal_utils import to_day, overlaps_interval, whole_years_between

logger = logging.getLogger(__name__)

# Resolved cohort entry schema
RESOLVED_COLUMNS = [
    "patient_id",
    "name",
    "esrd_begin",
    "earliest_esrd_end",
    "esrd_end",
    "kidney_transplant_date",
    "deathdate",
    "race",
    "birthdate",
    "age",
    "city",
    "state",
    "county",
]


def earliest_transplants(procedures: pd.DataFrame, transplant_code: str) -> pd.DataFrame:
    """Earliest kidney transplant date per patient.

    Args:
        procedures: Procedures with 'patient', 'date', 'code'
        transplant_code: Procedure code identifying a kidney transplant

    Returns:
        DataFrame with 'patient' and 'kidney_transplant_date'
    """
    transplants = procedures.loc[procedures["code"] == transplant_code, ["patient", "date"]].copy()
    transplants["kidney_transplant_date"] = to_day(transplants["date"])
    return (
        transplants.dropna(subset=["kidney_transplant_date"])
        .groupby("patient", as_index=False)["kidney_transplant_date"]
        .min()
    )


def earliest_end(*candidates: pd.Series) -> pd.Series:
    """Row-wise minimum of the present candidate end dates.

    Missing candidates do not limit the result; NaT when none is present.
    """
    return pd.to_datetime(pd.concat(candidates, axis=1).min(axis=1, skipna=True))


def resolve_esrd_cohort(
    conditions: pd.DataFrame,
    patients: pd.DataFrame,
    cohort_ids: Iterable,
    procedures: pd.DataFrame,
    config: ExtractConfig = EXTRACT_CONFIG,
) -> pd.DataFrame:
    """Build resolved cohort entries for the extract year.

    Args:
        conditions: Conditions with 'patient', 'start', 'stop', 'code'
        patients: Patients with demographics and 'deathdate'
        cohort_ids: Patient ids passing the cohort filter
        procedures: Procedures used for transplant detection
        config: Extract configuration

    Returns:
        DataFrame with RESOLVED_COLUMNS, one row per qualifying condition
    """
    cohort_ids = set(cohort_ids)

    esrd = conditions[
        (conditions["code"] == config.esrd_code) &
        (conditions["patient"].isin(list(cohort_ids)))
    ].copy()
    esrd["esrd_begin"] = to_day(esrd["start"])
    esrd["esrd_end"] = to_day(esrd["stop"])

    # A condition starting in the year qualifies even when its stop precedes
    # its start; such entries yield no grid months.
    starts_in_year = (esrd["esrd_begin"] >= config.year_start) & (esrd["esrd_begin"] <= config.year_end)
    esrd = esrd[
        starts_in_year |
        overlaps_interval(esrd["esrd_begin"], esrd["esrd_end"], config.year_start, config.year_end)
    ]
    logger.info(f"Condition resolver: {len(esrd):,} ESRD conditions overlap {config.extract_year}")

    demographics = patients.rename(columns={"id": "patient_id"}).copy()
    demographics["deathdate"] = to_day(demographics["deathdate"])
    demographics["birthdate"] = to_day(demographics["birthdate"])

    result = esrd[["patient", "esrd_begin", "esrd_end"]].merge(
        demographics, left_on="patient", right_on="patient_id", how="inner"
    )
    result = result.merge(
        earliest_transplants(procedures, config.transplant_code), on="patient", how="left"
    )
    result["kidney_transplant_date"] = pd.to_datetime(result["kidney_transplant_date"])

    alive = result["deathdate"].isna() | (result["deathdate"] >= config.year_start)
    not_transplanted = (
        result["kidney_transplant_date"].isna() |
        (result["kidney_transplant_date"] >= config.year_start)
    )
    result = result[alive & not_transplanted].copy()

    result["earliest_esrd_end"] = earliest_end(
        result["esrd_end"], result["deathdate"], result["kidney_transplant_date"]
    )
    result["age"] = whole_years_between(result["birthdate"], config.year_end)
    result["name"] = result["first"].fillna("").str.cat(result["last"].fillna(""), sep=" ").str.strip()

    result = result[RESOLVED_COLUMNS].sort_values(
        ["patient_id", "esrd_begin"], kind="mergesort"
    ).reset_index(drop=True)

    logger.info(
        f"Condition resolver: {len(result):,} entries for "
        f"{result['patient_id'].nunique():,} patients"
    )
    return result
