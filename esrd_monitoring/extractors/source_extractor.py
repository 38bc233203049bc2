"""
Source Relation Extractor
=========================

Loads the five input relations (patients, encounters, procedures, conditions,
observations) from a data directory, checks their schema and parses
timestamp columns.
"""

import pandas as pd
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, List, Union
import logging

logger = logging.getLogger(__name__)


# Required columns per relation (lower-case)
RELATION_COLUMNS: Dict[str, List[str]] = {
    'patients': [
        'id', 'first', 'last', 'birthdate', 'deathdate',
        'race', 'city', 'state', 'county',
    ],
    'encounters': ['id', 'patient', 'start'],
    'procedures': ['patient', 'date', 'code'],
    'conditions': ['patient', 'start', 'stop', 'code'],
    'observations': ['patient', 'date', 'code', 'value'],
}

DATE_COLUMNS: Dict[str, List[str]] = {
    'patients': ['birthdate', 'deathdate'],
    'encounters': ['start'],
    'procedures': ['date'],
    'conditions': ['start', 'stop'],
    'observations': ['date'],
}

# Identifier and code columns kept as strings regardless of source dtype
STRING_COLUMNS: Dict[str, List[str]] = {
    'patients': ['id'],
    'encounters': ['id', 'patient'],
    'procedures': ['patient', 'code'],
    'conditions': ['patient', 'code'],
    'observations': ['patient', 'code', 'value'],
}

SUPPORTED_SUFFIXES = ('.parquet', '.csv')


@dataclass
class SourceTables:
    """The five input relations of one extract run."""

    patients: pd.DataFrame
    encounters: pd.DataFrame
    procedures: pd.DataFrame
    conditions: pd.DataFrame
    observations: pd.DataFrame

    def row_counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in RELATION_COLUMNS}


def find_relation_file(data_dir: Union[str, Path], name: str) -> Path:
    """
    Locate the file holding a relation.

    Args:
        data_dir: Directory with one file per relation
        name: Relation name (e.g. 'patients')

    Returns:
        Path to <name>.parquet or <name>.csv
    """
    data_dir = Path(data_dir)
    for suffix in SUPPORTED_SUFFIXES:
        candidate = data_dir / f"{name}{suffix}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(
        f"Relation '{name}' not found in {data_dir} (expected {name}.parquet or {name}.csv)"
    )


def parse_timestamps(series: pd.Series) -> pd.Series:
    """Parse a column to timezone-naive datetimes; unparseable values raise."""
    parsed = pd.to_datetime(series, errors='raise', utc=True, format='mixed')
    return parsed.dt.tz_localize(None)


def prepare_relation(df: pd.DataFrame, name: str) -> pd.DataFrame:
    """
    Normalise a raw relation: lower-case headers, check columns, parse dates.

    Args:
        df: Raw DataFrame as read from the source
        name: Relation name

    Returns:
        DataFrame restricted to the required columns
    """
    if name not in RELATION_COLUMNS:
        raise ValueError(f"Unknown relation: {name}")

    result = df.copy()
    result.columns = [str(c).strip().lower() for c in result.columns]

    required = RELATION_COLUMNS[name]
    missing = [c for c in required if c not in result.columns]
    if missing:
        raise ValueError(f"Relation '{name}' is missing required columns: {missing}")

    result = result[required].copy()

    for col in STRING_COLUMNS[name]:
        result[col] = result[col].where(result[col].isna(), result[col].astype(str).str.strip())

    for col in DATE_COLUMNS[name]:
        result[col] = parse_timestamps(result[col])

    return result.reset_index(drop=True)


def load_relation(data_dir: Union[str, Path], name: str) -> pd.DataFrame:
    """
    Load and prepare one relation from the data directory.

    Args:
        data_dir: Directory with one file per relation
        name: Relation name

    Returns:
        Prepared DataFrame
    """
    path = find_relation_file(data_dir, name)

    if path.suffix == '.parquet':
        raw = pd.read_parquet(path)
    else:
        raw = pd.read_csv(path, dtype=str, low_memory=False)

    df = prepare_relation(raw, name)
    logger.info(f"Loaded {len(df):,} {name} rows from {path}")
    return df


def load_sources(data_dir: Union[str, Path]) -> SourceTables:
    """
    Load all five relations. Any missing file or column aborts the run.

    Args:
        data_dir: Directory with one file per relation

    Returns:
        SourceTables
    """
    tables = {name: load_relation(data_dir, name) for name in RELATION_COLUMNS}
    return SourceTables(**tables)
