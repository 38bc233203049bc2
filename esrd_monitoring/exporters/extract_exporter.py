"""
Extract Exporter
================

Writes the monthly extract (parquet or csv) and a JSON metadata sidecar.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
import pandas as pd

from ..config.esrd_config import (
    ExtractConfig,
    EXTRACT_CONFIG,
    EXTRACT_FILENAME,
    METADATA_FILENAME,
)

logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy and pandas scalar types."""
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, pd.Timestamp):
            return obj.isoformat()
        return super().default(obj)


def prepare_for_export(df: pd.DataFrame, config: ExtractConfig = EXTRACT_CONFIG) -> pd.DataFrame:
    """Apply the unbounded-end fill, if configured, to a copy of the extract."""
    result = df.copy()
    if config.unbounded_end_fill is not None:
        fill = pd.Timestamp(config.unbounded_end_fill)
        result["earliest_esrd_end"] = result["earliest_esrd_end"].fillna(fill)
    return result


def build_metadata(df: pd.DataFrame, config: ExtractConfig = EXTRACT_CONFIG) -> Dict:
    """Summary of one extract run."""
    return {
        'extract_year': config.extract_year,
        'lookback_start': config.lookback_start.date().isoformat(),
        'n_rows': len(df),
        'n_patients': df['patient_id'].nunique(),
        'lab_rows_present': {
            column: int(df[column].notna().sum())
            for column in config.lab_columns.values()
        },
        'config': config.to_dict(),
        'generated_at': datetime.now().isoformat(timespec='seconds'),
    }


def export_extract(
    df: pd.DataFrame,
    output_dir: Union[str, Path],
    config: ExtractConfig = EXTRACT_CONFIG,
    metadata: Optional[Dict] = None,
) -> Path:
    """
    Write the extract and its metadata sidecar.

    Args:
        df: Final extract rows
        output_dir: Destination directory (created if needed)
        config: Extract configuration (output format, unbounded-end fill)
        metadata: Extra metadata merged into the sidecar

    Returns:
        Path to the written extract file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    export_df = prepare_for_export(df, config)
    output_path = output_dir / f"{EXTRACT_FILENAME}.{config.output_format}"

    if config.output_format == 'parquet':
        export_df.to_parquet(output_path, index=False)
    else:
        export_df.to_csv(output_path, index=False, date_format='%Y-%m-%d')

    sidecar = build_metadata(df, config)
    sidecar.update(metadata or {})
    with open(output_dir / METADATA_FILENAME, 'w') as f:
        json.dump(sidecar, f, indent=2, cls=NumpyEncoder)

    logger.info(f"Saved {len(export_df):,} rows to {output_path}")
    return output_path
