"""
ESRD Monthly Monitoring Pipeline
================================

Cohort filter -> condition resolver -> period grid -> lab attacher.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .config.esrd_config import (
    DATA_DIR,
    GOLD_DIR,
    ExtractConfig,
    EXTRACT_CONFIG,
    ensure_directories,
    load_extract_config,
)
from .extractors.source_extractor import SourceTables, load_sources
from .processing.cohort_filter import filter_recent_patients
from .processing.condition_resolver import resolve_esrd_cohort
from .processing.period_grid import build_month_anchors, expand_period_grid
from .processing.lab_attacher import attach_lab_values
from .exporters.extract_exporter import export_extract
from .validation.extract_validators import validate_extract

logger = logging.getLogger(__name__)


class EsrdMonthlyPipeline:
    """Builds the ESRD monthly monitoring extract."""

    def __init__(self, config: Optional[ExtractConfig] = None):
        """
        Initialize pipeline.

        Args:
            config: Extract configuration (default: EXTRACT_CONFIG)
        """
        self.config = config or EXTRACT_CONFIG

    def process_data(self, tables: SourceTables) -> pd.DataFrame:
        """
        Run the four stages over pre-loaded relations.

        Args:
            tables: The five input relations

        Returns:
            DataFrame with one row per qualifying patient-month
        """
        config = self.config

        cohort_ids = filter_recent_patients(tables.encounters, config.lookback_start, config.year_end)
        resolved = resolve_esrd_cohort(
            tables.conditions, tables.patients, cohort_ids, tables.procedures, config
        )
        grid = expand_period_grid(resolved, build_month_anchors(config.extract_year))
        return attach_lab_values(grid, tables.observations, config)

    def run(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        output_dir: Optional[Union[str, Path]] = None,
        strict: bool = False,
    ) -> pd.DataFrame:
        """
        Load, process, validate and export.

        Args:
            data_dir: Directory with the input relations (default: DATA_DIR)
            output_dir: Output directory (default: GOLD_DIR)
            strict: Raise ValueError when validation fails

        Returns:
            The extract DataFrame
        """
        data_dir = Path(data_dir) if data_dir else DATA_DIR
        if output_dir:
            output_dir = Path(output_dir)
        else:
            ensure_directories()
            output_dir = GOLD_DIR

        print("=" * 60)
        print(f"ESRD Monthly Monitoring Extract ({self.config.extract_year})")
        print("=" * 60)

        print(f"\n1. Loading relations from {data_dir}...")
        tables = load_sources(data_dir)
        for name, count in tables.row_counts().items():
            print(f"   {name}: {count:,} rows")

        print("\n2. Building extract...")
        extract_df = self.process_data(tables)

        print("\n3. Validating...")
        validation = validate_extract(extract_df, self.config)
        logger.info(validation.report())
        print(f"   {validation.summary()}")
        if strict and not validation.ok:
            raise ValueError(f"Extract validation failed: {validation.summary()}")

        print(f"\n4. Saving to {output_dir}...")
        output_path = export_extract(
            extract_df, output_dir, self.config,
            metadata={'validation': validation.summary()},
        )

        # Summary
        print("\n" + "=" * 60)
        print("Extract Summary")
        print("=" * 60)
        print(f"   Patients: {extract_df['patient_id'].nunique():,}")
        print(f"   Patient-months: {len(extract_df):,}")
        for column in self.config.lab_columns.values():
            coverage = extract_df[column].notna().mean() if len(extract_df) else 0.0
            print(f"   {column} coverage: {coverage:.1%}")
        print(f"\n   Output: {output_path}")
        print("=" * 60)

        return extract_df


# =============================================================================
# CLI
# =============================================================================

def main(argv=None):
    """Main entry point for CLI."""
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(description="Build the ESRD monthly monitoring extract")
    parser.add_argument('--data-dir', type=str, default=None, help='Directory with input relations')
    parser.add_argument('--output-dir', type=str, default=None, help='Output directory')
    parser.add_argument('--config', type=str, default=None, help='YAML config overrides')
    parser.add_argument('--year', type=int, default=None, help='Extract year')
    parser.add_argument('--format', choices=['parquet', 'csv'], default=None, help='Output format')
    parser.add_argument('--strict', action='store_true', help='Fail when validation fails')
    args = parser.parse_args(argv)

    config = load_extract_config(
        args.config,
        extract_year=args.year,
        output_format=args.format,
    )

    pipeline = EsrdMonthlyPipeline(config)
    pipeline.run(data_dir=args.data_dir, output_dir=args.output_dir, strict=args.strict)


if __name__ == "__main__":
    main()
