"""
ESRD Monthly Extract Configuration
==================================

Central configuration for the ESRD monthly monitoring extract.
"""

from pathlib import Path
from dataclasses import dataclass, field, fields, asdict
from typing import Dict, Optional, Union
import pandas as pd
import yaml


# =============================================================================
# PATH CONFIGURATION
# =============================================================================

MODULE_ROOT = Path(__file__).parent.parent
PROJECT_ROOT = MODULE_ROOT.parent

# Input data (one table per relation, .csv or .parquet)
DATA_DIR = PROJECT_ROOT / "Data"

# Output directories
OUTPUT_DIR = MODULE_ROOT / "outputs"
GOLD_DIR = OUTPUT_DIR / "gold"

EXTRACT_FILENAME = "esrd_monthly_extract"
METADATA_FILENAME = "extract_metadata.json"


# =============================================================================
# CLINICAL CODES
# =============================================================================

# ICD-9 end stage renal disease
ESRD_CODE = "585.6"

# ICD-9-CM procedure: other kidney transplantation
KIDNEY_TRANSPLANT_CODE = "55.69"

# LOINC codes for the monitored labs (output column = f"{name}_value")
LAB_CODES: Dict[str, str] = {
    'calcium': '49765-1',
    'sodium': '2947-0',
    'albumin': '1751-7',
    'bun': '6299-2',
}


# =============================================================================
# EXTRACT CONFIGURATION
# =============================================================================

OUTPUT_FORMATS = ('parquet', 'csv')


@dataclass
class ExtractConfig:
    """Extract year, lookback window and code settings."""

    extract_year: int = 2022
    lookback_years: int = 2  # full calendar years ending at extract year end

    esrd_code: str = ESRD_CODE
    transplant_code: str = KIDNEY_TRANSPLANT_CODE
    lab_codes: Dict[str, str] = field(default_factory=lambda: dict(LAB_CODES))

    output_format: str = 'parquet'

    # Written in place of an unbounded earliest_esrd_end on export only
    unbounded_end_fill: Optional[str] = None

    def __post_init__(self):
        if self.lookback_years < 1:
            raise ValueError(f"lookback_years must be >= 1, got {self.lookback_years}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {OUTPUT_FORMATS}, got {self.output_format!r}"
            )
        if set(self.lab_codes) != set(LAB_CODES):
            raise ValueError(
                f"lab_codes must define exactly {sorted(LAB_CODES)}, got {sorted(self.lab_codes)}"
            )

    @property
    def year_start(self) -> pd.Timestamp:
        return pd.Timestamp(year=self.extract_year, month=1, day=1)

    @property
    def year_end(self) -> pd.Timestamp:
        return pd.Timestamp(year=self.extract_year, month=12, day=31)

    @property
    def lookback_start(self) -> pd.Timestamp:
        """First day of the encounter lookback window."""
        return pd.Timestamp(year=self.extract_year - self.lookback_years + 1, month=1, day=1)

    @property
    def month_anchors(self) -> pd.DatetimeIndex:
        return pd.date_range(self.year_start, periods=12, freq='MS')

    @property
    def lab_columns(self) -> Dict[str, str]:
        """Map LOINC code -> output column name."""
        return {code: f"{name}_value" for name, code in self.lab_codes.items()}

    def to_dict(self) -> Dict:
        return asdict(self)


EXTRACT_CONFIG = ExtractConfig()


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def load_extract_config(path: Optional[Union[str, Path]] = None, **overrides) -> ExtractConfig:
    """
    Build an ExtractConfig from an optional YAML file plus keyword overrides.

    Args:
        path: YAML file with ExtractConfig keys (optional)
        **overrides: Values applied after the YAML file; None values are ignored

    Returns:
        ExtractConfig
    """
    values = {}
    if path is not None:
        with open(path, 'r') as f:
            values = yaml.safe_load(f) or {}
        if not isinstance(values, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(ExtractConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}")

    if 'lab_codes' in values:
        lab_codes = dict(LAB_CODES)
        lab_codes.update(values['lab_codes'] or {})
        values['lab_codes'] = lab_codes

    return ExtractConfig(**values)


def ensure_directories():
    """Create all required output directories."""
    for dir_path in [OUTPUT_DIR, GOLD_DIR]:
        dir_path.mkdir(parents=True, exist_ok=True)


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("ESRD Monthly Extract Configuration")
    print("=" * 60)
    print(f"\nModule Root: {MODULE_ROOT}")
    print(f"Data Dir: {DATA_DIR}")
    print(f"Extract Year: {EXTRACT_CONFIG.extract_year}")
    print(f"Lookback: {EXTRACT_CONFIG.lookback_start.date()} to {EXTRACT_CONFIG.year_end.date()}")
    print("\nLab Codes:")
    for name, code in EXTRACT_CONFIG.lab_codes.items():
        print(f"  {name}: {code}")
    print("=" * 60)
