"""
Extract Validators
==================

Invariant checks on the monthly extract:
- Required columns present
- Months are first-of-month anchors inside the extract year
- Every month lies inside [esrd_begin, earliest_esrd_end]
- No duplicate rows
- Lab value columns are numeric
"""

import pandas as pd

from ..config.esrd_config import ExtractConfig, EXTRACT_CONFIG
from ..processing.lab_attacher import output_columns


class ValidationResult:
    """Container for validation results."""

    def __init__(self, name: str):
        self.name = name
        self.checks = []
        self.passed = 0
        self.failed = 0

    def add_check(self, description: str, passed: bool, details: str = ""):
        """Add a validation check result."""
        self.checks.append({
            'description': description,
            'passed': passed,
            'details': details,
        })
        if passed:
            self.passed += 1
        else:
            self.failed += 1

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def summary(self) -> str:
        """Get summary string."""
        status = "PASS" if self.ok else "FAIL"
        return f"{self.name}: {status} ({self.passed}/{self.passed + self.failed} checks)"

    def report(self) -> str:
        """Get full report string."""
        lines = [f"\n{'='*60}", f"{self.name}", "="*60]
        for check in self.checks:
            icon = "✓" if check['passed'] else "✗"
            lines.append(f"  {icon} {check['description']}")
            if check['details']:
                lines.append(f"      {check['details']}")
        lines.append(self.summary())
        return "\n".join(lines)


def validate_extract(df: pd.DataFrame, config: ExtractConfig = EXTRACT_CONFIG) -> ValidationResult:
    """Validate the final monthly extract."""
    result = ValidationResult(f"ESRD Monthly Extract {config.extract_year}")

    expected = output_columns(config)
    missing = [c for c in expected if c not in df.columns]
    result.add_check(
        "All output columns present",
        not missing,
        f"Missing: {missing}" if missing else f"{len(expected)} columns"
    )
    if missing:
        return result

    months = pd.to_datetime(df['month'])

    # Check 1: month anchors
    is_anchor = months.isin(config.month_anchors)
    result.add_check(
        f"Months are first-of-month anchors in {config.extract_year}",
        bool(is_anchor.all()),
        f"{int((~is_anchor).sum()):,} rows outside the anchors"
    )

    # Check 2: active interval
    end = pd.to_datetime(df['earliest_esrd_end'])
    in_interval = (months >= pd.to_datetime(df['esrd_begin'])) & (end.isna() | (months <= end))
    result.add_check(
        "esrd_begin <= month <= earliest_esrd_end",
        bool(in_interval.all()),
        f"{int((~in_interval).sum()):,} rows outside the active interval"
    )

    # Check 3: duplicates
    n_duplicates = int(df.duplicated().sum())
    n_multi_episode = int(df.duplicated(subset=['patient_id', 'month']).sum())
    result.add_check(
        "No duplicate rows",
        n_duplicates == 0,
        f"{n_duplicates:,} duplicate rows; {n_multi_episode:,} patient-months from overlapping episodes"
    )

    # Check 4: numeric labs
    non_numeric = [
        c for c in config.lab_columns.values()
        if not pd.api.types.is_numeric_dtype(df[c])
    ]
    result.add_check(
        "Lab value columns are numeric",
        not non_numeric,
        f"Non-numeric: {non_numeric}" if non_numeric else ""
    )

    return result
