"""Extract stages: cohort filter, condition resolver, period grid, lab attacher."""

from .cohort_filter import filter_recent_patients
from .condition_resolver import RESOLVED_COLUMNS, resolve_esrd_cohort
from .period_grid import GRID_COLUMNS, build_month_anchors, expand_period_grid
from .lab_attacher import attach_lab_values, output_columns

__all__ = [
    'filter_recent_patients',
    'RESOLVED_COLUMNS',
    'resolve_esrd_cohort',
    'GRID_COLUMNS',
    'build_month_anchors',
    'expand_period_grid',
    'attach_lab_values',
    'output_columns',
]
