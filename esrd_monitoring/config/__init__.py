"""Configuration for the ESRD monthly extract."""

from .esrd_config import (
    ESRD_CODE,
    KIDNEY_TRANSPLANT_CODE,
    LAB_CODES,
    ExtractConfig,
    EXTRACT_CONFIG,
    load_extract_config,
    ensure_directories,
)

__all__ = [
    'ESRD_CODE',
    'KIDNEY_TRANSPLANT_CODE',
    'LAB_CODES',
    'ExtractConfig',
    'EXTRACT_CONFIG',
    'load_extract_config',
    'ensure_directories',
]
