"""Output invariant checks."""

from .extract_validators import ValidationResult, validate_extract

__all__ = ['ValidationResult', 'validate_extract']
