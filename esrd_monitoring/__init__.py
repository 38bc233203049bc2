"""ESRD monthly monitoring extract."""

__version__ = "0.1.0"
