"""Extract writers."""

from .extract_exporter import export_extract, build_metadata

__all__ = ['export_extract', 'build_metadata']
