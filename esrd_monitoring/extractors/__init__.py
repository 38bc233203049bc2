"""Loaders for the extract's input relations."""

from .source_extractor import (
    RELATION_COLUMNS,
    SourceTables,
    load_relation,
    load_sources,
    prepare_relation,
)

__all__ = [
    'RELATION_COLUMNS',
    'SourceTables',
    'load_relation',
    'load_sources',
    'prepare_relation',
]
