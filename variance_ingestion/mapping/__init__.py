"""Mapping: column role resolution and record building (pure)."""

from variance_ingestion.mapping.aliases import ColumnAliases
from variance_ingestion.mapping.builder import build_dataset, build_record
from variance_ingestion.mapping.resolver import (
    detect_columns,
    resolve_columns,
    validate_mapping,
)

__all__ = [
    "ColumnAliases",
    "build_dataset",
    "build_record",
    "detect_columns",
    "resolve_columns",
    "validate_mapping",
]
