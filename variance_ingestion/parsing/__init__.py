"""Parsing: raw content into tabular rows, and amount normalization."""

from variance_ingestion.parsing.numbers import parse_amount
from variance_ingestion.parsing.tabular import (
    clean_field,
    detect_delimiter,
    parse_cell_grid,
    parse_delimited_text,
    parse_record_objects,
)

__all__ = [
    "clean_field",
    "detect_delimiter",
    "parse_amount",
    "parse_cell_grid",
    "parse_delimited_text",
    "parse_record_objects",
]
