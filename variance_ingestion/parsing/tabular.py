"""
Tabular parsing: raw content -> header list + row dicts. Pure, ZERO I/O.

Three input shapes are accepted and all produce ``TabularData``:

    parse_delimited_text   pasted or file text (tab or comma delimited)
    parse_cell_grid        a 2-D array of spreadsheet cells, first row = headers
    parse_record_objects   header -> value dicts from a record-style reader

Rows that cannot be trusted are dropped silently; a source that yields no
usable rows at all raises ``FormatError``.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Sequence

from variance_kernel.exceptions import FormatError
from variance_kernel.logging_config import get_logger
from variance_ingestion.domain.types import TabularData

logger = get_logger("ingestion.parsing")

TAB = "\t"
COMMA = ","

# One layer of quoting: a single leading and a single trailing quote char
_SURROUNDING_QUOTE_RE = re.compile(r"^[\"']|[\"']$")


def clean_field(raw: str) -> str:
    """Trim a field and strip one leading and one trailing quote character."""
    return _SURROUNDING_QUOTE_RE.sub("", raw.strip())


def detect_delimiter(header_line: str) -> str:
    """Tab if the header line has a tab, otherwise comma."""
    return TAB if TAB in header_line else COMMA


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def parse_delimited_text(text: str, source_name: str | None = None) -> TabularData:
    """
    Split delimited text into headers and row dicts.

    The first non-empty line is the header. The delimiter is detected once,
    from that line. A data line is kept only when its field count matches the
    header count and at least one field is non-empty.

    Raises:
        FormatError: fewer than two non-empty lines, or no valid data rows.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < 2:
        raise FormatError("Need at least a header row and one data row", source_name)

    delimiter = detect_delimiter(lines[0])
    headers = tuple(clean_field(h) for h in lines[0].split(delimiter))

    rows: list[dict[str, str]] = []
    dropped = 0
    for line in lines[1:]:
        values = [clean_field(v) for v in line.split(delimiter)]
        if len(values) != len(headers) or not any(values):
            dropped += 1
            continue
        rows.append(dict(zip(headers, values)))

    if not rows:
        raise FormatError("No valid data rows found", source_name)

    logger.debug(
        "delimited_text_parsed",
        extra={
            "delimiter": "tab" if delimiter == TAB else "comma",
            "header_count": len(headers),
            "row_count": len(rows),
            "dropped_lines": dropped,
        },
    )
    return TabularData(headers=headers, rows=tuple(rows), delimiter=delimiter)


def _grid_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def parse_cell_grid(grid: Sequence[Sequence[Any]], source_name: str | None = None) -> TabularData:
    """
    Turn a decoded spreadsheet (list of rows of cells) into headers and rows.

    Non-string cells keep their type so numbers reach the amount parser
    untouched. Missing trailing cells become "", extra cells past the header
    width are ignored, and rows with no non-blank cell are dropped.

    Raises:
        FormatError: fewer than two rows, or no non-empty data rows.
    """
    grid = list(grid)
    if len(grid) < 2:
        raise FormatError("Need at least a header row and one data row", source_name)

    headers = tuple("" if h is None else str(h).strip() for h in grid[0])
    width = len(headers)

    rows: list[dict[str, Any]] = []
    for raw_row in grid[1:]:
        raw_row = list(raw_row or ())
        values = [_grid_cell(raw_row[i]) if i < len(raw_row) else "" for i in range(width)]
        if all(_is_blank(v) for v in values):
            continue
        rows.append(dict(zip(headers, values)))

    if not rows:
        raise FormatError("No valid data rows found", source_name)

    logger.debug(
        "cell_grid_parsed",
        extra={"header_count": width, "row_count": len(rows)},
    )
    return TabularData(headers=headers, rows=tuple(rows))


def parse_record_objects(
    records: Iterable[Mapping[str, Any]],
    headers: Sequence[str] | None = None,
    source_name: str | None = None,
) -> TabularData:
    """
    Normalize header -> value dicts (e.g. from a spreadsheet reader).

    Headers default to the union of record keys in first-seen order.
    Records lacking a header get "" for it; all-blank records are dropped.

    Raises:
        FormatError: no headers, or no non-empty records.
    """
    records = list(records)
    if headers is None:
        seen: dict[str, None] = {}
        for record in records:
            for key in record:
                seen.setdefault(str(key), None)
        header_tuple = tuple(seen)
    else:
        header_tuple = tuple(str(h) for h in headers)

    if not header_tuple:
        raise FormatError("No columns found", source_name)

    rows: list[dict[str, Any]] = []
    for record in records:
        values = {h: _grid_cell(record.get(h)) for h in header_tuple}
        if all(_is_blank(v) for v in values.values()):
            continue
        rows.append(values)

    if not rows:
        raise FormatError("No valid data rows found", source_name)

    return TabularData(headers=header_tuple, rows=tuple(rows))
