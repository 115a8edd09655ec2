"""
XLSX source adapter for budget and actuals workbooks.

Reads one worksheet into a 2-D grid of cell values; the first row of the
grid is the header row. Layout detection (which row is the header, which
columns matter) is left to the tabular parser and column resolver.

source options:
  sheet: 0-based sheet index (int) or sheet name (str). Default: first sheet.
  skip_rows: rows to skip at the top of the sheet. Default: 0.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any

from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from variance_kernel.exceptions import FormatError
from variance_ingestion.domain.types import RawSource

MAX_ROWS = 100_000


def _cell_value(value: Any) -> Any:
    """Normalize an openpyxl cell value; None stays None for the parser."""
    if value is None:
        return None
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip()
    return value


class XlsxAdapter:
    """Read the first (or chosen) worksheet of an .xlsx/.xlsm workbook."""

    extensions = (".xlsx", ".xlsm")

    def read(self, source_path: Path, options: dict[str, Any] | None = None) -> RawSource:
        options = options or {}
        try:
            wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile) as exc:
            raise FormatError(f"Unreadable workbook: {exc}", Path(source_path).name) from exc
        try:
            sheet = self._get_sheet(wb, options)
            skip_rows = int(options.get("skip_rows", 0))
            grid = tuple(
                tuple(_cell_value(v) for v in row)
                for row in sheet.iter_rows(
                    min_row=1 + skip_rows, max_row=MAX_ROWS, values_only=True
                )
            )
        finally:
            wb.close()
        return RawSource(name=Path(source_path).name, grid=grid)

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        try:
            if sheet_ref is None:
                return wb.worksheets[0]
            if isinstance(sheet_ref, int):
                return wb.worksheets[sheet_ref]
            return wb[sheet_ref]
        except (IndexError, KeyError) as exc:
            raise FormatError(f"Worksheet not found: {sheet_ref!r}") from exc
