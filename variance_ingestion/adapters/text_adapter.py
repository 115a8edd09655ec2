"""
Delimited text source adapter (.csv, .tsv, .txt).

Returns the file text unparsed; ``parse_delimited_text`` owns delimiter
detection and quoting rules so pasted text and files behave the same.
Handles BOM via utf-8-sig when encoding is utf-8.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from variance_kernel.exceptions import FormatError
from variance_ingestion.domain.types import RawSource


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"  # Strip BOM if present
    return enc


class TextFileAdapter:
    """Read a delimited text file as one string."""

    extensions = (".csv", ".tsv", ".txt")

    def read(self, source_path: Path, options: dict[str, Any] | None = None) -> RawSource:
        options = options or {}
        try:
            text = Path(source_path).read_text(encoding=_get_encoding(options))
        except UnicodeDecodeError as exc:
            raise FormatError(
                f"Not readable as {options.get('encoding', 'utf-8')} text", Path(source_path).name
            ) from exc
        # Normalize line endings before the line-based parser sees them
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        return RawSource(name=Path(source_path).name, text=text)
