"""
Source adapter protocol.

Contract:
    SourceAdapter.read() returns the raw content of one local file as a
    ``RawSource`` (text or a cell grid) for the tabular parsers.

Architecture: variance_ingestion/adapters. File I/O only, no DB imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from variance_ingestion.domain.types import RawSource


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading a local file into raw tabular content."""

    extensions: tuple[str, ...]

    def read(self, source_path: Path, options: dict[str, Any] | None = None) -> RawSource:
        """Read the whole file. Sources are small enough to hold in memory."""
        ...
