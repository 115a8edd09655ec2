"""Source adapters (file I/O only, no DB) and the AI extraction guard."""

from variance_ingestion.adapters.base import SourceAdapter
from variance_ingestion.adapters.extraction import (
    DEFAULT_ERROR_PREFIX,
    check_extraction_response,
    strip_code_fences,
)
from variance_ingestion.adapters.text_adapter import TextFileAdapter
from variance_ingestion.adapters.xlsx_adapter import XlsxAdapter

__all__ = [
    "DEFAULT_ERROR_PREFIX",
    "SourceAdapter",
    "TextFileAdapter",
    "XlsxAdapter",
    "check_extraction_response",
    "strip_code_fences",
]
