"""
Guard for text returned by an AI extraction collaborator.

The extractor is asked to answer with comma-delimited CSV (header row
first) or, when it cannot read the source, with a line starting with a
failure sentinel such as ``ERROR: image is unreadable``.  The sentinel must
become a typed error before any parsing happens, otherwise the parser would
treat the message as a one-column table.

No network I/O lives here: callers pass in the response text.
"""

from __future__ import annotations

import re

from variance_kernel.exceptions import ExtractionError
from variance_kernel.logging_config import get_logger

logger = get_logger("ingestion.extraction")

DEFAULT_ERROR_PREFIX = "ERROR:"

_FENCE_RE = re.compile(r"^```[\w-]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove one surrounding Markdown code fence, if present."""
    match = _FENCE_RE.match(text.strip())
    if match:
        return match.group(1)
    return text


def check_extraction_response(text: str, error_prefix: str = DEFAULT_ERROR_PREFIX) -> str:
    """
    Return CSV text ready for ``parse_delimited_text``.

    Raises:
        ExtractionError: the response starts with ``error_prefix``; the
            exception's ``reason`` is the text after the prefix.
    """
    body = strip_code_fences(text).strip()
    if body.startswith(error_prefix):
        reason = body[len(error_prefix):].strip()
        logger.warning("extraction_reported_failure", extra={"reason": reason})
        raise ExtractionError(reason)
    return body
