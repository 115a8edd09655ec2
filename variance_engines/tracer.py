"""
``@traced_engine``: one VARIANCE_ENGINE_TRACE log line per engine call.

The line names the engine and its version, counts the records it was handed
(the first positional argument, or the result when called with keywords
only), and carries a 16-hex-char fingerprint of the keyword arguments that
shape the outcome, such as the thresholds or the grouping dimension.

Only keyword arguments are fingerprinted.  A fingerprint field passed
positionally, or left out, hashes as ``null``, so callers that want the
trace to identify the configuration pass those fields by keyword.

    @traced_engine("aggregation", "1.0", fingerprint_fields=("group_by",))
    def group_records(records, group_by): ...
"""

from __future__ import annotations

import functools
import hashlib
import time
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any

from variance_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_EVENT = "VARIANCE_ENGINE_TRACE"


def _stable_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _stable_text(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, Sequence) and not isinstance(value, str):
        return "[" + ",".join(_stable_text(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    joined = "|".join(f"{field}={_stable_text(kwargs.get(field))}" for field in fingerprint_fields)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:16]


def _sized(value: Any) -> int | None:
    try:
        return len(value)
    except TypeError:
        return None


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.monotonic() - started) * 1000, 2)

            _logger.info(
                TRACE_EVENT,
                extra={
                    "trace_type": TRACE_EVENT,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": (
                        compute_input_fingerprint(fingerprint_fields, kwargs)
                        if fingerprint_fields
                        else ""
                    ),
                    "input_count": _sized(args[0]) if args else _sized(result),
                    "duration_ms": elapsed_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
