"""
JSON-lines logging for the variance pipeline.

Every logger lives under the ``variance`` namespace and writes one JSON
object per line.  A line carries the timestamp, level, logger and message,
then whatever LogContext currently holds (which import run, dataset, file or
saved project the work belongs to), then the ``extra`` fields of the call.
When an exception is attached, its type, message, ``code`` and public
attributes are flattened into ``exc_*`` keys so a MappingError's missing
roles or a FormatError's source name are searchable without the traceback.

Context wins over ``extra`` on key collisions.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Iterator

_LOGGER_PREFIX = "variance"

_CONTEXT_FIELDS = ("correlation_id", "dataset_id", "source_name", "project_id")

_context_vars: dict[str, ContextVar[str | None]] = {
    field: ContextVar(f"variance_log_{field}", default=None) for field in _CONTEXT_FIELDS
}


class LogContext:
    """
    Run-scoped fields stamped onto every log line.

    Backed by contextvars, so a value bound inside one thread or task is
    invisible to the others.
    """

    @staticmethod
    def _var(field: str) -> ContextVar[str | None]:
        try:
            return _context_vars[field]
        except KeyError:
            raise TypeError(f"Unknown log context field: {field!r}") from None

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Overwrite the given fields for the rest of the current context."""
        for field, value in fields.items():
            var = cls._var(field)
            if value is not None:
                var.set(str(value))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            field: value
            for field, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _context_vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def _bound(cls, tokens: list) -> Iterator[type["LogContext"]]:
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)

    @classmethod
    def bind(cls, **fields: Any):
        """
        Set fields for the duration of a ``with`` block.

        None values are skipped; unknown names raise TypeError immediately,
        before the block is entered.
        """
        resolved = [(cls._var(field), value) for field, value in fields.items()]
        tokens = [(var, var.set(str(value))) for var, value in resolved if value is not None]
        return cls._bound(tokens)


_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for attr, value in vars(exc).items():
        if attr != "code" and not attr.startswith("_"):
            fields[f"exc_{attr}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        line.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key not in line
        )
        if record.exc_info and record.exc_info[1] is not None:
            line.update(_exception_fields(record.exc_info[1]))
            line["traceback"] = self.formatException(record.exc_info)
        return json.dumps(line, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger named ``variance.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``variance`` logger.

    Only the first call has any effect; later calls return without touching
    the handler or level.  ``handler`` takes precedence over ``stream``,
    which defaults to stderr.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    namespace = logging.getLogger(_LOGGER_PREFIX)
    namespace.setLevel(level)
    namespace.propagate = False

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    namespace.addHandler(target)


def reset_logging() -> None:
    """Undo configure_logging so the next call takes effect again (tests)."""
    global _configured
    with _lock:
        _configured = False
    namespace = logging.getLogger(_LOGGER_PREFIX)
    namespace.handlers.clear()
    namespace.setLevel(logging.WARNING)
    namespace.propagate = True
