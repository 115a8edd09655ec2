"""
Workflow actions on variance records.

Responsibility:
    The only way workflow fields change: status, owner, root cause, due
    date, explanation, star and comments.  Every action returns a new record
    (or dataset); nothing is mutated in place.

Architecture position:
    Services -- pure functions apart from reading the clock for comment
    timestamps.

Invariants enforced:
    - Amounts and dimensions are never touched by a workflow action.
    - String inputs are coerced to the closed enums / ISO dates, so a record
      never holds an unknown status or root cause.
    - ``is_significant`` may be set by hand here; the next threshold change
      recomputes it.

Failure modes:
    - WorkflowError: unknown field, bad value, or an empty comment.
    - RecordNotFoundError: id not present in the dataset.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable
from uuid import UUID

from variance_kernel.domain.clock import Clock, SystemClock
from variance_kernel.domain.records import ParsedDataset, VarianceRecord
from variance_kernel.domain.values import Comment, RootCause, VarianceStatus
from variance_kernel.exceptions import RecordNotFoundError, WorkflowError
from variance_kernel.logging_config import get_logger

logger = get_logger("services.workflow")

WORKFLOW_FIELDS = frozenset({
    "status",
    "owner",
    "root_cause",
    "due_date",
    "explanation",
    "is_starred",
    "is_significant",
})


def _coerce_status(value: Any) -> VarianceStatus:
    try:
        return VarianceStatus(value)
    except ValueError:
        raise WorkflowError(f"Unknown status: {value!r}", field="status") from None


def _coerce_root_cause(value: Any) -> RootCause:
    if value is None:
        return RootCause.UNTAGGED
    try:
        return RootCause(value)
    except ValueError:
        raise WorkflowError(f"Unknown root cause: {value!r}", field="root_cause") from None


def _coerce_due_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise WorkflowError(f"Due date must be an ISO date, got {value!r}", field="due_date")


def _coerce_text(field: str, value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise WorkflowError(f"{field} must be text, got {type(value).__name__}", field=field)
    return value.strip()


def _coerce_flag(field: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise WorkflowError(f"{field} must be true or false, got {value!r}", field=field)
    return value


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "status": _coerce_status,
    "root_cause": _coerce_root_cause,
    "due_date": _coerce_due_date,
    "owner": lambda v: _coerce_text("owner", v),
    "explanation": lambda v: _coerce_text("explanation", v),
    "is_starred": lambda v: _coerce_flag("is_starred", v),
    "is_significant": lambda v: _coerce_flag("is_significant", v),
}


def update_record(record: VarianceRecord, **changes: Any) -> VarianceRecord:
    """
    Return ``record`` with workflow fields changed.

    Raises:
        WorkflowError: a field outside WORKFLOW_FIELDS, or an invalid value.
    """
    illegal = sorted(set(changes) - WORKFLOW_FIELDS)
    if illegal:
        raise WorkflowError(
            f"Not a workflow field: {', '.join(illegal)}", field=illegal[0]
        )
    coerced = {name: _COERCERS[name](value) for name, value in changes.items()}
    updated = record.with_changes(**coerced)
    logger.info(
        "record_updated",
        extra={"record_id": record.record_id, "fields": sorted(coerced)},
    )
    return updated


def add_comment(
    record: VarianceRecord,
    author: str,
    text: str,
    clock: Clock | None = None,
) -> VarianceRecord:
    """
    Append a comment stamped with the clock's current time.

    Raises:
        WorkflowError: empty comment text.
    """
    text = (text or "").strip()
    if not text:
        raise WorkflowError("Comment text must not be empty", field="comments")
    comment = Comment(
        author=(author or "").strip() or "Anonymous",
        text=text,
        timestamp=(clock or SystemClock()).now(),
    )
    logger.info(
        "comment_added",
        extra={"record_id": record.record_id, "comment_id": comment.comment_id},
    )
    return record.with_changes(comments=record.comments + (comment,))


def toggle_star(record: VarianceRecord) -> VarianceRecord:
    return record.with_changes(is_starred=not record.is_starred)


def update_dataset_record(
    dataset: ParsedDataset,
    record_id: UUID | str,
    action: Callable[[VarianceRecord], VarianceRecord],
) -> ParsedDataset:
    """
    Replace one record with ``action(record)``.

    Raises:
        RecordNotFoundError: no record with ``record_id``.
    """
    try:
        target = record_id if isinstance(record_id, UUID) else UUID(str(record_id))
    except ValueError:
        raise RecordNotFoundError(str(record_id)) from None

    replaced = False
    records = []
    for record in dataset.records:
        if record.record_id == target:
            records.append(action(record))
            replaced = True
        else:
            records.append(record)
    if not replaced:
        raise RecordNotFoundError(str(target))
    return dataset.with_records(records)
