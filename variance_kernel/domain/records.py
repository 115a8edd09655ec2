"""
Variance records and parsed datasets.

Responsibility:
    The normalized output of ingestion: one immutable ``VarianceRecord`` per
    source row, collected in a ``ParsedDataset`` together with the original
    header list.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - ``dollar_variance`` and ``percent_variance`` are computed from
      ``budget``/``actual`` on every access; they cannot drift.
    - Dataset presence flags and ``periods`` are computed from the records'
      optional dimension fields; they cannot be edited independently.
    - A dimension field is ``None`` when the source had no column for it.
      An empty string means the column existed but the cell was blank; both
      count as "no value" for grouping, filtering and merge keys.

Failure modes:
    - ValueError if a record is created with an empty category.
    - KeyError / ValueError from ``from_dict`` on malformed payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Iterator
from uuid import UUID, uuid4

from variance_kernel.domain.values import (
    Comment,
    RootCause,
    VarianceStatus,
    compute_percent_variance,
)

DIMENSIONS = ("cost_center", "gl_account", "period")


def has_value(value: str | None) -> bool:
    """True when an optional dimension carries a usable value."""
    return value is not None and value != ""


@dataclass(frozen=True)
class VarianceRecord:
    """
    One budget-vs-actual line item.

    Amounts are immutable after creation; workflow fields change only by
    building a new record (see ``with_changes``).
    """

    category: str
    budget: float
    actual: float
    record_id: UUID = field(default_factory=uuid4)
    cost_center: str | None = None
    gl_account: str | None = None
    period: str | None = None
    is_significant: bool = False
    is_starred: bool = False
    status: VarianceStatus = VarianceStatus.NEW
    owner: str = ""
    root_cause: RootCause = RootCause.UNTAGGED
    due_date: date | None = None
    explanation: str = ""
    comments: tuple[Comment, ...] = ()

    def __post_init__(self) -> None:
        if not self.category:
            raise ValueError("VarianceRecord.category must be non-empty")
        if not isinstance(self.comments, tuple):
            object.__setattr__(self, "comments", tuple(self.comments))

    @property
    def dollar_variance(self) -> float:
        return self.actual - self.budget

    @property
    def percent_variance(self) -> float:
        return compute_percent_variance(self.dollar_variance, self.budget)

    @property
    def is_over_budget(self) -> bool:
        return self.dollar_variance > 0

    @property
    def is_under_budget(self) -> bool:
        return self.dollar_variance < 0

    def dimension(self, name: str) -> str | None:
        """Value of an optional dimension by field name."""
        if name not in DIMENSIONS:
            raise ValueError(f"Unknown dimension: {name}")
        return getattr(self, name)

    def with_changes(self, **changes: Any) -> VarianceRecord:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict including the derived variance fields."""
        data: dict[str, Any] = {
            "id": str(self.record_id),
            "category": self.category,
            "budget": self.budget,
            "actual": self.actual,
            "dollar_variance": self.dollar_variance,
            "percent_variance": self.percent_variance,
            "is_significant": self.is_significant,
            "is_starred": self.is_starred,
            "status": self.status.value,
            "owner": self.owner,
            "root_cause": self.root_cause.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "explanation": self.explanation,
            "comments": [c.to_dict() for c in self.comments],
        }
        # Absent dimensions stay absent
        for name in DIMENSIONS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VarianceRecord:
        due = data.get("due_date")
        return cls(
            record_id=UUID(data["id"]) if data.get("id") else uuid4(),
            category=data["category"],
            budget=float(data["budget"]),
            actual=float(data["actual"]),
            cost_center=data.get("cost_center"),
            gl_account=data.get("gl_account"),
            period=data.get("period"),
            is_significant=bool(data.get("is_significant", False)),
            is_starred=bool(data.get("is_starred", False)),
            status=VarianceStatus(data.get("status", VarianceStatus.NEW.value)),
            owner=data.get("owner", ""),
            root_cause=RootCause(data.get("root_cause", RootCause.UNTAGGED.value)),
            due_date=date.fromisoformat(due) if due else None,
            explanation=data.get("explanation", ""),
            comments=tuple(Comment.from_dict(c) for c in data.get("comments", ())),
        )


@dataclass(frozen=True)
class ParsedDataset:
    """An ordered set of variance records plus the headers they came from."""

    records: tuple[VarianceRecord, ...] = ()
    columns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.records, tuple):
            object.__setattr__(self, "records", tuple(self.records))
        if not isinstance(self.columns, tuple):
            object.__setattr__(self, "columns", tuple(self.columns))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[VarianceRecord]:
        return iter(self.records)

    @property
    def has_cost_center(self) -> bool:
        return any(r.cost_center is not None for r in self.records)

    @property
    def has_gl_account(self) -> bool:
        return any(r.gl_account is not None for r in self.records)

    @property
    def has_period(self) -> bool:
        return any(r.period is not None for r in self.records)

    @property
    def periods(self) -> tuple[str, ...]:
        return tuple(sorted({r.period for r in self.records if has_value(r.period)}))

    def find(self, record_id: UUID) -> VarianceRecord | None:
        for record in self.records:
            if record.record_id == record_id:
                return record
        return None

    def with_records(self, records: tuple[VarianceRecord, ...] | list[VarianceRecord]) -> ParsedDataset:
        return ParsedDataset(records=tuple(records), columns=self.columns)

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "columns": list(self.columns),
            "has_cost_center": self.has_cost_center,
            "has_gl_account": self.has_gl_account,
            "has_period": self.has_period,
            "periods": list(self.periods),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ParsedDataset:
        """Rebuild from ``to_dict`` output. Derived fields in the payload are ignored."""
        return cls(
            records=tuple(VarianceRecord.from_dict(r) for r in data.get("records", ())),
            columns=tuple(data.get("columns", ())),
        )
