"""
variance_engines.filtering -- Compound record filters.

Responsibility:
    Apply a ``FilterSpec`` to a record list: free-text search, multi-select
    facets and the significant-only / starred-only switches, combined with
    AND.  Order is preserved.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - An empty multi-select means "no restriction" for that facet.
    - Dimension facets (cost center, GL account, period) only restrict
      records that carry a value for that dimension; untagged records pass.
    - Status and owner facets always apply.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Iterable

from variance_kernel.domain.records import VarianceRecord, has_value
from variance_kernel.domain.values import VarianceStatus
from variance_engines.tracer import traced_engine


@dataclass(frozen=True)
class FilterSpec:
    """What the current view shows. The default spec matches everything."""

    search: str = ""
    cost_centers: frozenset[str] = field(default_factory=frozenset)
    gl_accounts: frozenset[str] = field(default_factory=frozenset)
    periods: frozenset[str] = field(default_factory=frozenset)
    statuses: frozenset[VarianceStatus] = field(default_factory=frozenset)
    owners: frozenset[str] = field(default_factory=frozenset)
    show_only_significant: bool = False
    show_only_starred: bool = False

    def __post_init__(self) -> None:
        for name in ("cost_centers", "gl_accounts", "periods", "owners"):
            value = getattr(self, name)
            if not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(value))
        object.__setattr__(
            self, "statuses", frozenset(VarianceStatus(s) for s in self.statuses)
        )

    @property
    def is_active(self) -> bool:
        return self != FilterSpec()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, frozenset):
                value = sorted(v.value if isinstance(v, VarianceStatus) else v for v in value)
            data[f.name] = value
        return data


def _search_text(record: VarianceRecord) -> str:
    parts = (
        record.category,
        record.cost_center,
        record.gl_account,
        record.owner,
        record.explanation,
    )
    return " ".join(p for p in parts if p).lower()


def _facet_passes(value: str | None, allowed: frozenset[str]) -> bool:
    if not allowed or not has_value(value):
        return True
    return value in allowed


def matches(record: VarianceRecord, spec: FilterSpec) -> bool:
    """True when ``record`` satisfies every active predicate of ``spec``."""
    if spec.search and spec.search.lower() not in _search_text(record):
        return False
    if not _facet_passes(record.cost_center, spec.cost_centers):
        return False
    if not _facet_passes(record.gl_account, spec.gl_accounts):
        return False
    if not _facet_passes(record.period, spec.periods):
        return False
    if spec.statuses and record.status not in spec.statuses:
        return False
    if spec.owners and record.owner not in spec.owners:
        return False
    if spec.show_only_significant and not record.is_significant:
        return False
    if spec.show_only_starred and not record.is_starred:
        return False
    return True


@traced_engine("filtering", "1.0")
def filter_records(records: Iterable[VarianceRecord], spec: FilterSpec) -> list[VarianceRecord]:
    return [r for r in records if matches(r, spec)]


@dataclass(frozen=True)
class FacetValues:
    """Distinct values available to each filter picker, sorted."""

    cost_centers: tuple[str, ...]
    gl_accounts: tuple[str, ...]
    periods: tuple[str, ...]
    owners: tuple[str, ...]


def facet_values(records: Iterable[VarianceRecord]) -> FacetValues:
    records = list(records)

    def distinct(name: str) -> tuple[str, ...]:
        return tuple(sorted({getattr(r, name) for r in records if has_value(getattr(r, name))}))

    return FacetValues(
        cost_centers=distinct("cost_center"),
        gl_accounts=distinct("gl_account"),
        periods=distinct("period"),
        owners=distinct("owner"),
    )
