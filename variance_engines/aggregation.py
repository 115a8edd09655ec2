"""
variance_engines.aggregation -- Roll records up by cost center or GL account.

Responsibility:
    Group records by one dimension and total each group.  Group percent
    variance is computed from the group totals, not averaged from members.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Records with no value for the dimension land in ``"Unassigned"``.
    - Groups are sorted by ``abs(total_dollar_variance)`` descending; ties
      keep first-seen order (stable sort).
    - Division by zero in group percent variance yields 0.

Failure modes:
    - ValueError when asked to group by ``GroupBy.NONE``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from variance_kernel.domain.records import VarianceRecord, has_value
from variance_kernel.domain.values import GroupBy, compute_percent_variance
from variance_kernel.logging_config import get_logger
from variance_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")

UNASSIGNED = "Unassigned"

_GROUP_FIELDS = {
    GroupBy.COST_CENTER: "cost_center",
    GroupBy.GL_ACCOUNT: "gl_account",
}


@dataclass(frozen=True)
class GroupedRollup:
    """Totals for all records sharing one dimension value."""

    key: str
    records: tuple[VarianceRecord, ...]
    total_budget: float
    total_actual: float

    @property
    def total_dollar_variance(self) -> float:
        return self.total_actual - self.total_budget

    @property
    def total_percent_variance(self) -> float:
        return compute_percent_variance(self.total_dollar_variance, self.total_budget)

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def significant_count(self) -> int:
        return sum(1 for r in self.records if r.is_significant)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "record_ids": [str(r.record_id) for r in self.records],
            "total_budget": self.total_budget,
            "total_actual": self.total_actual,
            "total_dollar_variance": self.total_dollar_variance,
            "total_percent_variance": self.total_percent_variance,
        }


def group_key(record: VarianceRecord, group_by: GroupBy) -> str:
    value = getattr(record, _GROUP_FIELDS[group_by])
    return value if has_value(value) else UNASSIGNED


@traced_engine("aggregation", "1.0", fingerprint_fields=("group_by",))
def group_records(
    records: Iterable[VarianceRecord],
    group_by: GroupBy | str,
) -> list[GroupedRollup]:
    """
    Group and total records by ``group_by``.

    Raises:
        ValueError: ``group_by`` is ``none`` or not a grouping dimension.
    """
    group_by = GroupBy(group_by)
    if group_by not in _GROUP_FIELDS:
        raise ValueError(f"Cannot group by {group_by.value!r}; use cost_center or gl_account")

    members: dict[str, list[VarianceRecord]] = {}
    for record in records:
        members.setdefault(group_key(record, group_by), []).append(record)

    groups = [
        GroupedRollup(
            key=key,
            records=tuple(items),
            total_budget=sum(r.budget for r in items),
            total_actual=sum(r.actual for r in items),
        )
        for key, items in members.items()
    ]
    groups.sort(key=lambda g: abs(g.total_dollar_variance), reverse=True)

    logger.debug(
        "records_grouped",
        extra={"group_by": group_by.value, "group_count": len(groups)},
    )
    return groups
