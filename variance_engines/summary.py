"""
variance_engines.summary -- Portfolio totals and rule-based insights.

Responsibility:
    ``calculate_summary`` totals a record set; ``top_variances`` picks the
    largest over- and under-spends; ``build_insights`` turns both into short
    plain-language statements for an executive summary.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Net percent variance is computed from totals (0 on a zero budget).
    - Insights are produced in a fixed order: overall position, significant
      share, largest overspend, largest saving.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from variance_kernel.domain.records import VarianceRecord
from variance_kernel.domain.values import compute_percent_variance
from variance_kernel.utils.formatting import format_currency, format_percent
from variance_engines.kpi import TOP_COUNT, top_overspends, top_savings


@dataclass(frozen=True)
class VarianceSummary:
    record_count: int
    total_budget: float
    total_actual: float
    significant_count: int
    over_budget_count: int
    under_budget_count: int

    @property
    def total_dollar_variance(self) -> float:
        return self.total_actual - self.total_budget

    @property
    def total_percent_variance(self) -> float:
        return compute_percent_variance(self.total_dollar_variance, self.total_budget)

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_count": self.record_count,
            "total_budget": self.total_budget,
            "total_actual": self.total_actual,
            "total_dollar_variance": self.total_dollar_variance,
            "total_percent_variance": self.total_percent_variance,
            "significant_count": self.significant_count,
            "over_budget_count": self.over_budget_count,
            "under_budget_count": self.under_budget_count,
        }


@dataclass(frozen=True)
class TopVariances:
    overspends: tuple[VarianceRecord, ...]
    savings: tuple[VarianceRecord, ...]


class InsightKind(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Insight:
    kind: InsightKind
    text: str


def calculate_summary(records: Iterable[VarianceRecord]) -> VarianceSummary:
    records = list(records)
    return VarianceSummary(
        record_count=len(records),
        total_budget=float(sum(r.budget for r in records)),
        total_actual=float(sum(r.actual for r in records)),
        significant_count=sum(1 for r in records if r.is_significant),
        over_budget_count=sum(1 for r in records if r.is_over_budget),
        under_budget_count=sum(1 for r in records if r.is_under_budget),
    )


def top_variances(records: Iterable[VarianceRecord], count: int = TOP_COUNT) -> TopVariances:
    records = list(records)
    return TopVariances(
        overspends=top_overspends(records, count),
        savings=top_savings(records, count),
    )


def build_insights(records: Iterable[VarianceRecord]) -> list[Insight]:
    records = list(records)
    summary = calculate_summary(records)
    insights: list[Insight] = []

    if summary.total_dollar_variance > 0:
        insights.append(Insight(
            InsightKind.NEGATIVE,
            f"Overall spending is {format_currency(summary.total_dollar_variance)} "
            f"({format_percent(summary.total_percent_variance)}) over budget",
        ))
    else:
        insights.append(Insight(
            InsightKind.POSITIVE,
            f"Overall spending is {format_currency(abs(summary.total_dollar_variance))} "
            f"({format_percent(abs(summary.total_percent_variance))}) under budget",
        ))

    if summary.significant_count > 0:
        share = round(summary.significant_count / summary.record_count * 100)
        insights.append(Insight(
            InsightKind.WARNING,
            f"{summary.significant_count} items ({share}%) flagged as significant variances",
        ))
    else:
        insights.append(Insight(InsightKind.POSITIVE, "No significant variances detected"))

    top = top_variances(records, count=1)
    if top.overspends:
        worst = top.overspends[0]
        insights.append(Insight(
            InsightKind.INFO,
            f"Largest overspend: {worst.category} at +{format_currency(worst.dollar_variance)}",
        ))
    if top.savings:
        best = top.savings[0]
        insights.append(Insight(
            InsightKind.POSITIVE,
            f"Largest savings: {best.category} at {format_currency(best.dollar_variance)}",
        ))

    return insights
