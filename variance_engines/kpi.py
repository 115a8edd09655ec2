"""
variance_engines.kpi -- Portfolio KPIs and full-year run-rate projection.

Responsibility:
    Derive workflow progress (explained share, overdue items, status and
    root-cause breakdowns), the largest over- and under-spends, and a
    straight-line full-year projection of actual spend.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The engine never reads
    the clock: callers pass ``as_of`` (and optionally ``months_elapsed``).

Invariants enforced:
    - Explained means status ``explained`` or ``closed``.
    - Overdue: a due date strictly before ``as_of`` and not explained.
      Records without a due date are never overdue.
    - ``by_status`` covers every status; ``by_root_cause`` skips causes
      with no records.
    - Run rate is 0 when ``months_elapsed <= 0``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from variance_kernel.domain.records import VarianceRecord
from variance_kernel.domain.values import RootCause, VarianceStatus
from variance_kernel.logging_config import get_logger
from variance_engines.tracer import traced_engine

logger = get_logger("engines.kpi")

TOP_COUNT = 5
MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class RootCauseBreakdown:
    root_cause: RootCause
    count: int
    total_variance: float  # sum of abs(dollar_variance)


@dataclass(frozen=True)
class KpiReport:
    total_variances: int
    explained_count: int
    explained_percent: float
    overdue_count: int
    by_status: tuple[tuple[VarianceStatus, int], ...]
    by_root_cause: tuple[RootCauseBreakdown, ...]
    top_overspends: tuple[VarianceRecord, ...]
    top_savings: tuple[VarianceRecord, ...]
    annual_budget: float
    ytd_actual: float
    months_elapsed: int
    run_rate_projection: float
    projected_variance: float

    def status_count(self, status: VarianceStatus) -> int:
        return dict(self.by_status)[VarianceStatus(status)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_variances": self.total_variances,
            "explained_count": self.explained_count,
            "explained_percent": self.explained_percent,
            "overdue_count": self.overdue_count,
            "by_status": {s.value: n for s, n in self.by_status},
            "by_root_cause": [
                {"root_cause": b.root_cause.value, "count": b.count, "total_variance": b.total_variance}
                for b in self.by_root_cause
            ],
            "top_overspends": [str(r.record_id) for r in self.top_overspends],
            "top_savings": [str(r.record_id) for r in self.top_savings],
            "annual_budget": self.annual_budget,
            "ytd_actual": self.ytd_actual,
            "months_elapsed": self.months_elapsed,
            "run_rate_projection": self.run_rate_projection,
            "projected_variance": self.projected_variance,
        }


def is_overdue(record: VarianceRecord, as_of: date) -> bool:
    return (
        record.due_date is not None
        and record.due_date < as_of
        and not record.status.is_resolved
    )


def top_overspends(records: Iterable[VarianceRecord], count: int = TOP_COUNT) -> tuple[VarianceRecord, ...]:
    over = [r for r in records if r.dollar_variance > 0]
    over.sort(key=lambda r: r.dollar_variance, reverse=True)
    return tuple(over[:count])


def top_savings(records: Iterable[VarianceRecord], count: int = TOP_COUNT) -> tuple[VarianceRecord, ...]:
    under = [r for r in records if r.dollar_variance < 0]
    under.sort(key=lambda r: r.dollar_variance)
    return tuple(under[:count])


def run_rate_projection(ytd_actual: float, months_elapsed: int) -> float:
    if months_elapsed <= 0:
        return 0.0
    return ytd_actual / months_elapsed * MONTHS_PER_YEAR


@traced_engine("kpi", "1.0", fingerprint_fields=("as_of", "months_elapsed"))
def calculate_kpis(
    records: Iterable[VarianceRecord],
    as_of: date,
    months_elapsed: int | None = None,
) -> KpiReport:
    """
    Compute the KPI report.

    Args:
        records: classified records (usually the whole dataset).
        as_of: today's date, for overdue checks.
        months_elapsed: months of actuals in the year so far.  Defaults to
            ``as_of.month``.
    """
    records = list(records)
    months = as_of.month if months_elapsed is None else months_elapsed
    total = len(records)

    explained = sum(1 for r in records if r.status.is_resolved)
    overdue = sum(1 for r in records if is_overdue(r, as_of))

    status_counts = {s: 0 for s in VarianceStatus}
    cause_counts = {c: 0 for c in RootCause}
    cause_totals = {c: 0.0 for c in RootCause}
    for record in records:
        status_counts[record.status] += 1
        cause_counts[record.root_cause] += 1
        cause_totals[record.root_cause] += abs(record.dollar_variance)

    annual_budget = sum(r.budget for r in records)
    ytd_actual = sum(r.actual for r in records)
    projection = run_rate_projection(ytd_actual, months)

    report = KpiReport(
        total_variances=total,
        explained_count=explained,
        explained_percent=(explained / total * 100) if total else 0.0,
        overdue_count=overdue,
        by_status=tuple(status_counts.items()),
        by_root_cause=tuple(
            RootCauseBreakdown(root_cause=c, count=cause_counts[c], total_variance=cause_totals[c])
            for c in RootCause
            if cause_counts[c] > 0
        ),
        top_overspends=top_overspends(records),
        top_savings=top_savings(records),
        annual_budget=float(annual_budget),
        ytd_actual=float(ytd_actual),
        months_elapsed=months,
        run_rate_projection=projection,
        projected_variance=projection - annual_budget,
    )

    logger.info(
        "kpis_calculated",
        extra={
            "total_variances": total,
            "explained_count": explained,
            "overdue_count": overdue,
            "months_elapsed": months,
            "run_rate_projection": projection,
        },
    )
    return report
