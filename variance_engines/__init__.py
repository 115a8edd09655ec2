"""
Module: variance_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines: classification, aggregation, filtering, merging,
    KPIs and summaries.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import variance_kernel (and sibling engine modules).
    MUST NOT import variance_ingestion or variance_services.

Invariants enforced:
    - Purity: engines never read the clock.  Dates are passed in.
    - Determinism: identical inputs produce identical outputs (fresh record
      ids in merges excepted).

Usage:
    from variance_engines import classify, group_records, merge_datasets
"""

from variance_engines.aggregation import UNASSIGNED, GroupedRollup, group_records
from variance_engines.classifier import classify, classify_record, classify_records
from variance_engines.filtering import (
    FacetValues,
    FilterSpec,
    facet_values,
    filter_records,
    matches,
)
from variance_engines.kpi import KpiReport, RootCauseBreakdown, calculate_kpis, is_overdue
from variance_engines.merge import MergeStrategy, join_key, merge_datasets
from variance_engines.summary import (
    Insight,
    InsightKind,
    TopVariances,
    VarianceSummary,
    build_insights,
    calculate_summary,
    top_variances,
)

__all__ = [
    "UNASSIGNED",
    "FacetValues",
    "FilterSpec",
    "GroupedRollup",
    "Insight",
    "InsightKind",
    "KpiReport",
    "MergeStrategy",
    "RootCauseBreakdown",
    "TopVariances",
    "VarianceSummary",
    "build_insights",
    "calculate_kpis",
    "calculate_summary",
    "classify",
    "classify_record",
    "classify_records",
    "facet_values",
    "filter_records",
    "group_records",
    "is_overdue",
    "join_key",
    "matches",
    "merge_datasets",
    "top_variances",
]
