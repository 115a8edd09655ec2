"""
variance_engines.merge -- Combine several parsed datasets into one.

Responsibility:
    Two strategies:

    STACK          concatenate every dataset's records (each gets a fresh id)
                   and union the headers in first-seen order.
    BUDGET_ACTUAL  exactly two datasets, budget source first: every budget
                   record takes the ``actual`` of the actual-source record
                   with the same (category, cost center, GL account, period)
                   key, or its own budget when nothing matches.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  This is the single point
    where independently ingested datasets meet; callers hand it only fully
    ingested datasets.

Invariants enforced:
    - Stack: ``len(result) == sum(len(d) for d in datasets)``.
    - Pairing: result has exactly one record per budget record; a miss means
      zero variance; on duplicate actual-source keys the last record wins.
    - Presence flags and periods of the result derive from its records.
    - A single dataset is returned unchanged.

Failure modes:
    - MergeError: no datasets, or pairing with a count other than two.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence
from uuid import uuid4

from variance_kernel.domain.records import ParsedDataset, VarianceRecord, has_value
from variance_kernel.domain.values import VarianceThresholds
from variance_kernel.exceptions import MergeError
from variance_kernel.logging_config import get_logger
from variance_engines.tracer import traced_engine

logger = get_logger("engines.merge")


class MergeStrategy(str, Enum):
    """How multiple datasets are combined."""

    STACK = "stack"  # Append all rows
    BUDGET_ACTUAL = "budget_actual"  # Budget file + actuals file


JoinKey = tuple[str, ...]


def join_key(record: VarianceRecord) -> JoinKey:
    """(category, cost center, GL account, period) with blank parts omitted."""
    parts = (record.category, record.cost_center, record.gl_account, record.period)
    return tuple(p for p in parts if has_value(p))


def _union_columns(datasets: Sequence[ParsedDataset]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for dataset in datasets:
        for column in dataset.columns:
            seen.setdefault(column, None)
    return tuple(seen)


def stack_datasets(datasets: Sequence[ParsedDataset]) -> ParsedDataset:
    records = tuple(
        record.with_changes(record_id=uuid4())
        for dataset in datasets
        for record in dataset.records
    )
    return ParsedDataset(records=records, columns=_union_columns(datasets))


def pair_budget_actual(
    budget: ParsedDataset,
    actual: ParsedDataset,
    thresholds: VarianceThresholds,
) -> tuple[ParsedDataset, int]:
    """Return the merged dataset and how many budget records found a match."""
    # Later records overwrite earlier ones: last duplicate wins
    actual_by_key = {join_key(r): r.actual for r in actual.records}

    merged: list[VarianceRecord] = []
    matched = 0
    for record in budget.records:
        key = join_key(record)
        if key in actual_by_key:
            new_actual = actual_by_key[key]
            matched += 1
        else:
            new_actual = record.budget
        paired = record.with_changes(record_id=uuid4(), actual=new_actual)
        merged.append(
            paired.with_changes(
                is_significant=thresholds.is_significant(
                    paired.dollar_variance, paired.percent_variance
                )
            )
        )
    return ParsedDataset(records=tuple(merged), columns=budget.columns), matched


@traced_engine("merge", "1.0", fingerprint_fields=("strategy",))
def merge_datasets(
    datasets: Sequence[ParsedDataset],
    strategy: MergeStrategy | str = MergeStrategy.STACK,
    thresholds: VarianceThresholds | None = None,
) -> ParsedDataset:
    """
    Merge datasets with ``strategy``.

    Args:
        datasets: successfully ingested datasets, in source order.  For
            BUDGET_ACTUAL the first is the budget source.
        strategy: STACK or BUDGET_ACTUAL.
        thresholds: used to re-flag paired records.  Defaults to 10% / $50,000.

    Raises:
        MergeError: nothing to merge, or BUDGET_ACTUAL without exactly two.
    """
    strategy = MergeStrategy(strategy)
    thresholds = thresholds or VarianceThresholds()
    datasets = list(datasets)

    if not datasets:
        logger.warning("merge_rejected_no_datasets", extra={"strategy": strategy.value})
        raise MergeError("No datasets to merge", dataset_count=0)

    if len(datasets) == 1:
        return datasets[0]

    if strategy is MergeStrategy.BUDGET_ACTUAL:
        if len(datasets) != 2:
            logger.warning(
                "merge_rejected_pairing_count",
                extra={"dataset_count": len(datasets)},
            )
            raise MergeError(
                "Budget + actual pairing needs exactly two datasets "
                f"(budget first, actuals second), got {len(datasets)}",
                dataset_count=len(datasets),
            )
        result, matched = pair_budget_actual(datasets[0], datasets[1], thresholds)
        logger.info(
            "merge_completed",
            extra={
                "strategy": strategy.value,
                "dataset_count": 2,
                "record_count": len(result),
                "matched_count": matched,
                "unmatched_count": len(result) - matched,
            },
        )
        return result

    result = stack_datasets(datasets)
    logger.info(
        "merge_completed",
        extra={
            "strategy": strategy.value,
            "dataset_count": len(datasets),
            "record_count": len(result),
        },
    )
    return result
