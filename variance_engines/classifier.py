"""
variance_engines.classifier -- Threshold-based significance classification.

Responsibility:
    Recompute ``is_significant`` for every record from the current
    thresholds.  Cheap enough to run on every threshold change: one pass,
    no caching.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only ``is_significant`` changes; every other field is carried over.
    - Idempotent: classifying twice with the same thresholds equals
      classifying once.
    - OR rule: ``abs(percent) > percent_threshold`` OR
      ``abs(dollars) > dollar_threshold``.  A tiny-dollar swing on a
      near-zero budget will therefore always flag.
"""

from __future__ import annotations

from typing import Iterable

from variance_kernel.domain.records import ParsedDataset, VarianceRecord
from variance_kernel.domain.values import VarianceThresholds
from variance_kernel.logging_config import get_logger
from variance_engines.tracer import traced_engine

logger = get_logger("engines.classifier")


def classify_record(record: VarianceRecord, thresholds: VarianceThresholds) -> VarianceRecord:
    significant = thresholds.is_significant(record.dollar_variance, record.percent_variance)
    if significant == record.is_significant:
        return record
    return record.with_changes(is_significant=significant)


def classify_records(
    records: Iterable[VarianceRecord],
    thresholds: VarianceThresholds,
) -> tuple[VarianceRecord, ...]:
    return tuple(classify_record(r, thresholds) for r in records)


@traced_engine("classifier", "1.0", fingerprint_fields=("thresholds",))
def classify(dataset: ParsedDataset, thresholds: VarianceThresholds) -> ParsedDataset:
    """Return a new dataset with significance recomputed for every record."""
    records = classify_records(dataset.records, thresholds)
    significant = sum(1 for r in records if r.is_significant)
    logger.info(
        "thresholds_applied",
        extra={
            "threshold_percent": thresholds.percent,
            "threshold_dollar": thresholds.dollar,
            "record_count": len(records),
            "significant_count": significant,
        },
    )
    return dataset.with_records(records)
