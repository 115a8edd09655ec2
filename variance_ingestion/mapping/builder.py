"""
Variance record builder: row dict + ColumnMapping -> VarianceRecord.

Pure, ZERO I/O. The mapping must already be validated
(``resolver.validate_mapping``); the builder trusts it.
"""

from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID, uuid4

from variance_kernel.domain.records import ParsedDataset, VarianceRecord
from variance_kernel.domain.values import VarianceThresholds, compute_percent_variance
from variance_kernel.logging_config import get_logger
from variance_ingestion.domain.types import ColumnMapping, ColumnRole, TabularData
from variance_ingestion.parsing.numbers import parse_amount

logger = get_logger("ingestion.builder")


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _dimension(row: Mapping[str, Any], mapping: ColumnMapping, role: ColumnRole) -> str | None:
    # Unmapped role -> absent; mapped but blank cell -> ""
    header = mapping.get(role)
    if not header:
        return None
    return _cell_text(row.get(header))


def build_record(
    row: Mapping[str, Any],
    mapping: ColumnMapping,
    thresholds: VarianceThresholds,
    row_number: int,
    record_id: UUID | None = None,
) -> VarianceRecord:
    """
    Build one record from one accepted row.

    Args:
        row: header -> cell value.
        mapping: validated column mapping.
        thresholds: used for the initial significance flag.
        row_number: 1-based position among accepted rows; names the
            category when the source cell is blank ("Row 3").
        record_id: fixed id, mainly for tests. A fresh uuid4 otherwise.
    """
    budget = parse_amount(row.get(mapping.budget))
    actual = parse_amount(row.get(mapping.actual))
    dollar_variance = actual - budget
    percent_variance = compute_percent_variance(dollar_variance, budget)

    category = _cell_text(row.get(mapping.category)) or f"Row {row_number}"

    return VarianceRecord(
        record_id=record_id or uuid4(),
        category=category,
        budget=budget,
        actual=actual,
        cost_center=_dimension(row, mapping, ColumnRole.COST_CENTER),
        gl_account=_dimension(row, mapping, ColumnRole.GL_ACCOUNT),
        period=_dimension(row, mapping, ColumnRole.PERIOD),
        is_significant=thresholds.is_significant(dollar_variance, percent_variance),
    )


def build_dataset(
    tabular: TabularData,
    mapping: ColumnMapping,
    thresholds: VarianceThresholds,
) -> ParsedDataset:
    """One record per accepted row; columns are the original headers."""
    records = tuple(
        build_record(row, mapping, thresholds, row_number=index + 1)
        for index, row in enumerate(tabular.rows)
    )
    dataset = ParsedDataset(records=records, columns=tabular.headers)

    logger.info(
        "dataset_built",
        extra={
            "record_count": len(records),
            "significant_count": sum(1 for r in records if r.is_significant),
            "has_cost_center": dataset.has_cost_center,
            "has_gl_account": dataset.has_gl_account,
            "has_period": dataset.has_period,
        },
    )
    return dataset
