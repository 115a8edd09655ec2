"""Tests for building VarianceRecords and ParsedDatasets from mapped rows."""

from uuid import UUID

import pytest

from variance_ingestion.domain.types import ColumnMapping, TabularData
from variance_ingestion.mapping.builder import build_dataset, build_record
from variance_kernel.domain.values import VarianceThresholds

FULL_MAPPING = ColumnMapping(
    category="Category",
    budget="Budget",
    actual="Actual",
    cost_center="Cost Center",
    gl_account="GL",
    period="Period",
)
CORE_MAPPING = ColumnMapping(category="Category", budget="Budget", actual="Actual")


class TestBuildRecord:
    def test_amounts_and_variance(self, thresholds):
        record = build_record(
            {"Category": "Travel", "Budget": "$1,000", "Actual": "(200)"},
            CORE_MAPPING,
            thresholds,
            row_number=1,
        )
        assert record.budget == 1000.0
        assert record.actual == -200.0
        assert record.dollar_variance == -1200.0
        assert record.percent_variance == pytest.approx(-120.0)
        assert record.is_significant

    def test_zero_budget_has_zero_percent(self, thresholds):
        record = build_record(
            {"Category": "New line", "Budget": "0", "Actual": "500"},
            CORE_MAPPING,
            thresholds,
            row_number=1,
        )
        assert record.percent_variance == 0.0
        assert not record.is_significant

    def test_blank_category_named_by_row(self, thresholds):
        record = build_record(
            {"Category": "", "Budget": "1", "Actual": "1"}, CORE_MAPPING, thresholds, row_number=7
        )
        assert record.category == "Row 7"

    def test_unmapped_dimensions_are_none(self, thresholds):
        record = build_record(
            {"Category": "Travel", "Budget": 1, "Actual": 1}, CORE_MAPPING, thresholds, row_number=1
        )
        assert record.cost_center is None
        assert record.gl_account is None
        assert record.period is None

    def test_mapped_blank_dimension_is_empty_string(self, thresholds):
        row = {
            "Category": "Travel",
            "Budget": 1,
            "Actual": 1,
            "Cost Center": "",
            "GL": 52000.0,
            "Period": "2024-01",
        }
        record = build_record(row, FULL_MAPPING, thresholds, row_number=1)
        assert record.cost_center == ""
        assert record.gl_account == "52000"
        assert record.period == "2024-01"

    def test_workflow_defaults(self, thresholds):
        record = build_record(
            {"Category": "Travel", "Budget": 1, "Actual": 1}, CORE_MAPPING, thresholds, row_number=1
        )
        assert record.status.value == "new"
        assert record.root_cause.value == ""
        assert record.owner == ""
        assert record.comments == ()
        assert not record.is_starred

    def test_fixed_record_id(self, thresholds):
        rid = UUID("12345678-1234-5678-1234-567812345678")
        record = build_record(
            {"Category": "T", "Budget": 1, "Actual": 1}, CORE_MAPPING, thresholds, 1, record_id=rid
        )
        assert record.record_id == rid


class TestBuildDataset:
    def test_one_record_per_row_with_columns(self, thresholds):
        tabular = TabularData(
            headers=("Category", "Budget", "Actual"),
            rows=(
                {"Category": "A", "Budget": "100", "Actual": "150"},
                {"Category": "", "Budget": "100", "Actual": "100"},
            ),
        )
        dataset = build_dataset(tabular, CORE_MAPPING, thresholds)
        assert len(dataset) == 2
        assert dataset.columns == ("Category", "Budget", "Actual")
        assert [r.category for r in dataset] == ["A", "Row 2"]
        assert not dataset.has_cost_center
        assert dataset.periods == ()

    def test_record_ids_unique(self, thresholds):
        tabular = TabularData(
            headers=("Category", "Budget", "Actual"),
            rows=tuple({"Category": "X", "Budget": "1", "Actual": "1"} for _ in range(20)),
        )
        dataset = build_dataset(tabular, CORE_MAPPING, thresholds)
        assert len({r.record_id for r in dataset}) == 20

    def test_thresholds_drive_initial_flag(self):
        tabular = TabularData(
            headers=("Category", "Budget", "Actual"),
            rows=({"Category": "A", "Budget": "100", "Actual": "105"},),
        )
        loose = build_dataset(tabular, CORE_MAPPING, VarianceThresholds(10, 50000))
        tight = build_dataset(tabular, CORE_MAPPING, VarianceThresholds(1, 50000))
        assert not loose.records[0].is_significant
        assert tight.records[0].is_significant

    def test_presence_flags_and_periods(self, thresholds):
        tabular = TabularData(
            headers=("Category", "Budget", "Actual", "Cost Center", "GL", "Period"),
            rows=(
                {"Category": "A", "Budget": 1, "Actual": 1, "Cost Center": "", "GL": "", "Period": "2024-02"},
                {"Category": "B", "Budget": 1, "Actual": 1, "Cost Center": "", "GL": "", "Period": "2024-01"},
                {"Category": "C", "Budget": 1, "Actual": 1, "Cost Center": "", "GL": "", "Period": ""},
            ),
        )
        dataset = build_dataset(tabular, FULL_MAPPING, thresholds)
        # Mapped columns count as present even when every cell is blank
        assert dataset.has_cost_center
        assert dataset.has_gl_account
        assert dataset.periods == ("2024-01", "2024-02")
