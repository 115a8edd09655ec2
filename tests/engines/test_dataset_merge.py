"""Tests for combining datasets: stacking and budget/actual pairing."""

import pytest

from variance_engines.merge import MergeStrategy, join_key, merge_datasets
from variance_kernel.domain.records import ParsedDataset
from variance_kernel.domain.values import VarianceThresholds
from variance_kernel.exceptions import MergeError


def _dataset(records, columns=("Category", "Budget", "Actual")):
    return ParsedDataset(records=records, columns=columns)


class TestJoinKey:
    def test_blank_parts_omitted(self, record_factory):
        full = record_factory("Travel", cost_center="Sales", gl_account="52000", period="2024-01")
        partial = record_factory("Travel", cost_center="", gl_account=None, period="2024-01")
        assert join_key(full) == ("Travel", "Sales", "52000", "2024-01")
        assert join_key(partial) == ("Travel", "2024-01")


class TestStack:
    def test_concatenates_with_fresh_ids(self, record_factory):
        first = _dataset([record_factory("A"), record_factory("B")], ("Category", "Budget", "Actual"))
        second = _dataset([record_factory("C")], ("Category", "Period", "Budget", "Actual"))
        merged = merge_datasets([first, second], strategy=MergeStrategy.STACK)

        assert [r.category for r in merged] == ["A", "B", "C"]
        old_ids = {r.record_id for r in first} | {r.record_id for r in second}
        assert not old_ids & {r.record_id for r in merged}
        assert merged.columns == ("Category", "Budget", "Actual", "Period")

    def test_workflow_fields_carried(self, record_factory):
        first = _dataset([record_factory("A", owner="Sarah Chen", is_starred=True)])
        second = _dataset([record_factory("B")])
        merged = merge_datasets([first, second])
        assert merged.records[0].owner == "Sarah Chen"
        assert merged.records[0].is_starred

    def test_single_dataset_returned_unchanged(self, sample_dataset):
        assert merge_datasets([sample_dataset]) is sample_dataset
        assert merge_datasets([sample_dataset], strategy="budget_actual") is sample_dataset


class TestBudgetActualPairing:
    def test_matched_records_take_actual(self, record_factory):
        budget = _dataset([
            record_factory("Travel", 1000.0, 0.0, cost_center="Sales"),
            record_factory("Events", 500.0, 0.0, cost_center="Marketing"),
        ])
        actual = _dataset([record_factory("Travel", 0.0, 1300.0, cost_center="Sales")])

        merged = merge_datasets(
            [budget, actual],
            strategy="budget_actual",
            thresholds=VarianceThresholds(percent=10, dollar=50_000),
        )
        travel, events = merged.records
        assert travel.budget == 1000.0
        assert travel.actual == 1300.0
        assert travel.is_significant
        # Unmatched budget lines get zero variance
        assert events.actual == 500.0
        assert events.dollar_variance == 0.0
        assert not events.is_significant

    def test_one_record_per_budget_line(self, record_factory):
        budget = _dataset([record_factory("A", 10.0, 0.0)])
        actual = _dataset([record_factory("A", 0.0, 12.0), record_factory("Z", 0.0, 99.0)])
        merged = merge_datasets([budget, actual], strategy=MergeStrategy.BUDGET_ACTUAL)
        assert len(merged) == 1
        assert merged.columns == budget.columns

    def test_last_duplicate_wins(self, record_factory):
        budget = _dataset([record_factory("A", 10.0, 0.0)])
        actual = _dataset([record_factory("A", 0.0, 11.0), record_factory("A", 0.0, 15.0)])
        merged = merge_datasets([budget, actual], strategy="budget_actual")
        assert merged.records[0].actual == 15.0

    def test_keys_must_match_on_every_present_part(self, record_factory):
        budget = _dataset([record_factory("A", 10.0, 0.0, period="2024-01")])
        actual = _dataset([record_factory("A", 0.0, 20.0, period="2024-02")])
        merged = merge_datasets([budget, actual], strategy="budget_actual")
        assert merged.records[0].actual == 10.0

    def test_fresh_ids(self, record_factory):
        budget = _dataset([record_factory("A", 10.0, 0.0)])
        actual = _dataset([record_factory("A", 0.0, 12.0)])
        merged = merge_datasets([budget, actual], strategy="budget_actual")
        assert merged.records[0].record_id != budget.records[0].record_id

    def test_merge_logged(self, record_factory, captured_logs):
        budget = _dataset([record_factory("A", 10.0, 0.0), record_factory("B", 5.0, 0.0)])
        actual = _dataset([record_factory("A", 0.0, 12.0)])
        merge_datasets([budget, actual], strategy="budget_actual")
        completed = [r for r in captured_logs() if r["message"] == "merge_completed"]
        assert completed[0]["matched_count"] == 1
        assert completed[0]["unmatched_count"] == 1


class TestMergeErrors:
    def test_no_datasets(self):
        with pytest.raises(MergeError) as exc_info:
            merge_datasets([])
        assert exc_info.value.code == "MERGE_ERROR"
        assert exc_info.value.dataset_count == 0

    def test_pairing_needs_exactly_two(self, sample_dataset):
        with pytest.raises(MergeError, match="exactly two"):
            merge_datasets([sample_dataset] * 3, strategy="budget_actual")

    def test_unknown_strategy(self, sample_dataset):
        with pytest.raises(ValueError):
            merge_datasets([sample_dataset, sample_dataset], strategy="interleave")
