"""Tests for grouping records into rollups."""

import pytest

from variance_engines.aggregation import UNASSIGNED, group_records
from variance_kernel.domain.values import GroupBy


class TestGroupRecords:
    def test_by_cost_center_sorted_by_absolute_variance(self, sample_records):
        groups = group_records(sample_records, GroupBy.COST_CENTER)
        assert [g.key for g in groups] == ["1002 - Sales", "1001 - Marketing"]

        sales = groups[0]
        assert sales.record_count == 3
        assert sales.total_budget == 210_000.0
        assert sales.total_actual == 269_600.0
        assert sales.total_dollar_variance == 59_600.0
        assert sales.total_percent_variance == pytest.approx(59_600 / 210_000 * 100)

    def test_by_gl_account(self, sample_records):
        groups = group_records(sample_records, "gl_account")
        assert [g.key for g in groups] == [
            "52010 - Commissions",
            "51000 - Advertising",
            "51010 - Events",
            "52000 - Travel",
        ]
        assert groups[1].total_dollar_variance == 2_700.0

    def test_members_keep_input_order(self, sample_records):
        groups = group_records(sample_records, GroupBy.COST_CENTER)
        marketing = groups[1]
        assert list(marketing.records) == [r for r in sample_records if r.cost_center == "1001 - Marketing"]

    def test_missing_and_blank_values_share_unassigned_group(self, record_factory):
        records = [
            record_factory("A", 100.0, 150.0, cost_center=None),
            record_factory("B", 100.0, 120.0, cost_center=""),
            record_factory("C", 100.0, 100.0, cost_center="1001"),
        ]
        groups = group_records(records, GroupBy.COST_CENTER)
        assert groups[0].key == UNASSIGNED
        assert groups[0].record_count == 2

    def test_equal_magnitudes_keep_first_seen_order(self, record_factory):
        records = [
            record_factory("A", 100.0, 200.0, cost_center="Second"),
            record_factory("B", 100.0, 0.0, cost_center="First"),
        ]
        groups = group_records(records, GroupBy.COST_CENTER)
        assert [g.key for g in groups] == ["Second", "First"]

    def test_offsetting_variances_cancel_within_group(self, record_factory):
        records = [
            record_factory("Travel", 100.0, 150.0, cost_center="A"),
            record_factory("Events", 100.0, 50.0, cost_center="A"),
            record_factory("Cloud", 50.0, 50.0, cost_center="B"),
        ]
        a, b = group_records(records, GroupBy.COST_CENTER)

        assert a.key == "A"
        assert (a.total_budget, a.total_actual, a.total_dollar_variance) == (200.0, 200.0, 0.0)
        assert a.record_count == 2
        assert b.key == "B"
        assert b.total_dollar_variance == 0.0

    def test_zero_budget_group_has_zero_percent(self, record_factory):
        groups = group_records([record_factory("A", 0.0, 10.0, cost_center="X")], GroupBy.COST_CENTER)
        assert groups[0].total_percent_variance == 0.0

    def test_significant_count(self, record_factory):
        records = [
            record_factory("A", 1.0, 1.0, cost_center="X", is_significant=True),
            record_factory("B", 1.0, 1.0, cost_center="X"),
        ]
        assert group_records(records, GroupBy.COST_CENTER)[0].significant_count == 1

    def test_empty_input(self):
        assert group_records([], GroupBy.GL_ACCOUNT) == []

    def test_none_is_not_a_grouping(self, sample_records):
        with pytest.raises(ValueError, match="Cannot group by"):
            group_records(sample_records, GroupBy.NONE)

    def test_to_dict(self, sample_records):
        data = group_records(sample_records, GroupBy.COST_CENTER)[0].to_dict()
        assert data["key"] == "1002 - Sales"
        assert len(data["record_ids"]) == 3
