"""Tests for the filter engine and facet values."""

from variance_engines.filtering import FilterSpec, facet_values, filter_records, matches
from variance_kernel.domain.values import VarianceStatus


class TestFilterSpec:
    def test_default_matches_everything(self, sample_records):
        assert filter_records(sample_records, FilterSpec()) == sample_records
        assert not FilterSpec().is_active

    def test_collections_coerced(self):
        spec = FilterSpec(cost_centers=["A"], statuses=["new"])
        assert spec.cost_centers == frozenset({"A"})
        assert spec.statuses == frozenset({VarianceStatus.NEW})
        assert spec.is_active

    def test_to_dict_sorted(self):
        spec = FilterSpec(periods={"2024-02", "2024-01"}, statuses={"closed", "new"})
        data = spec.to_dict()
        assert data["periods"] == ["2024-01", "2024-02"]
        assert data["statuses"] == ["closed", "new"]


class TestPredicates:
    def test_search_is_case_insensitive_across_fields(self, record_factory):
        records = [
            record_factory("Travel", owner="Lisa Park"),
            record_factory("Events", explanation="Delayed conference"),
            record_factory("Audit", cost_center="4001 - Finance"),
        ]
        assert [r.category for r in filter_records(records, FilterSpec(search="PARK"))] == ["Travel"]
        assert [r.category for r in filter_records(records, FilterSpec(search="conference"))] == ["Events"]
        assert [r.category for r in filter_records(records, FilterSpec(search="finance"))] == ["Audit"]

    def test_facets_combine_with_and(self, sample_records):
        spec = FilterSpec(cost_centers={"1002 - Sales"}, periods={"2024-02"})
        result = filter_records(sample_records, spec)
        assert [r.category for r in result] == ["Travel", "Commissions"]

    def test_values_within_facet_combine_with_or(self, sample_records):
        spec = FilterSpec(gl_accounts={"51010 - Events", "52010 - Commissions"})
        assert {r.category for r in filter_records(sample_records, spec)} == {"Events", "Commissions"}

    def test_records_without_dimension_pass_facet(self, record_factory):
        untagged = record_factory("Untagged", cost_center=None)
        blank = record_factory("Blank", cost_center="")
        other = record_factory("Other", cost_center="1001")
        spec = FilterSpec(cost_centers={"2001"})
        assert matches(untagged, spec)
        assert matches(blank, spec)
        assert not matches(other, spec)

    def test_status_and_owner(self, record_factory):
        records = [
            record_factory("A", status=VarianceStatus.CLOSED, owner="Mike Johnson"),
            record_factory("B", status=VarianceStatus.NEW, owner="Mike Johnson"),
            record_factory("C", status=VarianceStatus.CLOSED, owner=""),
        ]
        spec = FilterSpec(statuses={VarianceStatus.CLOSED}, owners={"Mike Johnson"})
        assert [r.category for r in filter_records(records, spec)] == ["A"]

    def test_significant_and_starred_toggles(self, record_factory):
        records = [
            record_factory("A", is_significant=True, is_starred=True),
            record_factory("B", is_significant=True),
            record_factory("C", is_starred=True),
        ]
        assert len(filter_records(records, FilterSpec(show_only_significant=True))) == 2
        assert len(filter_records(records, FilterSpec(show_only_starred=True))) == 2
        both = FilterSpec(show_only_significant=True, show_only_starred=True)
        assert [r.category for r in filter_records(records, both)] == ["A"]

    def test_preserves_order(self, sample_records):
        result = filter_records(sample_records, FilterSpec(search="a"))
        positions = [sample_records.index(r) for r in result]
        assert positions == sorted(positions)


class TestFacetValues:
    def test_distinct_sorted_non_blank(self, sample_records, record_factory):
        records = sample_records + [record_factory("X", cost_center="", period=None, owner="Zoe")]
        facets = facet_values(records)
        assert facets.cost_centers == ("1001 - Marketing", "1002 - Sales")
        assert facets.periods == ("2024-01", "2024-02")
        assert facets.owners == ("Zoe",)
        assert len(facets.gl_accounts) == 4
