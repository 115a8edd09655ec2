"""Tests for portfolio totals and executive insights."""

import pytest

from variance_engines.classifier import classify_records
from variance_engines.summary import (
    InsightKind,
    build_insights,
    calculate_summary,
    top_variances,
)


class TestCalculateSummary:
    def test_totals(self, sample_records):
        summary = calculate_summary(sample_records)
        assert summary.record_count == 6
        assert summary.total_budget == 238_000.0
        assert summary.total_actual == 299_300.0
        assert summary.total_dollar_variance == 61_300.0
        assert summary.total_percent_variance == pytest.approx(61_300 / 238_000 * 100)
        assert summary.over_budget_count == 4
        assert summary.under_budget_count == 2
        assert summary.significant_count == 0

    def test_empty(self):
        summary = calculate_summary([])
        assert summary.record_count == 0
        assert summary.total_percent_variance == 0.0


class TestTopVariances:
    def test_count_limits(self, sample_records):
        top = top_variances(sample_records, count=2)
        assert [r.dollar_variance for r in top.overspends] == [60_000.0, 2_500.0]
        assert len(top.savings) == 2


class TestBuildInsights:
    def test_over_budget_portfolio(self, sample_records, thresholds):
        records = classify_records(sample_records, thresholds)
        insights = build_insights(records)
        assert [i.text for i in insights] == [
            "Overall spending is $61,300 (+25.8%) over budget",
            "5 items (83%) flagged as significant variances",
            "Largest overspend: Commissions at +$60,000",
            "Largest savings: Events at -$1,000",
        ]
        assert [i.kind for i in insights] == [
            InsightKind.NEGATIVE,
            InsightKind.WARNING,
            InsightKind.INFO,
            InsightKind.POSITIVE,
        ]

    def test_under_budget_without_significant_items(self, record_factory):
        records = [record_factory("Cloud", 1000.0, 950.0)]
        texts = [i.text for i in build_insights(records)]
        assert texts == [
            "Overall spending is $50 (+5.0%) under budget",
            "No significant variances detected",
            "Largest savings: Cloud at -$50",
        ]

    def test_on_budget(self, record_factory):
        texts = [i.text for i in build_insights([record_factory("Flat", 10.0, 10.0)])]
        assert texts == [
            "Overall spending is $0 (+0.0%) under budget",
            "No significant variances detected",
        ]
