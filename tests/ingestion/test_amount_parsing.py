"""Tests for free-form amount normalization (parse_amount)."""

from decimal import Decimal

import pytest

from variance_ingestion.parsing.numbers import parse_amount


class TestNumericInputs:
    """Numbers pass through as floats."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (1200, 1200.0),
            (-45.5, -45.5),
            (0, 0.0),
            (Decimal("19.99"), 19.99),
        ],
    )
    def test_numbers_unchanged(self, value, expected):
        assert parse_amount(value) == expected

    def test_bool_is_not_a_number(self):
        assert parse_amount(True) == 0.0

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_becomes_zero(self, value):
        assert parse_amount(value) == 0.0


class TestStringInputs:
    """Currency text from spreadsheets and pasted reports."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("$1,234.50", 1234.5),
            ("1234", 1234.0),
            ("€300", 300.0),
            ("£ 1,000", 1000.0),
            ("-500", -500.0),
            ("$-500", -500.0),
            ("12.5 USD", 12.5),
            ("  42  ", 42.0),
            (".5", 0.5),
            ("1e3", 1000.0),
        ],
    )
    def test_parses_leading_number(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("(1,200)", -1200.0),
            ("($450.25)", -450.25),
            ("(-75)", -75.0),
            ("$(1,234)", -1234.0),
        ],
    )
    def test_parentheses_mean_negative(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", "N/A", "$", "--5"])
    def test_unparseable_becomes_zero(self, text):
        assert parse_amount(text) == 0.0


class TestOtherInputs:
    @pytest.mark.parametrize("value", [None, [], {}, object()])
    def test_non_string_non_number_is_zero(self, value):
        assert parse_amount(value) == 0.0
