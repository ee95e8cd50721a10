"""Tests for numeric parsing and display formatting."""

from __future__ import annotations

import pytest

from oichain.formatting import (
    format_currency,
    format_lakhs,
    format_signed_percent,
    parse_lenient_float,
    scale_to_human_unit,
)


class TestParseLenientFloat:
    """Tests for parse_lenient_float."""

    def test_comma_grouped_string(self):
        """Thousands separators are stripped."""
        assert parse_lenient_float("1,234.50", 0) == 1234.50

    def test_empty_string_returns_default(self):
        assert parse_lenient_float("", 7) == 7

    def test_whitespace_only_returns_default(self):
        assert parse_lenient_float("   ", 3.5) == 3.5

    def test_none_returns_default(self):
        assert parse_lenient_float(None, -1) == -1

    def test_none_default_for_missing(self):
        """A None default signals 'absent'."""
        assert parse_lenient_float("abc", None) is None

    def test_numbers_pass_through(self):
        assert parse_lenient_float(42, 0) == 42.0
        assert parse_lenient_float(0.25, 1) == 0.25

    def test_zero_is_not_missing(self):
        """A genuine zero is returned, not the default."""
        assert parse_lenient_float("0", 9) == 0.0
        assert parse_lenient_float(0, 9) == 0.0

    def test_negative_with_commas(self):
        assert parse_lenient_float(" -12,500 ", 0) == -12500.0

    def test_unparseable_types(self):
        """Lists, dicts and booleans never raise."""
        assert parse_lenient_float([1, 2], 5) == 5
        assert parse_lenient_float({"a": 1}, 5) == 5
        assert parse_lenient_float(True, 5) == 5

    def test_nan_and_inf_rejected(self):
        assert parse_lenient_float("nan", 0) == 0
        assert parse_lenient_float(float("inf"), 1) == 1


class TestScaleToHumanUnit:
    """Tests for lakh/crore scaling."""

    def test_zero(self):
        assert scale_to_human_unit(0) == "0"

    def test_crore(self):
        assert scale_to_human_unit(12345678) == "1.23Cr"

    def test_negative_lakh(self):
        assert scale_to_human_unit(-150000) == "-1.50L"

    def test_exact_boundaries(self):
        assert scale_to_human_unit(100000) == "1.00L"
        assert scale_to_human_unit(10000000) == "1.00Cr"

    def test_small_values_grouped(self):
        assert scale_to_human_unit(99999) == "99,999"
        assert scale_to_human_unit(-4321) == "-4,321"

    def test_sign_outside_number(self):
        """Sign is a leading '-' before the scaled magnitude."""
        assert scale_to_human_unit(-25000000) == "-2.50Cr"


class TestFormatSignedPercent:
    """Tests for signed percentage formatting."""

    def test_positive(self):
        assert format_signed_percent(1.234) == {"text": "+1.23", "sign": "positive"}

    def test_negative(self):
        assert format_signed_percent(-0.5) == {"text": "-0.50", "sign": "negative"}

    def test_zero_has_plus(self):
        assert format_signed_percent(0) == {"text": "+0.00", "sign": "zero"}

    def test_negative_zero(self):
        assert format_signed_percent(-0.0)["text"] == "+0.00"

    def test_string_input(self):
        assert format_signed_percent("2.5")["text"] == "+2.50"


class TestOtherFormats:

    def test_currency(self):
        assert format_currency(23800) == "₹23800.00"

    def test_lakhs(self):
        assert format_lakhs(250000) == pytest.approx(2.5)
