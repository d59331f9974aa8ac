"""
Tests for header labels and numeric coercion.
"""

import math

import numpy as np

from inference.normalizer import (
    display_text,
    is_empty_value,
    metric_label,
    parse_number,
    prettify,
    to_finite,
)


class TestPrettify:

    def test_underscores_become_spaces(self):
        assert prettify("total_marks") == "Total Marks"

    def test_camel_case_boundary(self):
        assert prettify("studentName") == "Student Name"

    def test_whitespace_collapsed_and_trimmed(self):
        assert prettify("  physics__lab  ") == "Physics Lab"

    def test_digits_and_parentheses_kept(self):
        assert prettify("Physics_1") == "Physics 1"
        assert prettify("CSE 101 (3)") == "CSE 101 (3)"

    def test_empty(self):
        assert prettify("") == ""

    def test_non_string_input(self):
        assert prettify(42) == "42"


class TestMetricLabel:

    def test_cgpa_variants(self):
        assert metric_label("CGPA") == "CGPA"
        assert metric_label("cg") == "CGPA"
        assert metric_label("Final CG") == "CGPA"
        assert metric_label("cgpa_sem1") == "CGPA"

    def test_other_keys_prettified(self):
        assert metric_label("total_marks") == "Total Marks"
        assert metric_label("SGPA") == "SGPA"


class TestParseNumber:

    def test_numbers_pass_through(self):
        assert parse_number(5) == 5.0
        assert parse_number(3.67) == 3.67
        assert parse_number(np.int64(7)) == 7.0

    def test_numeric_strings(self):
        assert parse_number("78") == 78.0
        assert parse_number(" 3.5 ") == 3.5
        assert parse_number(".5") == 0.5
        assert parse_number("-2") == -2.0
        assert parse_number("1e3") == 1000.0

    def test_leading_number_prefix(self):
        assert parse_number("78 (absent)") == 78.0

    def test_unparseable(self):
        assert parse_number("N/A") is None
        assert parse_number("") is None
        assert parse_number("(3)") is None
        assert parse_number(None) is None

    def test_only_ascii_digits(self):
        assert parse_number("\u0663") is None
        assert parse_number("\uff18\uff10") is None
        assert parse_number("\u00a078") == 78.0

    def test_booleans_are_not_numbers(self):
        assert parse_number(True) is None
        assert parse_number(False) is None

    def test_infinity(self):
        assert parse_number("Infinity") == math.inf
        assert parse_number("-Infinity") == -math.inf
        assert to_finite("Infinity") is None

    def test_to_finite_drops_nan(self):
        assert to_finite(float("nan")) is None
        assert to_finite("12.5") == 12.5


class TestCellHelpers:

    def test_is_empty_value(self):
        assert is_empty_value(None)
        assert is_empty_value("")
        assert not is_empty_value(" ")
        assert not is_empty_value(0)

    def test_display_text(self):
        assert display_text(78.0) == "78"
        assert display_text(3.67) == "3.67"
        assert display_text(None) == ""
        assert display_text("Alice") == "Alice"
