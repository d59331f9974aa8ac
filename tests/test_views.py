"""
Tests for metric selection, row filtering and record detail.
"""

import pytest

from inference.classifier import classify_fields
from inference.models import FieldDescriptor, MetricOption
from inference.views import (
    chart_metric_keys,
    default_metric_key,
    filter_rows,
    find_initial_record,
    metric_options,
    record_detail,
    record_overview,
)


SUBJECTS = [
    FieldDescriptor("Math", "Math"),
    FieldDescriptor("Physics 3", "Physics 3", 3.0),
]


class TestMetricOptions:

    def test_primary_metric_first(self):
        options = metric_options("CGPA", SUBJECTS)

        assert options == [
            MetricOption("CGPA", "CGPA"),
            MetricOption("Math", "Math"),
            MetricOption("Physics 3", "Physics 3"),
        ]

    def test_id_like_primary_skipped(self):
        assert [o.key for o in metric_options("Reg", SUBJECTS)] == ["Math", "Physics 3"]

    def test_no_duplicates(self):
        assert [o.key for o in metric_options("Math", SUBJECTS)] == ["Math", "Physics 3"]

    def test_empty(self):
        assert metric_options(None, []) == []


class TestChartMetrics:

    def test_default_metric_key(self):
        assert default_metric_key("CGPA", SUBJECTS) == "CGPA"
        assert default_metric_key(None, SUBJECTS) == "Math"
        assert default_metric_key(None, []) is None

    def test_active_keys_win(self):
        assert chart_metric_keys(["Math", "Physics 3"], "CGPA") == ["Math", "Physics 3"]

    def test_default_used_when_nothing_active(self):
        assert chart_metric_keys([], "CGPA") == ["CGPA"]
        assert chart_metric_keys([], None) == []


class TestFilterRows:

    def test_search_is_case_insensitive(self, result_rows):
        assert [r["Name"] for r in filter_rows(result_rows, search="ALI")] == ["Alice"]

    def test_search_matches_any_cell(self, result_rows):
        assert [r["Name"] for r in filter_rows(result_rows, search="2024002")] == ["Bob"]

    def test_search_matches_integral_numbers(self, result_rows):
        rows = [dict(result_rows[0], Physics_1=78.0)]
        assert len(filter_rows(rows, search="78")) == 1

    def test_blank_search_keeps_everything(self, result_rows):
        assert filter_rows(result_rows, search="   ") == result_rows

    def test_only_with_metric(self):
        rows = [{"Math": 80}, {"Math": ""}, {"Math": "N/A"}, {"Math": "72"}]
        filtered = filter_rows(rows, only_with_metric=True, metric_key="Math")

        assert filtered == [{"Math": 80}, {"Math": "72"}]

    def test_only_with_metric_needs_a_metric(self):
        rows = [{"Math": ""}]
        assert filter_rows(rows, only_with_metric=True, metric_key=None) == rows

    def test_order_preserved(self, class_rows):
        filtered = filter_rows(class_rows, search="a")

        assert [r["Student Name"] for r in filtered] == ["Asha", "Bilal", "Dara"]


class TestRecordLookup:

    def test_target_id_found(self, result_rows):
        assert find_initial_record(result_rows, "Reg", "2024002")["Name"] == "Bob"

    def test_target_id_trimmed(self):
        rows = [{"Reg": "x"}, {"Reg": " AB12 "}]
        assert find_initial_record(rows, "Reg", "ab12") is rows[1]

    def test_falls_back_to_first_row(self, result_rows):
        assert find_initial_record(result_rows, "Reg", "missing") is result_rows[0]
        assert find_initial_record(result_rows, None, "2024002") is result_rows[0]

    def test_empty_dataset(self):
        assert find_initial_record([], "Reg", "2024002") is None


class TestRecordDetail:

    def test_record_overview(self, result_rows):
        subjects = [FieldDescriptor("Physics_1", "Physics 1", 1.0)]
        assert record_overview(result_rows[0], subjects) == [{"subject": "Physics 1", "score": 78.0}]

    def test_record_overview_skips_non_numeric(self):
        assert record_overview({"Math": "abs"}, SUBJECTS) == []
        assert record_overview(None, SUBJECTS) == []

    def test_record_detail(self, result_rows):
        classification = classify_fields(result_rows)
        detail = record_detail(result_rows[1], classification, {"Physics_1": 78.0})

        assert detail["title"] == "Bob"
        assert detail["identifier"] == {"key": "Reg", "label": "Reg", "value": "2024002"}
        assert detail["primary_metric"] == {"key": "CGPA", "label": "CGPA", "value": 3.67}
        assert detail["extra_fields"] == []
        assert detail["subjects"][0]["ratio"] == pytest.approx(65 / 78)

    def test_extra_fields_capped(self, class_rows):
        classification = classify_fields(class_rows)
        row = dict(class_rows[0], Section="A", Hall="North", Year=1, Batch="24")
        detail = record_detail(row, classification, max_extra_fields=4)

        assert [f["key"] for f in detail["extra_fields"]] == ["Remarks", "Section", "Hall", "Year"]

    def test_non_numeric_mark_kept_without_ratio(self):
        classification = classify_fields([{"Name": "A", "Math": 80}])
        detail = record_detail({"Name": "B", "Math": "abs"}, classification, {"Math": 80.0})

        assert detail["subjects"] == [{
            "key": "Math",
            "label": "Math",
            "credit": None,
            "mark": "abs",
            "is_numeric": False,
            "ratio": None,
        }]

    def test_no_record(self, result_rows):
        assert record_detail(None, classify_fields(result_rows)) is None
