"""
Tests for subject extraction and credit parsing.
"""

from inference.classifier import detect_text_fields
from inference.models import FieldDescriptor
from inference.subjects import extract_subjects, parse_credit


class TestParseCredit:

    def test_parenthesized_wins_over_trailing(self):
        assert parse_credit("Physics (3.0) Lab 2") == 3.0

    def test_trailing_number(self):
        assert parse_credit("Chemistry 3") == 3.0
        assert parse_credit("Physics 3.5 ") == 3.5

    def test_parenthesized_decimal(self):
        assert parse_credit("CSE 101 (1.5)") == 1.5

    def test_no_credit(self):
        assert parse_credit("Math") is None
        assert parse_credit("Lab (x)") is None


class TestExtractSubjects:

    def test_aggregate_columns_excluded(self):
        rows = [{"Name": "A", "Total": 240, "Physics 3": 80}]
        subjects = extract_subjects(rows, detect_text_fields(rows))

        assert subjects == [FieldDescriptor(key="Physics 3", label="Physics 3", credit=3.0)]

    def test_single_non_numeric_value_rejects_column(self):
        rows = [
            {"Name": "A", "Roll": "1", "Math": "80"},
            {"Name": "B", "Roll": "2", "Math": "N/A"},
        ]
        assert extract_subjects(rows, detect_text_fields(rows)) == []
        assert extract_subjects(rows) == []

    def test_all_empty_column_rejected(self):
        rows = [{"Name": "A", "Bio": ""}, {"Name": "B", "Bio": None}]
        assert extract_subjects(rows, ["Name"]) == []

    def test_empty_cells_are_skipped(self):
        rows = [{"Name": "A", "Math": 80}, {"Name": "B", "Math": ""}, {"Name": "C"}]
        assert [s.key for s in extract_subjects(rows, ["Name"])] == ["Math"]

    def test_id_like_columns_excluded(self):
        rows = [{"Midterm": 40, "Final": 55}]
        assert [s.key for s in extract_subjects(rows)] == ["Final"]

    def test_labels_and_order(self):
        rows = [{"Name": "A", "physics_lab": 1, "chemTheory": 2}]
        subjects = extract_subjects(rows, ["Name"])

        assert [s.label for s in subjects] == ["Physics Lab", "Chem Theory"]
        assert all(s.credit is None for s in subjects)

    def test_text_field_match_is_case_insensitive(self):
        rows = [{"Section": "A", "Math": 1}]
        assert [s.key for s in extract_subjects(rows, ["SECTION"])] == ["Math"]

    def test_result_sheet(self, result_rows):
        subjects = extract_subjects(result_rows, detect_text_fields(result_rows))

        assert subjects == [FieldDescriptor(key="Physics_1", label="Physics 1", credit=1.0)]

    def test_class_sheet_credits(self, class_rows):
        subjects = extract_subjects(class_rows, detect_text_fields(class_rows))

        assert [(s.key, s.credit) for s in subjects] == [("Math (4)", 4.0), ("Chemistry 3", 3.0)]

    def test_empty_dataset(self):
        assert extract_subjects([]) == []

    def test_idempotent(self, class_rows):
        text_fields = detect_text_fields(class_rows)
        assert extract_subjects(class_rows, text_fields) == extract_subjects(class_rows, text_fields)
