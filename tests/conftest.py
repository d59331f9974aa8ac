"""
Shared fixtures for the inference and pipeline tests.
"""

import pytest

from settings.portal_config import PortalConfig


@pytest.fixture
def result_rows():
    """Two-student sheet with a registration column, CGPA and one subject."""
    return [
        {
            "Name": "Alice",
            "Reg": "2024001",
            "CGPA": 3.67,
            "Physics_1": 78,
            "Physics_1_Credit": "(3)",
        },
        {
            "Name": "Bob",
            "Reg": "2024002",
            "CGPA": 3.67,
            "Physics_1": 65,
        },
    ]


@pytest.fixture
def class_rows():
    """A larger sheet as exported from a spreadsheet (empty cells are "")."""
    return [
        {"Student Name": "Asha", "Roll": "R-01", "Math (4)": 81, "Chemistry 3": 70, "Total": 151, "Remarks": "Good"},
        {"Student Name": "Bilal", "Roll": "R-02", "Math (4)": 64, "Chemistry 3": "", "Total": 64, "Remarks": ""},
        {"Student Name": "Chen", "Roll": "R-03", "Math (4)": "92", "Chemistry 3": 88, "Total": 180, "Remarks": "Top"},
        {"Student Name": "Dara", "Roll": "R-04", "Math (4)": 45, "Chemistry 3": 51, "Total": 96, "Remarks": ""},
    ]


@pytest.fixture
def config():
    """Default configuration, independent of the environment."""
    return PortalConfig()
