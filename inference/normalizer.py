# normalizer.py — Header text normalization & numeric coercion
# Turns raw column headers into display labels, cell values into numbers
"""
normalizer.py — Text Normalizer

Production implementation of the header/label helpers shared by every
inference step:
- prettify(): raw header → human-readable label
- metric_label(): label for a metric key (CGPA special case)
- parse_number(): lenient numeric coercion of a single cell
- is_empty_value(): "no value" test for a single cell
"""

from __future__ import annotations

import math
import re
from numbers import Number
from typing import Any


# =============================================================================
# CONSTANTS
# =============================================================================

CAMEL_BOUNDARY_PATTERN = re.compile(r"([a-z])([A-Z])")
WHITESPACE_PATTERN = re.compile(r"\s+")
WORD_START_PATTERN = re.compile(r"\b\w", re.ASCII)

# Leading decimal literal, read the way spreadsheet exports are usually typed
LEADING_NUMBER_PATTERN = re.compile(
    r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity)",
    re.ASCII,
)

CGPA_LABEL = "CGPA"
CGPA_EXACT_KEYS = {"cg", "cgpa"}


# =============================================================================
# LABELS
# =============================================================================

def prettify(name: Any) -> str:
    """
    Turn a raw header into a display label.

    "total_marks" → "Total Marks", "studentName" → "Student Name".
    Never fails; an empty header gives an empty label.
    """
    text = str(name).replace("_", " ")
    text = CAMEL_BOUNDARY_PATTERN.sub(r"\1 \2", text)
    text = WHITESPACE_PATTERN.sub(" ", text)
    text = WORD_START_PATTERN.sub(lambda m: m.group(0).upper(), text)
    return text.strip()


def metric_label(key: Any) -> str:
    """Label for a metric key; any CGPA-like key reads as "CGPA"."""
    lower = str(key).lower()
    if lower in CGPA_EXACT_KEYS or " cg" in lower or "cgpa" in lower:
        return CGPA_LABEL
    return prettify(key)


# =============================================================================
# NUMERIC COERCION
# =============================================================================

def is_empty_value(value: Any) -> bool:
    """True for absent cells and empty strings (both mean "no value")."""
    return value is None or value == ""


def parse_number(value: Any) -> float | None:
    """
    Coerce a cell value to a float.

    Numbers pass through (booleans are not numbers). Strings yield their
    leading decimal literal, so "78 (absent)" → 78.0 and "N/A" → None.

    Returns:
        float (possibly non-finite for numeric inputs) or None
    """
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, Number):
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    if isinstance(value, str):
        match = LEADING_NUMBER_PATTERN.match(value.lstrip())
        if not match:
            return None
        literal = match.group(1)
        if literal.endswith("Infinity"):
            return float("-inf") if literal.startswith("-") else float("inf")
        return float(literal)

    return None


def to_finite(value: Any) -> float | None:
    """Coerce a cell value, keeping only finite results."""
    num = parse_number(value)
    if num is None or not math.isfinite(num):
        return None
    return num


def display_text(value: Any) -> str:
    """
    String form of a cell for text matching.

    Integral floats drop their ".0" so 78.0 matches a search for "78".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)
