# subjects.py — Subject column extraction
# Finds per-topic score columns and parses their credit weights
"""
subjects.py — Subject Extractor

A subject is any first-row column that is not text-like, not id-like, not an
aggregate, and is numeric wherever it has a value (at least once).

Credit is read from the header: a parenthesized number wins over a trailing
number ("Physics (3.0) Lab 2" → 3.0, "Chemistry 3" → 3.0).
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from inference.models import Dataset, FieldDescriptor, schema_fields
from inference.normalizer import is_empty_value, prettify, to_finite
from inference.rules import is_aggregate_like, is_id_like


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

PAREN_CREDIT_PATTERN = re.compile(r"\((\d+(?:\.\d+)?)\)")
TRAILING_CREDIT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*$")


# =============================================================================
# CREDIT PARSING
# =============================================================================

def parse_credit(header: str) -> float | None:
    """
    Parse an optional credit weight from a header.

    Returns:
        The parenthesized number if present, else a trailing number, else None
    """
    text = str(header)

    match = PAREN_CREDIT_PATTERN.search(text)
    if match:
        return float(match.group(1))

    match = TRAILING_CREDIT_PATTERN.search(text)
    if match:
        return float(match.group(1))

    return None


# =============================================================================
# COLUMN SCAN
# =============================================================================

def _rejection_reason(key: str, text_set: set[str]) -> str | None:
    """Name-based exclusion rules, in the order they are applied."""
    lower = key.lower()
    if lower in text_set:
        return "text"
    if is_id_like(lower):
        return "identifier"
    if is_aggregate_like(lower):
        return "aggregate"
    return None


def _is_numeric_column(rows: Dataset, key: str) -> bool:
    """
    True if every non-empty value is finite and at least one value exists.

    A single non-numeric value disqualifies the whole column.
    """
    has_numeric = False
    for row in rows:
        raw = row.get(key)
        if is_empty_value(raw):
            continue
        if to_finite(raw) is None:
            return False
        has_numeric = True
    return has_numeric


def extract_subjects(
    rows: Dataset,
    text_fields: Iterable[str] = (),
) -> list[FieldDescriptor]:
    """
    Extract subject descriptors in first-row column order.

    Args:
        rows: Dataset (first row defines the columns)
        text_fields: Text-like field names from classify_fields()

    Returns:
        list[FieldDescriptor]
    """
    if not rows:
        return []

    text_set = {str(f).lower() for f in text_fields}
    subjects = []

    for key in schema_fields(rows):
        reason = _rejection_reason(str(key), text_set)
        if reason:
            logger.debug("Column %r skipped as %s", key, reason)
            continue

        if not _is_numeric_column(rows, key):
            logger.debug("Column %r skipped: not numeric in every row", key)
            continue

        subjects.append(FieldDescriptor(
            key=key,
            label=prettify(key),
            credit=parse_credit(key),
        ))

    return subjects
