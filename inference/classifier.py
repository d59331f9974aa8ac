# classifier.py — Field classification
# Text/numeric detection and identifier/primary field selection
"""
classifier.py — Field Classifier

Production implementation of schema inference for untyped result sheets.
Only the FIRST row is inspected for text/numeric detection; later rows never
change the schema.

Selections:
- id_field: first roll/reg/.../id-like column, text columns searched first
- primary_text_field: the "name"-like text column (or first text column)
- primary_numeric_field: the overall-score-like numeric column, falling back
  to the first subject, then the first numeric column

Every function here is total: an empty dataset yields empty tuples and None.
"""

from __future__ import annotations

import logging
from typing import Sequence

from inference.models import (
    Dataset,
    FieldClassification,
    FieldDescriptor,
    schema_fields,
)
from inference.normalizer import to_finite
from inference.rules import (
    IDENTIFIER_CANDIDATES,
    PRIMARY_NUMERIC_CANDIDATES,
    PRIMARY_TEXT_CANDIDATES,
    first_matching_token,
    first_name_containing,
    first_name_matching_any,
)
from inference.subjects import extract_subjects


logger = logging.getLogger(__name__)


# =============================================================================
# FIELD DETECTION (first row only)
# =============================================================================

def detect_text_fields(rows: Dataset) -> list[str]:
    """Fields whose first-row value is a string with non-blank content."""
    if not rows:
        return []
    sample = rows[0]
    return [
        key for key in schema_fields(rows)
        if isinstance(sample[key], str) and sample[key].strip() != ""
    ]


def detect_numeric_fields(rows: Dataset) -> list[str]:
    """Fields whose first-row value coerces to a finite number."""
    if not rows:
        return []
    sample = rows[0]
    return [
        key for key in schema_fields(rows)
        if to_finite(sample[key]) is not None
    ]


# =============================================================================
# FIELD SELECTION
# =============================================================================

def select_id_field(rows: Dataset, text_fields: Sequence[str]) -> str | None:
    """
    Pick the identifier column.

    The first candidate token found in any name decides; text fields are
    searched before the remaining fields.
    """
    keys = schema_fields(rows)
    ordered = list(text_fields) + [k for k in keys if k not in text_fields]

    token = first_matching_token(ordered, IDENTIFIER_CANDIDATES)
    if token is None:
        return None
    return first_name_containing(ordered, token)


def select_primary_text_field(text_fields: Sequence[str]) -> str | None:
    """Pick the display column, e.g. "Student Name"."""
    if not text_fields:
        return None

    token = first_matching_token(text_fields, PRIMARY_TEXT_CANDIDATES)
    if token is None:
        return text_fields[0]
    return first_name_containing(text_fields, token) or text_fields[0]


def select_primary_numeric_field(
    numeric_fields: Sequence[str],
    subject_fields: Sequence[FieldDescriptor] = (),
) -> str | None:
    """Pick the summary metric column, e.g. "CGPA" or "Total"."""
    if not numeric_fields:
        return None

    preferred = first_name_matching_any(numeric_fields, PRIMARY_NUMERIC_CANDIDATES)
    if preferred is not None:
        return preferred

    if subject_fields:
        return subject_fields[0].key

    return numeric_fields[0]


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify_fields(rows: Dataset) -> FieldClassification:
    """
    Classify the columns of a dataset.

    Args:
        rows: Dataset (ordered row mappings)

    Returns:
        FieldClassification with text/numeric fields, the selected
        id/primary fields, and the extracted subject descriptors
    """
    if not rows:
        return FieldClassification()

    text_fields = detect_text_fields(rows)
    numeric_fields = detect_numeric_fields(rows)
    subject_fields = extract_subjects(rows, text_fields)

    classification = FieldClassification(
        text_fields=tuple(text_fields),
        numeric_fields=tuple(numeric_fields),
        id_field=select_id_field(rows, text_fields),
        primary_text_field=select_primary_text_field(text_fields),
        primary_numeric_field=select_primary_numeric_field(numeric_fields, subject_fields),
        subject_fields=tuple(subject_fields),
    )

    logger.debug(
        "Classified %d columns: id=%r text=%r numeric=%r subjects=%d",
        len(schema_fields(rows)),
        classification.id_field,
        classification.primary_text_field,
        classification.primary_numeric_field,
        len(subject_fields),
    )

    return classification
