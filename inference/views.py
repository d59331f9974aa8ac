# views.py — Selection views over a classified dataset
# Metric options, row filtering, record lookup & detail
"""
views.py — Derived Selection Views

Everything the result browser needs beyond the aggregates:
- metric_options(): selectable chart metrics (primary metric first)
- default_metric_key() / chart_metric_keys(): which metrics are charted
- filter_rows(): search box + "only rows with a value" toggle
- find_initial_record(): record opened on first load
- record_overview() / record_detail(): per-record breakdown
"""

from __future__ import annotations

from typing import Any, Sequence

from inference.models import (
    Dataset,
    FieldClassification,
    FieldDescriptor,
    MetricOption,
    Row,
)
from inference.normalizer import (
    display_text,
    is_empty_value,
    metric_label,
    prettify,
    to_finite,
)
from inference.rules import is_id_like


MAX_EXTRA_FIELDS = 4


# =============================================================================
# METRIC SELECTION
# =============================================================================

def metric_options(
    primary_numeric_field: str | None,
    subject_fields: Sequence[FieldDescriptor],
) -> list[MetricOption]:
    """
    Build the chart metric picker.

    The primary metric comes first, then subjects; id-like keys never appear.
    """
    options = []
    seen = set()

    if primary_numeric_field and not is_id_like(primary_numeric_field):
        options.append(MetricOption(
            key=primary_numeric_field,
            label=metric_label(primary_numeric_field),
        ))
        seen.add(primary_numeric_field)

    for subject in subject_fields:
        if subject.key in seen or is_id_like(subject.key):
            continue
        options.append(MetricOption(key=subject.key, label=subject.label))
        seen.add(subject.key)

    return options


def default_metric_key(
    primary_numeric_field: str | None,
    subject_fields: Sequence[FieldDescriptor],
) -> str | None:
    """Metric charted when nothing is selected."""
    if primary_numeric_field:
        return primary_numeric_field
    if subject_fields:
        return subject_fields[0].key
    return None


def chart_metric_keys(
    active_keys: Sequence[str],
    default_key: str | None,
) -> list[str]:
    """Active metrics if any are selected, else the default metric alone."""
    if active_keys:
        return list(active_keys)
    if default_key:
        return [default_key]
    return []


# =============================================================================
# ROW FILTERING
# =============================================================================

def has_metric_value(row: Row, metric_key: str) -> bool:
    """True if the row holds a finite value for metric_key."""
    raw = row.get(metric_key)
    if is_empty_value(raw):
        return False
    return to_finite(raw) is not None


def filter_rows(
    rows: Dataset,
    search: str = "",
    only_with_metric: bool = False,
    metric_key: str | None = None,
) -> list[Row]:
    """
    Filter rows for the result table, keeping source order.

    Args:
        rows: Full dataset
        search: Case-insensitive substring matched against every cell
        only_with_metric: Drop rows without a value for metric_key
        metric_key: Metric used by the only_with_metric toggle

    Returns:
        list of the matching rows (the same row objects, not copies)
    """
    base = list(rows)

    if only_with_metric and metric_key:
        base = [row for row in base if has_metric_value(row, metric_key)]

    if not search or not search.strip():
        return base

    query = search.lower()
    return [
        row for row in base
        if any(query in display_text(value).lower() for value in row.values())
    ]


# =============================================================================
# RECORD DETAIL
# =============================================================================

def find_initial_record(
    rows: Dataset,
    id_field: str | None,
    target_id: str | None = None,
) -> Row | None:
    """
    Record shown before the user picks one.

    Matches target_id against id_field (trimmed, case-insensitive), falling
    back to the first row.
    """
    if not rows:
        return None

    if id_field and target_id:
        wanted = str(target_id).lower()
        for row in rows:
            value = row.get(id_field)
            if value is not None and display_text(value).strip().lower() == wanted:
                return row

    return rows[0]


def record_overview(
    row: Row | None,
    subject_fields: Sequence[FieldDescriptor],
) -> list[dict]:
    """Per-subject marks of one record (non-numeric marks are skipped)."""
    if not row or not subject_fields:
        return []

    overview = []
    for subject in subject_fields:
        num = to_finite(row.get(subject.key))
        if num is None:
            continue
        overview.append({"subject": subject.label, "score": num})
    return overview


def _subject_entry(
    row: Row,
    subject: FieldDescriptor,
    subject_max: dict[str, float],
) -> dict | None:
    raw = row.get(subject.key)
    if is_empty_value(raw):
        return None

    num = to_finite(raw)
    best = subject_max.get(subject.key)
    ratio = None
    if num is not None and best:
        ratio = max(0.0, min(1.0, num / best))

    return {
        "key": subject.key,
        "label": subject.label,
        "credit": subject.credit,
        "mark": num if num is not None else raw,
        "is_numeric": num is not None,
        "ratio": ratio,
    }


def record_detail(
    row: Row | None,
    classification: FieldClassification,
    subject_max: dict[str, float] | None = None,
    max_extra_fields: int = MAX_EXTRA_FIELDS,
) -> dict | None:
    """
    Detail card for one record.

    Returns:
        dict with title, identifier, extra_fields, primary_metric, subjects;
        None when no record is selected
    """
    if not row:
        return None

    subject_max = subject_max or {}
    id_field = classification.id_field
    text_field = classification.primary_text_field
    numeric_field = classification.primary_numeric_field
    subject_keys = {s.key for s in classification.subject_fields}

    extra_fields = []
    for key, value in row.items():
        if key in (id_field, text_field, numeric_field) or key in subject_keys:
            continue
        if len(extra_fields) >= max_extra_fields:
            break
        extra_fields.append({"key": key, "label": prettify(key), "value": value})

    primary_metric = None
    if numeric_field:
        primary_metric = {
            "key": numeric_field,
            "label": metric_label(numeric_field),
            "value": row.get(numeric_field),
        }

    subjects = []
    for subject in classification.subject_fields:
        entry = _subject_entry(row, subject, subject_max)
        if entry is not None:
            subjects.append(entry)

    return {
        "title": row.get(text_field) if text_field else None,
        "identifier": _identifier(row, id_field),
        "extra_fields": extra_fields,
        "primary_metric": primary_metric,
        "subjects": subjects,
    }


def _identifier(row: Row, id_field: str | None) -> dict[str, Any] | None:
    if not id_field:
        return None
    return {"key": id_field, "label": prettify(id_field), "value": row.get(id_field)}
