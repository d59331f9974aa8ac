# models.py — Shared dataset & derived-view types
# Row/Dataset aliases plus the immutable value structures handed to the UI
"""
models.py — Dataset Model & Derived Views

A dataset is an ordered sequence of row mappings (field name → cell value),
loaded once and never mutated. Only the FIRST row's keys define the schema.

Every derived structure below is a frozen value object, recomputed from
scratch whenever its inputs change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence


Row = Mapping[str, Any]
Dataset = Sequence[Row]


def schema_fields(rows: Dataset) -> list[str]:
    """Field names of the first row, in order (empty for an empty dataset)."""
    if not rows:
        return []
    return list(rows[0].keys())


@dataclass(frozen=True)
class FieldDescriptor:
    """A subject column: key, display label, optional credit weight."""
    key: str
    label: str
    credit: float | None = None


@dataclass(frozen=True)
class FieldClassification:
    """Output of classify_fields()."""
    text_fields: tuple[str, ...] = ()
    numeric_fields: tuple[str, ...] = ()
    id_field: str | None = None
    primary_text_field: str | None = None
    primary_numeric_field: str | None = None
    subject_fields: tuple[FieldDescriptor, ...] = ()


@dataclass(frozen=True)
class SummaryStats:
    """Headline statistics for the primary numeric field."""
    total_students: int = 0
    avg_score: float | None = None
    max_score: float | None = None
    min_score: float | None = None


@dataclass(frozen=True)
class HistogramBin:
    """One equal-width bin: display range and member count."""
    range: str
    count: int = 0


@dataclass(frozen=True)
class GroupedCountRow:
    """
    Counts per metric for one rounded bucket value.

    Metrics with no rows in this bucket are absent from counts; read them
    as zero. counts is a read-only copy of the mapping passed in.
    """
    bucket_value: float
    counts: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    def count_for(self, metric_key: str) -> int:
        return self.counts.get(metric_key, 0)


@dataclass(frozen=True)
class MetricOption:
    """A selectable chart metric."""
    key: str
    label: str
