# aggregator.py — Summary statistics, histograms, grouped counts
# Pure aggregate views over a dataset (or a filtered subset of it)
"""
aggregator.py — Aggregate Views

Production implementation of the aggregate views rendered next to the
result table:
- summarize(): row count plus mean/max/min of the primary metric
- histogram(): fixed-count equal-width bins over one field
- group_by_metrics(): per-bucket counts across one or more metrics
- subject_max_map(): highest positive mark per subject

Every function skips missing or non-numeric cells instead of failing.
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Sequence

import numpy as np

from inference.models import (
    Dataset,
    FieldDescriptor,
    GroupedCountRow,
    HistogramBin,
    SummaryStats,
)
from inference.normalizer import to_finite


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_HISTOGRAM_BINS = 8
BUCKET_DECIMALS = 2
# Beyond this magnitude a bucket key is the value itself
BUCKET_EXACT_LIMIT = 1e21
RANGE_SEPARATOR = " – "


# =============================================================================
# HELPERS
# =============================================================================

def finite_values(rows: Dataset, field: str) -> list[float]:
    """Finite coerced values of one field, in row order."""
    values = []
    for row in rows:
        num = to_finite(row.get(field))
        if num is not None:
            values.append(num)
    return values


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 → 3, -2.5 → -2)."""
    return math.floor(value + 0.5)


def round_bucket(value: float, decimals: int = BUCKET_DECIMALS) -> float:
    """
    Round a value to a bucket key.

    Uses the exact binary value with halves away from zero, so 0.125 → 0.13
    while 2.675 (stored just below) → 2.67. Values of 1e21 or more are
    returned unchanged.
    """
    if abs(value) >= BUCKET_EXACT_LIMIT:
        return float(value)

    exact = Decimal(value)
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + decimals + 1)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


# =============================================================================
# SUMMARY STATISTICS
# =============================================================================

def summarize(rows: Dataset, primary_numeric_field: str | None) -> SummaryStats:
    """
    Compute headline statistics for the primary metric.

    Args:
        rows: Full (unfiltered) dataset
        primary_numeric_field: Metric to summarize, or None

    Returns:
        SummaryStats; avg/max/min are None when no finite value exists
    """
    total = len(rows)
    if not total or not primary_numeric_field:
        return SummaryStats(total_students=total)

    values = finite_values(rows, primary_numeric_field)
    if not values:
        logger.debug("No finite values for %r; summary left empty", primary_numeric_field)
        return SummaryStats(total_students=total)

    arr = np.asarray(values, dtype=float)
    return SummaryStats(
        total_students=total,
        avg_score=float(arr.mean()),
        max_score=float(arr.max()),
        min_score=float(arr.min()),
    )


# =============================================================================
# HISTOGRAM
# =============================================================================

def histogram(
    rows: Dataset,
    field: str | None,
    bin_count: int = DEFAULT_HISTOGRAM_BINS,
) -> list[HistogramBin]:
    """
    Bin one field into equal-width ranges.

    The last bin ends exactly at the maximum and always receives it.

    Returns:
        list[HistogramBin] of length bin_count, or [] when the field has no
        finite values or a single distinct value
    """
    if not rows or not field or bin_count < 1:
        return []

    values = finite_values(rows, field)
    if not values:
        return []

    arr = np.asarray(values, dtype=float)
    low = float(arr.min())
    high = float(arr.max())
    if not (np.isfinite(low) and np.isfinite(high)) or low == high:
        return []
    if not np.isfinite(high - low):
        logger.debug("Range of %r overflows; histogram skipped", field)
        return []

    step = (high - low) / bin_count
    labels = []
    for i in range(bin_count):
        start = low + i * step
        end = high if i == bin_count - 1 else low + (i + 1) * step
        labels.append(f"{round_half_up(start)}{RANGE_SEPARATOR}{round_half_up(end)}")

    # value == high would land on index bin_count without the clip
    indexes = np.floor((arr - low) / (high - low) * bin_count).astype(int)
    indexes = np.clip(indexes, 0, bin_count - 1)
    counts = np.bincount(indexes, minlength=bin_count)

    return [
        HistogramBin(range=label, count=int(count))
        for label, count in zip(labels, counts)
    ]


# =============================================================================
# GROUPED COUNTS
# =============================================================================

def group_by_metrics(
    rows: Dataset,
    metric_keys: Sequence[str],
    decimals: int = BUCKET_DECIMALS,
) -> list[GroupedCountRow]:
    """
    Count rows per rounded value across several metrics.

    Buckets are shared between metrics: two metrics that both produce 3.67
    count into the same row.

    Args:
        rows: Dataset (usually the filtered view)
        metric_keys: Metric columns to count
        decimals: Bucket rounding precision

    Returns:
        list[GroupedCountRow] sorted ascending by bucket value
    """
    if not rows or not metric_keys:
        return []

    buckets: dict[float, dict[str, int]] = {}

    for metric_key in metric_keys:
        for row in rows:
            num = to_finite(row.get(metric_key))
            if num is None:
                continue
            bucket = buckets.setdefault(round_bucket(num, decimals), {})
            bucket[metric_key] = bucket.get(metric_key, 0) + 1

    return [
        GroupedCountRow(bucket_value=value, counts=counts)
        for value, counts in sorted(buckets.items())
    ]


# =============================================================================
# SUBJECT MAXIMA
# =============================================================================

def subject_max_map(
    rows: Dataset,
    subject_fields: Sequence[FieldDescriptor],
) -> dict[str, float]:
    """
    Highest positive mark per subject.

    Subjects with no positive mark are left out.
    """
    result: dict[str, float] = {}
    for subject in subject_fields:
        best = 0.0
        for num in finite_values(rows, subject.key):
            if num > best:
                best = num
        if best > 0:
            result[subject.key] = best
    return result
