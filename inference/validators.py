# validators.py — Input sanitization & validation
# File type checks, dataset shape checks, user input guards
"""
validators.py — Input Sanitization & Validation

Production implementation for:
- File type validation
- Dataset shape validation
- Search/metric selection sanitization
- JSON-safe payload conversion
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np


# =============================================================================
# CONSTANTS
# =============================================================================

ALLOWED_EXTENSIONS = {".csv", ".xlsx", ".xls"}
MAX_SEARCH_LENGTH = 200


# =============================================================================
# FILE VALIDATION
# =============================================================================

def validate_file_extension(filename: str) -> tuple[bool, str | None]:
    """
    Validate that file has an allowed extension.

    Returns:
        (is_valid, error_message)
    """
    if not filename:
        return False, "No filename provided"

    ext = "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if ext not in ALLOWED_EXTENSIONS:
        return False, f"Invalid file type: {ext}. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"

    return True, None


def validate_records(rows: Any) -> tuple[bool, str | None]:
    """
    Validate that rows is an ordered sequence of row mappings.

    An empty sequence is valid: every view degrades to its empty state.

    Returns:
        (is_valid, error_message)
    """
    if rows is None:
        return False, "No rows provided"

    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        return False, "Rows must be an ordered sequence of records"

    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            return False, f"Row {index} is not a field → value mapping"

    return True, None


# =============================================================================
# INPUT SANITIZATION
# =============================================================================

def sanitize_search_query(query: str | None, max_length: int = MAX_SEARCH_LENGTH) -> str:
    """
    Sanitize the search box text.

    Whitespace is kept as typed (it is part of the substring match).
    """
    if query is None or not isinstance(query, str):
        return ""
    return query[:max_length]


def sanitize_metric_keys(
    keys: Sequence[str] | None,
    allowed: Sequence[str],
) -> list[str]:
    """Keep only known metric keys, without duplicates, in the given order."""
    if not keys:
        return []

    allowed_set = set(allowed)
    result = []
    for key in keys:
        if key in allowed_set and key not in result:
            result.append(key)
    return result


def sanitize_dict_for_json(obj: Any) -> Any:
    """
    Recursively sanitize a payload for JSON serialization.
    Handles dataclasses, numpy types, NaN, Inf, etc.
    """
    if obj is None:
        return None

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: sanitize_dict_for_json(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }

    if isinstance(obj, Mapping):
        return {k: sanitize_dict_for_json(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [sanitize_dict_for_json(v) for v in obj]

    if isinstance(obj, (np.integer,)):
        return int(obj)

    if isinstance(obj, (np.floating,)):
        if np.isnan(obj) or np.isinf(obj):
            return None
        return float(obj)

    if isinstance(obj, np.ndarray):
        return sanitize_dict_for_json(obj.tolist())

    if isinstance(obj, (np.bool_,)):
        return bool(obj)

    if isinstance(obj, float):
        if obj != obj or obj == float("inf") or obj == float("-inf"):  # NaN check
            return None
        return obj

    return obj
