# rules.py — Ordered column-name heuristics
# Token priority lists and pure predicates over lowercase header names
"""
rules.py — Column Name Rules

Every name-based heuristic used by field classification and subject
extraction lives here as an ordered token list plus a small pure function,
so each rule chain can be exercised on its own.

Token lists are checked in list order: the first token that matches wins.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence


# =============================================================================
# TOKEN LISTS (priority order)
# =============================================================================

IDENTIFIER_CANDIDATES = [
    "roll", "reg", "registration", "enrol", "enrollment", "admission", "id",
]

PRIMARY_TEXT_CANDIDATES = ["name", "student", "candidate"]

PRIMARY_NUMERIC_CANDIDATES = [
    "cg", "cgpa", "gpa", "total", "aggregate", "overall",
    "sgpa", "percentage", "percent", "score",
]

# Subject exclusion patterns (substring match on the lowercase name)
ID_LIKE_PATTERN = re.compile(r"(roll|reg|registration|enrol|enrollment|id)")
AGGREGATE_LIKE_PATTERN = re.compile(
    r"(total|aggregate|overall|gpa|cgpa|sgpa|percentage|percent|score)"
)


# =============================================================================
# PREDICATES
# =============================================================================

def is_id_like(name: str) -> bool:
    """True if the header looks like a roll/registration/id column."""
    return bool(ID_LIKE_PATTERN.search(str(name).lower()))


def is_aggregate_like(name: str) -> bool:
    """True if the header looks like an overall score rather than a subject."""
    return bool(AGGREGATE_LIKE_PATTERN.search(str(name).lower()))


def first_matching_token(
    names: Iterable[str],
    candidates: Sequence[str],
) -> str | None:
    """
    Return the first candidate token contained in any of the names.

    Candidates are tried in priority order; names are compared lowercase.
    """
    lowered = [str(n).lower() for n in names]
    for token in candidates:
        if any(token in name for name in lowered):
            return token
    return None


def first_name_containing(names: Iterable[str], token: str) -> str | None:
    """Return the first name (original casing) whose lowercase form contains token."""
    for name in names:
        if token in str(name).lower():
            return name
    return None


def first_name_matching_any(
    names: Iterable[str],
    candidates: Sequence[str],
) -> str | None:
    """Return the first name whose lowercase form contains any candidate token."""
    for name in names:
        lower = str(name).lower()
        if any(token in lower for token in candidates):
            return name
    return None
