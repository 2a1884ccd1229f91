"""Nearest-string matching for "did you mean" suggestions.

Only used to enrich not-found errors. Catalog lookups are always exact.
"""

from __future__ import annotations

from typing import Iterable

DEFAULT_SUGGESTION_LIMIT = 3
MAX_SUGGESTION_DISTANCE = 3


def distance(a: str, b: str) -> int:
    """Levenshtein edit distance with unit insert/delete/substitute cost."""
    rows = len(a) + 1
    cols = len(b) + 1
    matrix = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,
                matrix[i][j - 1] + 1,
                matrix[i - 1][j - 1] + cost,
            )
    return matrix[-1][-1]


def suggest(
    value: str,
    candidates: Iterable[str],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    max_distance: int = MAX_SUGGESTION_DISTANCE,
) -> list[str]:
    """Return up to ``limit`` candidates close to ``value``.

    Comparison is case-insensitive. Results are ordered by ascending
    distance, then alphabetically.
    """
    needle = value.lower()
    scored = []
    for candidate in candidates:
        d = distance(needle, candidate.lower())
        if d <= max_distance:
            scored.append((d, candidate))
    scored.sort()
    return [candidate for _, candidate in scored[:max(limit, 0)]]
