"""Context-weighted technology scoring.

A technology's overall score is the weighted average of its dimension
scores under a context's weight vector. Everything here is a pure function
of (Technology, Context).
"""

from __future__ import annotations

import math

from .models import Context, Dimension, Technology

CONTEXT_WEIGHTS: dict[Context, dict[Dimension, float]] = {
    Context.DEFAULT: {d: 1.0 for d in Dimension},
    Context.MVP: {
        Dimension.PERFORMANCE: 0.8,
        Dimension.DEVELOPER_EXPERIENCE: 1.5,
        Dimension.ECOSYSTEM: 1.1,
        Dimension.MAINTAINABILITY: 0.8,
        Dimension.COST: 1.4,
        Dimension.COMPLIANCE: 0.4,
    },
    Context.ENTERPRISE: {
        Dimension.PERFORMANCE: 1.2,
        Dimension.DEVELOPER_EXPERIENCE: 0.8,
        Dimension.ECOSYSTEM: 1.1,
        Dimension.MAINTAINABILITY: 1.4,
        Dimension.COST: 0.7,
        Dimension.COMPLIANCE: 1.5,
    },
}

_GRADE_FLOORS = [
    (97, "A+"), (93, "A"), (90, "A-"),
    (87, "B+"), (83, "B"), (80, "B-"),
    (77, "C+"), (73, "C"), (70, "C-"),
    (67, "D+"), (63, "D"), (60, "D-"),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def weighted_score(scores: dict[Dimension, int], weights: dict[Dimension, float]) -> int:
    """Weighted average of ``scores``; dimensions without a weight contribute nothing."""
    total = 0.0
    weight_sum = 0.0
    for dim, value in scores.items():
        w = weights.get(dim, 0.0)
        if w <= 0:
            continue
        total += value * w
        weight_sum += w
    if weight_sum == 0:
        return 0
    return _round_half_up(total / weight_sum)


def score(tech: Technology, context: Context = Context.DEFAULT) -> int:
    """Overall 0-100 score for ``tech`` under ``context``."""
    return weighted_score(tech.scores, CONTEXT_WEIGHTS[context])


def grade(value: int) -> str:
    """Letter grade for a 0-100 score."""
    for floor, letter in _GRADE_FLOORS:
        if value >= floor:
            return letter
    return "F"
