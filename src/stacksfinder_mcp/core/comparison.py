"""Comparison engine: analysis, N-way comparison and local stack selection.

Everything here is deterministic and local: it reads the catalog, scores
through ``scoring`` and never touches the network. Input problems are
raised as ``StacksFinderError`` before any work is done.
"""

from __future__ import annotations

import logging
from typing import Optional

from . import scoring
from .catalog import Catalog
from .errors import ErrorKind, StacksFinderError
from .models import (
    DIMENSION_LABELS,
    Category,
    CompatibilityEntry,
    ComparisonResult,
    Context,
    Dimension,
    DimensionScore,
    DimensionWinner,
    ProjectType,
    RankedTechnology,
    Scale,
    StackPick,
    TechnologyReport,
)

logger = logging.getLogger(__name__)

# Tunables. Callers may override per call; nothing derives them.
STRENGTH_THRESHOLD = 80
WEAKNESS_THRESHOLD = 40
TIE_MARGIN = 3
CLOSE_MARGIN = 10
MIN_COMPARE = 2
MAX_COMPARE = 4

TIE = "tie"


def _breakdown(scores: dict[Dimension, int]) -> list[DimensionScore]:
    return [
        DimensionScore(dimension=dim, label=DIMENSION_LABELS[dim], score=scores[dim], grade=scoring.grade(scores[dim]))
        for dim in Dimension
        if dim in scores
    ]


def analyze(
    catalog: Catalog,
    tech_id: str,
    context: Context = Context.DEFAULT,
    strength_threshold: int = STRENGTH_THRESHOLD,
    weakness_threshold: int = WEAKNESS_THRESHOLD,
) -> TechnologyReport:
    """Single-technology report: overall score, breakdown, strengths, weaknesses, compatible techs."""
    tech = catalog.require(tech_id)
    overall = scoring.score(tech, context)
    breakdown = _breakdown(tech.scores)

    strengths = sorted((d for d in breakdown if d.score >= strength_threshold), key=lambda d: -d.score)
    weaknesses = sorted((d for d in breakdown if d.score <= weakness_threshold), key=lambda d: d.score)
    compatible = [t.name for t in catalog.all() if t.id in tech.compatible_with]

    return TechnologyReport(
        technology=tech,
        context=context,
        overall=overall,
        grade=scoring.grade(overall),
        breakdown=breakdown,
        strengths=strengths,
        weaknesses=weaknesses,
        compatible=compatible,
    )


def _validate_ids(catalog: Catalog, tech_ids: list[str]) -> None:
    if len(tech_ids) < MIN_COMPARE:
        raise StacksFinderError(
            ErrorKind.INVALID_INPUT,
            f"At least {MIN_COMPARE} technologies are required for a comparison, got {len(tech_ids)}",
        )
    if len(tech_ids) > MAX_COMPARE:
        raise StacksFinderError(
            ErrorKind.INVALID_INPUT,
            f"At most {MAX_COMPARE} technologies can be compared at once, got {len(tech_ids)}",
        )
    seen: set[str] = set()
    duplicates: list[str] = []
    for tech_id in tech_ids:
        if tech_id in seen and tech_id not in duplicates:
            duplicates.append(tech_id)
        seen.add(tech_id)
    if duplicates:
        raise StacksFinderError(
            ErrorKind.INVALID_INPUT,
            f"Duplicate technologies in comparison list: {', '.join(duplicates)}",
        )
    for tech_id in tech_ids:
        catalog.require(tech_id)


def dimension_winners(ranked: list[RankedTechnology], tie_margin: int = TIE_MARGIN) -> list[DimensionWinner]:
    """Per-dimension winner on raw (unweighted) scores."""
    winners = []
    for dim in Dimension:
        contenders = [t for t in ranked if dim in t.scores]
        if len(contenders) < 2:
            continue
        ordered = sorted(contenders, key=lambda t: -t.scores[dim])
        first, second = ordered[0], ordered[1]
        margin = first.scores[dim] - second.scores[dim]
        if margin < tie_margin:
            winner, note = TIE, "Tie"
        elif margin < CLOSE_MARGIN:
            winner, note = first.id, "Close competition"
        else:
            winner, note = first.id, "Clear winner"
        winners.append(DimensionWinner(dimension=dim, label=DIMENSION_LABELS[dim], winner=winner, margin=margin, note=note))
    return winners


def pair_compatibility(catalog: Catalog, tech_a: str, tech_b: str) -> CompatibilityEntry:
    """Judge one pair from the declarations of either side.

    Declarations are one-directional; a pair counts as compatible when
    either record lists the other, unless either record declares a conflict.
    """
    if catalog.declares_conflict(tech_a, tech_b) or catalog.declares_conflict(tech_b, tech_a):
        return CompatibilityEntry(tech_a=tech_a, tech_b=tech_b, compatible=False, note="Declared conflict")

    a_to_b = catalog.declares_compatible(tech_a, tech_b)
    b_to_a = catalog.declares_compatible(tech_b, tech_a)
    if a_to_b and b_to_a:
        note = "Declared compatible by both"
    elif a_to_b:
        note = f"Declared compatible by {tech_a}"
    elif b_to_a:
        note = f"Declared compatible by {tech_b}"
    else:
        note = "No compatibility declared"
    return CompatibilityEntry(tech_a=tech_a, tech_b=tech_b, compatible=a_to_b or b_to_a, note=note)


def compare(
    catalog: Catalog,
    tech_ids: list[str],
    context: Context = Context.DEFAULT,
    tie_margin: int = TIE_MARGIN,
) -> ComparisonResult:
    """Rank 2-4 technologies, pick per-dimension winners and build the compatibility matrix."""
    _validate_ids(catalog, tech_ids)

    entries = []
    for tech_id in tech_ids:
        tech = catalog.require(tech_id)
        overall = scoring.score(tech, context)
        entries.append(RankedTechnology(id=tech.id, name=tech.name, overall=overall, grade=scoring.grade(overall), scores=dict(tech.scores)))

    ranking = sorted(entries, key=lambda t: -t.overall)
    winners = dimension_winners(entries, tie_margin)

    matrix = []
    for i, tech_a in enumerate(tech_ids):
        for tech_b in tech_ids[i + 1:]:
            matrix.append(pair_compatibility(catalog, tech_a, tech_b))

    leader, runner_up = ranking[0], ranking[1]
    is_tie = leader.overall - runner_up.overall < tie_margin
    trade_offs: list[str] = []
    if is_tie:
        tied = [t for t in ranking if leader.overall - t.overall < tie_margin]
        for tech in tied:
            won = [w.label for w in winners if w.winner == tech.id]
            if won:
                trade_offs.append(f"{tech.name} leads on {', '.join(won)}")
            else:
                trade_offs.append(f"{tech.name} wins no dimension outright")
        names = " and ".join(t.name for t in tied) if len(tied) == 2 else ", ".join(t.name for t in tied)
        scores = " vs ".join(str(t.overall) for t in tied)
        verdict = f"Close call between {names} ({scores}); no clear winner"
    else:
        verdict = f"{leader.name} leads with {leader.overall}/100"
        strongest = [w.label for w in winners if w.winner == leader.id][:2]
        if strongest:
            verdict += f"; consider it for {' and '.join(strongest)} priorities"

    logger.debug("Compared %s under %s: %s", ", ".join(tech_ids), context.value, verdict)
    return ComparisonResult(
        context=context,
        ranking=ranking,
        winners=winners,
        compatibility=matrix,
        verdict=verdict,
        is_tie=is_tie,
        trade_offs=trade_offs,
    )


# ─── Local demo stack selection ──────────────────────────────────────────────

PROJECT_TYPE_CATEGORIES: dict[ProjectType, list[Category]] = {
    ProjectType.WEB_APP: [Category.META_FRAMEWORK, Category.DATABASE, Category.ORM, Category.AUTH, Category.HOSTING],
    ProjectType.SAAS: [Category.META_FRAMEWORK, Category.DATABASE, Category.ORM, Category.AUTH, Category.HOSTING, Category.PAYMENTS],
    ProjectType.E_COMMERCE: [Category.META_FRAMEWORK, Category.DATABASE, Category.ORM, Category.AUTH, Category.HOSTING, Category.PAYMENTS],
    ProjectType.API: [Category.BACKEND, Category.DATABASE, Category.ORM, Category.AUTH, Category.HOSTING],
    ProjectType.MOBILE_APP: [Category.BACKEND, Category.DATABASE, Category.ORM, Category.AUTH, Category.HOSTING],
    ProjectType.MARKETPLACE: [Category.META_FRAMEWORK, Category.DATABASE, Category.ORM, Category.AUTH, Category.HOSTING, Category.PAYMENTS],
    ProjectType.CLI: [Category.BACKEND],
    ProjectType.LIBRARY: [Category.BACKEND],
    ProjectType.DESKTOP: [Category.FRONTEND, Category.BACKEND, Category.DATABASE, Category.ORM],
}


def scale_to_context(scale: Scale) -> Context:
    if scale in (Scale.ENTERPRISE, Scale.GROWTH):
        return Context.ENTERPRISE
    if scale in (Scale.MVP, Scale.STARTUP):
        return Context.MVP
    return Context.DEFAULT


def _conflicts_with_any(catalog: Catalog, tech_id: str, selected: list[str]) -> bool:
    return any(catalog.declares_conflict(tech_id, other) or catalog.declares_conflict(other, tech_id) for other in selected)


def select_demo_stack(
    catalog: Catalog,
    project_type: ProjectType,
    scale: Scale = Scale.MVP,
    context: Optional[Context] = None,
) -> list[StackPick]:
    """Pick the best-scoring technology per relevant category.

    Candidates in declared conflict with an earlier pick are skipped, so the
    resulting stack never contains a known hard incompatibility.
    """
    context = context or scale_to_context(scale)
    categories = PROJECT_TYPE_CATEGORIES.get(project_type, [Category.META_FRAMEWORK, Category.DATABASE, Category.AUTH, Category.HOSTING])

    picks: list[StackPick] = []
    selected: list[str] = []
    for category in categories:
        best = None
        best_score = -1
        for tech in catalog.by_category(category):
            if _conflicts_with_any(catalog, tech.id, selected):
                continue
            candidate = scoring.score(tech, context)
            if candidate > best_score:
                best, best_score = tech, candidate
        if best is None:
            logger.debug("No compatible %s candidate for %s", category.value, project_type.value)
            continue
        picks.append(StackPick(category=category, technology_id=best.id, name=best.name, score=best_score, grade=scoring.grade(best_score)))
        selected.append(best.id)
    return picks
