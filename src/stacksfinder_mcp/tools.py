"""Tool implementations: input parsing, execution and Markdown rendering.

Every ``execute_*`` coroutine takes raw arguments, validates them into a
typed input model and returns a ``ToolResult``. Failures never escape as
exceptions; they come back as error results with a kind and suggestions.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError

from .core import comparison
from .core.catalog import Catalog
from .core.clients import stacksfinder
from .core.clients.jobs import CancellationToken, JobPoller
from .core.clients.remote import RemoteClient
from .core.errors import ErrorKind, InvalidInputError, StacksFinderError
from .core.models import (
    Blueprint,
    Category,
    ComparisonResult,
    Context,
    Job,
    Priority,
    ProjectType,
    Scale,
    ScoreResponse,
    StackPick,
    TechnologyReport,
)
from .usage import UsageCounter

logger = logging.getLogger(__name__)

API_KEY_URL = "https://stacksfinder.com/settings/api"
PRICING_URL = "https://stacksfinder.com/pricing"


# ─── Results ─────────────────────────────────────────────────────────────────


class ToolResult(BaseModel):
    """What every tool returns to the caller."""

    text: str
    is_error: bool = False
    error_kind: Optional[ErrorKind] = None
    suggestions: list[str] = Field(default_factory=list)

    @classmethod
    def from_error(cls, error: StacksFinderError) -> "ToolResult":
        return cls(text=error.to_response_text(), is_error=True, error_kind=error.kind, suggestions=list(error.suggestions))


# ─── Inputs ──────────────────────────────────────────────────────────────────


class ListTechsInput(BaseModel):
    category: Optional[Category] = None


class AnalyzeTechInput(BaseModel):
    technology: str = Field(min_length=1)
    context: Context = Context.DEFAULT


class CompareTechsInput(BaseModel):
    technologies: list[str]
    context: Context = Context.DEFAULT


class ScoreStackInput(BaseModel):
    project_type: ProjectType
    scale: Scale = Scale.MVP
    priorities: list[Priority] = Field(default_factory=list, max_length=3)
    constraints: list[str] = Field(default_factory=list, max_length=20)


class RecommendStackInput(ScoreStackInput):
    project_name: Optional[str] = Field(None, max_length=100)
    project_description: Optional[str] = Field(None, max_length=2000)
    wait_for_completion: bool = True


class RecommendStackDemoInput(BaseModel):
    project_type: ProjectType
    scale: Scale = Scale.MVP


class GetBlueprintInput(BaseModel):
    blueprint_id: UUID


M = TypeVar("M", bound=BaseModel)


def parse_input(model: type[M], raw: dict[str, Any]) -> M:
    """Validate raw arguments. Missing (None) arguments fall back to model defaults."""
    try:
        return model.model_validate({k: v for k, v in raw.items() if v is not None})
    except ValidationError as exc:
        problems = []
        for err in exc.errors():
            field = ".".join(str(p) for p in err["loc"]) or "input"
            problems.append(f"{field}: {err['msg']}")
        raise InvalidInputError(problems) from exc


# ─── Error boundary ──────────────────────────────────────────────────────────


def tool_boundary(
    fallback: str,
    hints: Optional[dict[ErrorKind, list[str]]] = None,
) -> Callable[[Callable[..., Awaitable[ToolResult]]], Callable[..., Awaitable[ToolResult]]]:
    """Convert every failure of the wrapped tool into an error ``ToolResult``.

    ``hints`` replace the suggestions of matching error kinds with advice
    specific to the tool.
    """

    def decorator(fn: Callable[..., Awaitable[ToolResult]]) -> Callable[..., Awaitable[ToolResult]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> ToolResult:
            try:
                return await fn(*args, **kwargs)
            except StacksFinderError as exc:
                if hints and exc.kind in hints:
                    exc.suggestions = list(hints[exc.kind])
                logger.debug("%s failed: %s %s", fn.__name__, exc.kind.value, exc.message)
                return ToolResult.from_error(exc)
            except Exception as exc:
                logger.error("Unexpected failure in %s: %s", fn.__name__, exc, exc_info=True)
                return ToolResult.from_error(StacksFinderError(ErrorKind.API_ERROR, str(exc) or fallback))

        return wrapper

    return decorator


# ─── Formatting helpers ──────────────────────────────────────────────────────


def _title(value: str) -> str:
    return " ".join(part.capitalize() for part in value.split("-"))


def _footer(version: str) -> str:
    return f"\n\nData version: {version}"


def format_technology_list(catalog: Catalog, category: Optional[Category]) -> str:
    def section(cat: Category, techs: list) -> str:
        return f"## {cat.value}\n" + "\n".join(f"- {t.id} ({t.name})" for t in techs)

    if category is not None:
        techs = catalog.by_category(category)
        body = section(category, techs) if techs else "_No technologies in this category._"
        return f'Available technologies in "{category.value}" ({len(techs)} total):\n\n{body}' + _footer(catalog.version)

    sections = [section(cat, techs) for cat, techs in catalog.grouped_by_category().items() if techs]
    return f"Available technologies ({len(catalog)} total):\n\n" + "\n\n".join(sections) + _footer(catalog.version)


def format_analysis(report: TechnologyReport, version: str) -> str:
    tech = report.technology
    lines = [
        f"## {tech.name} Analysis (context: {report.context.value})",
        "",
        f"**Category**: {tech.category.value}",
        f"**Overall Score**: {report.overall}/100 ({report.grade})",
        f"**URL**: {tech.url}",
        "",
        "### Scores by Dimension",
        "| Dimension | Score | Grade |",
        "|-----------|-------|-------|",
    ]
    lines += [f"| {d.label} | {d.score} | {d.grade} |" for d in report.breakdown]
    if report.strengths:
        lines += ["", "### Strengths"]
        lines += [f"- **{d.label}** ({d.score}/100)" for d in report.strengths]
    if report.weaknesses:
        lines += ["", "### Weaknesses"]
        lines += [f"- {d.label} ({d.score}/100)" for d in report.weaknesses]
    if report.compatible:
        lines += ["", "### Compatible Technologies", ", ".join(report.compatible)]
    return "\n".join(lines) + _footer(version)


def format_comparison(result: ComparisonResult, version: str, input_order: list[str]) -> str:
    names = {t.id: t.name for t in result.ranking}
    lines = [
        f"## Comparison: {' vs '.join(names[i] for i in input_order)} (context: {result.context.value})",
        "",
        "### Overall Scores",
        "| Technology | Score | Grade |",
        "|------------|-------|-------|",
    ]
    lines += [f"| {t.name} | {t.overall} | {t.grade} |" for t in result.ranking]

    lines += ["", "### Per-Dimension Winners", "| Dimension | Winner | Margin | Notes |", "|-----------|--------|--------|-------|"]
    for w in result.winners:
        if w.is_tie:
            lines.append(f"| {w.label} | Tie | - | {w.note} |")
        else:
            lines.append(f"| {w.label} | {names[w.winner]} | +{w.margin} | {w.note} |")

    lines += ["", "### Compatibility Matrix", "| Pair | Compatible | Notes |", "|------|------------|-------|"]
    lines += [f"| {e.label} | {'Yes' if e.compatible else 'No'} | {e.note} |" for e in result.compatibility]

    lines += ["", f"**Verdict**: {result.verdict}"]
    if result.trade_offs:
        lines += ["", "**Trade-offs**:"]
        lines += [f"- {t}" for t in result.trade_offs]
    return "\n".join(lines) + _footer(version)


def format_stack_table(project_type: ProjectType, scale: Scale, rows: list[tuple[str, str, int, str]]) -> str:
    lines = [
        f"## Recommended Stack for {_title(project_type.value)} ({scale.value})",
        "",
        "| Category | Technology | Score | Grade |",
        "|----------|------------|-------|-------|",
    ]
    lines += [f"| {category} | {name} | {score} | {grade} |" for category, name, score, grade in rows]
    return "\n".join(lines)


def format_demo_stack(project_type: ProjectType, scale: Scale, picks: list[StackPick], version: str) -> str:
    text = format_stack_table(project_type, scale, [(p.category.value, p.name, p.score, p.grade) for p in picks])
    text += (
        "\n\n**Confidence**: medium (demo mode - no priorities/constraints applied)"
        "\n\n---\n\n**Next steps:**"
        '\n- Analyze a tech: `analyze_tech({ technology: "nextjs" })`'
        '\n- Compare alternatives: `compare_techs({ technologies: ["nextjs", "sveltekit"] })`'
        "\n- Full recommendation with priorities: `recommend_stack()`"
        "\n\n---"
    )
    return text + _footer(version)


def format_score_response(response: ScoreResponse, project_type: ProjectType, scale: Scale) -> str:
    stacks = []
    for cat in response.categories:
        pick = next((t for t in cat.technologies if t.is_recommended), None)
        if pick is None and cat.technologies:
            pick = cat.technologies[0]
        if pick is not None:
            stacks.append({"category": cat.category, "technology": pick.name, "score": pick.score, "grade": pick.grade})

    text = format_stack_table(project_type, scale, [(s["category"], s["technology"], s["score"], s["grade"]) for s in stacks])
    confidence = response.confidence.level if response.confidence else "medium"
    text += f"\n\n**Confidence**: {confidence}"
    if response.request_hash:
        text += f"\n**Request ID**: {response.request_hash}"
    payload = {"stacks": stacks, "confidence": confidence, "appliedWeights": response.applied_weights}
    text += f"\n\n<json>\n{json.dumps(payload)}\n</json>"
    return text


def format_blueprint(blueprint: Blueprint) -> str:
    context = blueprint.project_context
    project_name = (context and context.project_name) or "Unnamed Project"
    project_type = (context and context.project_type) or "Unknown"
    scale = (context and context.scale) or "mvp"
    created = f"{blueprint.created_at:%B} {blueprint.created_at.day}, {blueprint.created_at.year}"

    lines = [
        f"## Blueprint: {project_name}",
        "",
        f"**ID**: {blueprint.id}",
        f"**Type**: {project_type}",
        f"**Scale**: {scale}",
        f"**Created**: {created}",
        "",
        "### Selected Stack",
        "| Category | Technology |",
        "|----------|------------|",
    ]
    lines += [f"| {t.category} | {t.technology} |" for t in blueprint.selected_techs]
    if blueprint.narrative:
        lines += ["", "### Narrative", blueprint.narrative]
    return "\n".join(lines)


def format_job_started(job: Job) -> str:
    return "\n".join([
        "## Blueprint Generation Started",
        "",
        f"**Job ID**: {job.job_id}",
        f"**Project ID**: {job.project_id or 'unknown'}",
        f"**Status**: {job.status.value}",
        f"**Progress**: {job.progress}%",
        "",
        f"Poll the job status at: {job.links.job or f'/api/v1/jobs/{job.job_id}'}",
        f"Once complete, fetch the blueprint at: {job.links.blueprint or 'TBD'}",
        "",
        "---",
        "*Source: MCP Server*",
    ])


# ─── Local tools ─────────────────────────────────────────────────────────────


@tool_boundary("Failed to list technologies")
async def execute_list_technologies(catalog: Catalog, raw: dict[str, Any]) -> ToolResult:
    params = parse_input(ListTechsInput, raw)
    return ToolResult(text=format_technology_list(catalog, params.category))


@tool_boundary("Failed to analyze technology")
async def execute_analyze_tech(catalog: Catalog, raw: dict[str, Any]) -> ToolResult:
    params = parse_input(AnalyzeTechInput, raw)
    report = comparison.analyze(catalog, params.technology, params.context)
    return ToolResult(text=format_analysis(report, catalog.version))


@tool_boundary("Failed to compare technologies")
async def execute_compare_techs(catalog: Catalog, raw: dict[str, Any]) -> ToolResult:
    params = parse_input(CompareTechsInput, raw)
    result = comparison.compare(catalog, params.technologies, params.context)
    return ToolResult(text=format_comparison(result, catalog.version, params.technologies))


@tool_boundary("Failed to build demo recommendation")
async def execute_recommend_stack_demo(catalog: Catalog, usage: UsageCounter, raw: dict[str, Any]) -> ToolResult:
    params = parse_input(RecommendStackDemoInput, raw)
    if not await usage.claim():
        device_id = await usage.device_id()
        return ToolResult(
            text=(
                "## Daily Demo Limit Reached\n\n"
                "You've already used the demo today. Try again tomorrow or use `recommend_stack()` for full access."
                f"\n\n---\n*Device ID: {device_id[:8]}...*"
            ),
            is_error=True,
            error_kind=ErrorKind.RATE_LIMITED,
            suggestions=["Try again tomorrow (UTC)", f"Get an API key for unlimited recommendations: {API_KEY_URL}"],
        )
    picks = comparison.select_demo_stack(catalog, params.project_type, params.scale)
    return ToolResult(text=format_demo_stack(params.project_type, params.scale, picks, catalog.version))


# ─── Remote tools ────────────────────────────────────────────────────────────


@tool_boundary(
    "Failed to get recommendations",
    hints={
        ErrorKind.CONFIG_ERROR: [
            "Set STACKSFINDER_API_KEY to a valid Pro or Team API key.",
            f"Get your API key from {API_KEY_URL}",
            "Or try recommend_stack_demo for a free daily recommendation.",
        ],
    },
)
async def execute_score_stack(client: RemoteClient, raw: dict[str, Any]) -> ToolResult:
    params = parse_input(ScoreStackInput, raw)
    body = stacksfinder.build_score_request(params.project_type, params.scale, params.priorities, params.constraints)
    response = await stacksfinder.score(client, body)
    return ToolResult(text=format_score_response(response, params.project_type, params.scale))


@tool_boundary(
    "Failed to create blueprint",
    hints={
        ErrorKind.CONFIG_ERROR: [
            "Ensure STACKSFINDER_API_KEY is set with a valid Pro or Team API key.",
            f"Get your API key from {API_KEY_URL}",
        ],
        ErrorKind.UNAUTHORIZED: [
            "Your API key may be invalid or missing the 'blueprint:write' scope.",
            f"Generate a new API key with the correct permissions at {API_KEY_URL}",
        ],
        ErrorKind.RATE_LIMITED: [
            "You have exceeded your monthly blueprint quota.",
            f"Upgrade your plan at {PRICING_URL}",
        ],
    },
)
async def execute_recommend_stack(
    poller: JobPoller,
    raw: dict[str, Any],
    cancel: Optional[CancellationToken] = None,
) -> ToolResult:
    params = parse_input(RecommendStackInput, raw)
    body = stacksfinder.build_blueprint_request(
        params.project_type,
        params.scale,
        params.priorities,
        params.constraints,
        project_name=params.project_name,
        project_description=params.project_description,
    )
    job = await poller.submit(body)

    if job.is_terminal:
        blueprint = await poller.resolve(job)
        return ToolResult(text=f"## Blueprint Created (Cached)\n\n{format_blueprint(blueprint)}\n\n---\n*Source: MCP Server*")

    if not params.wait_for_completion:
        return ToolResult(text=format_job_started(job))

    logger.debug("Polling job %s until completion", job.job_id)
    job = await poller.wait(job, cancel)
    blueprint = await poller.resolve(job)
    return ToolResult(
        text=(
            f"## Blueprint Created Successfully\n\n{format_blueprint(blueprint)}\n\n---\n"
            f"**Job ID**: {job.job_id}\n**Project ID**: {job.project_id or 'unknown'}\n*Source: MCP Server*"
        )
    )


@tool_boundary(
    "Failed to fetch blueprint",
    hints={
        ErrorKind.NOT_FOUND: [
            "Blueprints are generated via recommend_stack or the StacksFinder web UI.",
            "Visit https://stacksfinder.com to create a new blueprint.",
        ],
        ErrorKind.CONFIG_ERROR: [
            "Set STACKSFINDER_API_KEY to fetch blueprints.",
            f"Get your API key from {API_KEY_URL}",
        ],
    },
)
async def execute_get_blueprint(client: RemoteClient, raw: dict[str, Any]) -> ToolResult:
    params = parse_input(GetBlueprintInput, raw)
    blueprint = await stacksfinder.get_blueprint(client, str(params.blueprint_id))
    return ToolResult(text=format_blueprint(blueprint))
