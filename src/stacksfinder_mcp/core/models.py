"""Pydantic data models: the shared business objects.

Catalog records, engine reports, and the payloads exchanged with the
StacksFinder API. The tool layer and the server adapter both speak in
terms of these models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Technology category."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    META_FRAMEWORK = "meta-framework"
    DATABASE = "database"
    ORM = "orm"
    AUTH = "auth"
    HOSTING = "hosting"
    PAYMENTS = "payments"


class Dimension(str, Enum):
    """Quality axis a technology is scored on (0-100)."""

    PERFORMANCE = "performance"
    DEVELOPER_EXPERIENCE = "developer-experience"
    ECOSYSTEM = "ecosystem"
    MAINTAINABILITY = "maintainability"
    COST = "cost"
    COMPLIANCE = "compliance"


DIMENSION_LABELS: dict[Dimension, str] = {
    Dimension.PERFORMANCE: "Performance",
    Dimension.DEVELOPER_EXPERIENCE: "Developer Experience",
    Dimension.ECOSYSTEM: "Ecosystem",
    Dimension.MAINTAINABILITY: "Maintainability",
    Dimension.COST: "Cost Efficiency",
    Dimension.COMPLIANCE: "Compliance",
}


class Context(str, Enum):
    """Weighting profile applied at scoring time."""

    DEFAULT = "default"
    MVP = "mvp"
    ENTERPRISE = "enterprise"


class ProjectType(str, Enum):
    WEB_APP = "web-app"
    MOBILE_APP = "mobile-app"
    API = "api"
    DESKTOP = "desktop"
    CLI = "cli"
    LIBRARY = "library"
    E_COMMERCE = "e-commerce"
    SAAS = "saas"
    MARKETPLACE = "marketplace"


class Scale(str, Enum):
    MVP = "mvp"
    STARTUP = "startup"
    GROWTH = "growth"
    ENTERPRISE = "enterprise"


class Priority(str, Enum):
    TIME_TO_MARKET = "time-to-market"
    SCALABILITY = "scalability"
    DEVELOPER_EXPERIENCE = "developer-experience"
    COST_EFFICIENCY = "cost-efficiency"
    PERFORMANCE = "performance"
    SECURITY = "security"
    MAINTAINABILITY = "maintainability"


class Technology(BaseModel):
    """A catalog entry. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: Category
    url: str
    scores: dict[Dimension, int]
    compatible_with: frozenset[str] = Field(default_factory=frozenset, description="Declared compatible ids (one-directional)")
    conflicts_with: frozenset[str] = Field(default_factory=frozenset, description="Declared hard incompatibilities (one-directional)")

    @field_validator("scores")
    @classmethod
    def _scores_in_range(cls, value: dict[Dimension, int]) -> dict[Dimension, int]:
        for dim, score in value.items():
            if not 0 <= score <= 100:
                raise ValueError(f"score for {dim.value} must be within 0-100, got {score}")
        return value


# ─── Engine reports ──────────────────────────────────────────────────────────


class DimensionScore(BaseModel):
    """One row of a per-dimension breakdown."""

    dimension: Dimension
    label: str
    score: int
    grade: str


class TechnologyReport(BaseModel):
    """Single-technology analysis under a context."""

    technology: Technology
    context: Context
    overall: int
    grade: str
    breakdown: list[DimensionScore]
    strengths: list[DimensionScore] = Field(default_factory=list)
    weaknesses: list[DimensionScore] = Field(default_factory=list)
    compatible: list[str] = Field(default_factory=list, description="Display names of declared-compatible technologies")


class RankedTechnology(BaseModel):
    """A technology scored under a context, as it appears in a ranking."""

    id: str
    name: str
    overall: int
    grade: str
    scores: dict[Dimension, int]


class DimensionWinner(BaseModel):
    """Winner of one dimension in a comparison. ``winner`` is a technology id or ``"tie"``."""

    dimension: Dimension
    label: str
    winner: str
    margin: int
    note: str

    @property
    def is_tie(self) -> bool:
        return self.winner == "tie"


class CompatibilityEntry(BaseModel):
    """Compatibility judgment for one unordered pair."""

    tech_a: str
    tech_b: str
    compatible: bool
    note: str

    @property
    def label(self) -> str:
        return f"{self.tech_a} ↔ {self.tech_b}"


class ComparisonResult(BaseModel):
    """N-way comparison. Ephemeral, built per request."""

    context: Context
    ranking: list[RankedTechnology]
    winners: list[DimensionWinner]
    compatibility: list[CompatibilityEntry]
    verdict: str
    is_tie: bool = False
    trade_offs: list[str] = Field(default_factory=list)


class StackPick(BaseModel):
    """One category slot of a locally selected demo stack."""

    category: Category
    technology_id: str
    name: str
    score: int
    grade: str


# ─── StacksFinder API payloads ───────────────────────────────────────────────


class JobStatus(str, Enum):
    """Lifecycle of a server-side blueprint job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})


class JobLinks(BaseModel):
    job: Optional[str] = None
    blueprint: Optional[str] = None


class Job(BaseModel):
    """Handle to a long-running blueprint generation."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    project_id: Optional[str] = Field(None, alias="projectId")
    status: JobStatus
    progress: int = Field(0, ge=0, le=100)
    result_ref: Optional[str] = Field(None, alias="resultRef")
    result: Optional[dict[str, Any]] = None
    error_code: Optional[str] = Field(None, alias="errorCode")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    links: JobLinks = Field(default_factory=JobLinks, alias="_links")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class JobUpdate(BaseModel):
    """A job-status poll response. Only the fields the server sent are applied."""

    model_config = ConfigDict(populate_by_name=True)

    status: JobStatus
    progress: Optional[int] = Field(None, ge=0, le=100)
    result_ref: Optional[str] = Field(None, alias="resultRef")
    result: Optional[dict[str, Any]] = None
    error_code: Optional[str] = Field(None, alias="errorCode")
    error_message: Optional[str] = Field(None, alias="errorMessage")


class SelectedTech(BaseModel):
    category: str
    technology: str


class ProjectContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_name: Optional[str] = Field(None, alias="projectName")
    project_type: Optional[str] = Field(None, alias="projectType")
    scale: Optional[str] = None


class Blueprint(BaseModel):
    """A generated stack recommendation (whitelisted fields only)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    project_id: Optional[str] = Field(None, alias="projectId")
    narrative: Optional[str] = None
    selected_techs: list[SelectedTech] = Field(default_factory=list, alias="selectedTechs")
    created_at: datetime = Field(alias="createdAt")
    project_context: Optional[ProjectContext] = Field(None, alias="projectContext")


class ScoredTech(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    score: int
    grade: str
    is_recommended: bool = Field(False, alias="isRecommended")


class CategoryScores(BaseModel):
    category: str
    technologies: list[ScoredTech] = Field(default_factory=list)


class Confidence(BaseModel):
    level: str = "medium"


class ScoreResponse(BaseModel):
    """Response of the real-time scoring endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    categories: list[CategoryScores] = Field(default_factory=list)
    confidence: Optional[Confidence] = None
    applied_weights: dict[str, float] = Field(default_factory=dict, alias="appliedWeights")
    request_hash: Optional[str] = Field(None, alias="requestHash")
