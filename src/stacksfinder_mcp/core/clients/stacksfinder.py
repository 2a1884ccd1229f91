"""StacksFinder API endpoint bindings.

API base: https://stacksfinder.com/api/v1
Auth: bearer API key (Pro or Team tier).
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import ErrorKind, StacksFinderError
from ..models import Blueprint, Job, JobUpdate, Priority, ProjectType, Scale, ScoreResponse
from .remote import RemoteClient

logger = logging.getLogger(__name__)

SCORE_PATH = "/api/v1/score"
BLUEPRINTS_PATH = "/api/v1/blueprints"
JOBS_PATH = "/api/v1/jobs"

REQUEST_SOURCE = "mcp"

M = TypeVar("M", bound=BaseModel)


def parse_payload(model: type[M], data: Any, what: str) -> M:
    """Validate an API payload, turning schema drift into an API_ERROR."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.error("Unexpected %s payload: %s", what, exc)
        raise StacksFinderError(ErrorKind.API_ERROR, f"Unexpected {what} response from the StacksFinder API") from exc


def _unique(priorities: list[Priority]) -> list[str]:
    seen: list[str] = []
    for p in priorities:
        if p.value not in seen:
            seen.append(p.value)
    return seen[:3]


def build_score_request(
    project_type: ProjectType,
    scale: Scale,
    priorities: list[Priority],
    constraints: list[str],
) -> dict:
    return {
        "context": {
            "projectType": project_type.value,
            "scale": scale.value,
            "priorities": _unique(priorities),
            "constraintIds": list(constraints),
        },
        "selectedTechs": {},
        "constraintIds": list(constraints),
    }


def build_blueprint_request(
    project_type: ProjectType,
    scale: Scale,
    priorities: list[Priority],
    constraints: list[str],
    project_name: Optional[str] = None,
    project_description: Optional[str] = None,
) -> dict:
    context: dict[str, Any] = {
        "projectType": project_type.value,
        "scale": scale.value,
        "priorities": _unique(priorities),
        "constraintIds": list(constraints),
    }
    if project_name:
        context["projectName"] = project_name
    if project_description:
        context["projectDescription"] = project_description

    body: dict[str, Any] = {
        "projectContext": context,
        "source": REQUEST_SOURCE,
        "mcpToolName": "recommend_stack",
    }
    if project_name:
        body["projectName"] = project_name
    return body


async def score(client: RemoteClient, body: dict) -> ScoreResponse:
    """Real-time scoring. Identical bodies are served from the response cache."""
    data = await client.request("POST", SCORE_PATH, body, cacheable=True)
    return parse_payload(ScoreResponse, data, "score")


async def create_blueprint(client: RemoteClient, body: dict) -> Job:
    """Submit a blueprint generation job. Never cached: every call is a new job."""
    data = await client.request("POST", BLUEPRINTS_PATH, body)
    job = parse_payload(Job, data, "blueprint job")
    logger.debug("Created blueprint job %s (status %s)", job.job_id, job.status.value)
    return job


async def job_status(client: RemoteClient, job_id: str) -> JobUpdate:
    data = await client.request("GET", f"{JOBS_PATH}/{job_id}")
    return parse_payload(JobUpdate, data, "job status")


async def get_blueprint(client: RemoteClient, blueprint_id: str) -> Blueprint:
    data = await client.request("GET", f"{BLUEPRINTS_PATH}/{blueprint_id}", cacheable=True)
    return parse_payload(Blueprint, data, "blueprint")
