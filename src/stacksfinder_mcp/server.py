"""StacksFinder MCP Server.

FastMCP server with 7 tools: catalog discovery, analysis and comparison run
locally; scoring and blueprints go to the StacksFinder API.
Run: stacksfinder-mcp
"""

import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.types import ToolAnnotations

from . import tools
from .config import Settings, load_settings
from .core.catalog import Catalog, load_catalog
from .core.clients.jobs import JobPoller
from .core.clients.remote import RemoteClient
from .usage import UsageCounter

logger = logging.getLogger(__name__)

LOCAL_READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
REMOTE_READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)
REMOTE_CREATE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True)
DEMO = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False)


@dataclass
class Services:
    """Everything the tools need, built once per server run."""

    settings: Settings
    catalog: Catalog
    client: RemoteClient
    usage: UsageCounter

    def poller(self) -> JobPoller:
        return JobPoller(self.client)


def build_services(settings: Settings) -> Services:
    return Services(
        settings=settings,
        catalog=load_catalog(),
        client=RemoteClient(settings.base_url, settings.api_key, timeout=settings.timeout_seconds),
        usage=UsageCounter(settings.data_dir),
    )


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[Services]:
    """Configure logging, load the catalog and open the usage store."""
    settings = load_settings()
    # stdout carries the MCP protocol.
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    services = build_services(settings)
    await services.usage.init()
    if not settings.has_api_key:
        logger.info("STACKSFINDER_API_KEY not set; score_stack, recommend_stack and get_blueprint are unavailable")
    try:
        yield services
    finally:
        await services.usage.close()


mcp = FastMCP(
    "StacksFinder",
    instructions="Tech stack recommendations for your projects. List, analyze and compare technologies with context-aware scores, then generate a full blueprint.",
    lifespan=lifespan,
)


def _services(ctx: Context) -> Services:
    return ctx.request_context.lifespan_context


# ─── Local tools ─────────────────────────────────────────────────────────────


@mcp.tool(annotations=LOCAL_READ_ONLY)
async def list_technologies(ctx: Context, category: Optional[str] = None) -> dict:
    """Lists all available technology IDs grouped by category. Start here for discovery.

    Args:
        category: Optional filter: frontend, backend, meta-framework, database, orm, auth, hosting or payments.
    """
    result = await tools.execute_list_technologies(_services(ctx).catalog, {"category": category})
    return result.model_dump(mode="json")


@mcp.tool(annotations=LOCAL_READ_ONLY)
async def analyze_tech(ctx: Context, technology: str, context: Optional[str] = None) -> dict:
    """Detailed analysis of one technology: 6-dimension scores, strengths, weaknesses and compatible technologies.

    Args:
        technology: Technology ID, e.g. 'nextjs'. Use list_technologies for valid IDs.
        context: Scoring context: default, mvp or enterprise.
    """
    result = await tools.execute_analyze_tech(_services(ctx).catalog, {"technology": technology, "context": context})
    return result.model_dump(mode="json")


@mcp.tool(annotations=LOCAL_READ_ONLY)
async def compare_techs(ctx: Context, technologies: list[str], context: Optional[str] = None) -> dict:
    """Side-by-side comparison of 2-4 technologies with per-dimension winners and a compatibility matrix.

    Args:
        technologies: 2 to 4 distinct technology IDs, e.g. ['nextjs', 'sveltekit'].
        context: Scoring context: default, mvp or enterprise.
    """
    result = await tools.execute_compare_techs(_services(ctx).catalog, {"technologies": technologies, "context": context})
    return result.model_dump(mode="json")


@mcp.tool(annotations=DEMO)
async def recommend_stack_demo(ctx: Context, project_type: str, scale: Optional[str] = None) -> dict:
    """Free stack recommendation computed locally. Limited to one use per day.

    Args:
        project_type: web-app, mobile-app, api, desktop, cli, library, e-commerce, saas or marketplace.
        scale: mvp, startup, growth or enterprise. Default 'mvp'.
    """
    services = _services(ctx)
    result = await tools.execute_recommend_stack_demo(services.catalog, services.usage, {"project_type": project_type, "scale": scale})
    return result.model_dump(mode="json")


# ─── Remote tools (API key required) ─────────────────────────────────────────


@mcp.tool(annotations=REMOTE_READ_ONLY)
async def score_stack(
    ctx: Context,
    project_type: str,
    scale: Optional[str] = None,
    priorities: Optional[list[str]] = None,
    constraints: Optional[list[str]] = None,
) -> dict:
    """Real-time stack scoring from the StacksFinder API with priority and constraint adjustments.

    Args:
        project_type: web-app, mobile-app, api, desktop, cli, library, e-commerce, saas or marketplace.
        scale: mvp, startup, growth or enterprise. Default 'mvp'.
        priorities: Up to 3 of time-to-market, scalability, developer-experience, cost-efficiency, performance, security, maintainability.
        constraints: Project constraint IDs, e.g. 'real-time', 'multi-tenant'.
    """
    result = await tools.execute_score_stack(
        _services(ctx).client,
        {"project_type": project_type, "scale": scale, "priorities": priorities, "constraints": constraints},
    )
    return result.model_dump(mode="json")


@mcp.tool(annotations=REMOTE_CREATE)
async def recommend_stack(
    ctx: Context,
    project_type: str,
    scale: Optional[str] = None,
    priorities: Optional[list[str]] = None,
    constraints: Optional[list[str]] = None,
    project_name: Optional[str] = None,
    project_description: Optional[str] = None,
    wait_for_completion: bool = True,
) -> dict:
    """Generates a full stack blueprint on the StacksFinder API and waits for the result.

    Args:
        project_type: web-app, mobile-app, api, desktop, cli, library, e-commerce, saas or marketplace.
        scale: mvp, startup, growth or enterprise. Default 'mvp'.
        priorities: Up to 3 priorities, e.g. ['time-to-market', 'cost-efficiency'].
        constraints: Up to 20 project constraint IDs.
        project_name: Optional project name (max 100 characters).
        project_description: Optional description (max 2000 characters).
        wait_for_completion: Poll until the blueprint is ready. If false, return the job handle immediately.
    """
    result = await tools.execute_recommend_stack(
        _services(ctx).poller(),
        {
            "project_type": project_type,
            "scale": scale,
            "priorities": priorities,
            "constraints": constraints,
            "project_name": project_name,
            "project_description": project_description,
            "wait_for_completion": wait_for_completion,
        },
    )
    return result.model_dump(mode="json")


@mcp.tool(annotations=REMOTE_READ_ONLY)
async def get_blueprint(ctx: Context, blueprint_id: str) -> dict:
    """Fetches an existing blueprint by ID.

    Args:
        blueprint_id: Blueprint UUID.
    """
    result = await tools.execute_get_blueprint(_services(ctx).client, {"blueprint_id": blueprint_id})
    return result.model_dump(mode="json")


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
