"""
Tests for the MCP server wiring.
"""

from importlib.metadata import version

import pytest

from stacksfinder_mcp.server import Services, lifespan, mcp

EXPECTED_TOOLS = {
    "list_technologies",
    "analyze_tech",
    "compare_techs",
    "recommend_stack_demo",
    "score_stack",
    "recommend_stack",
    "get_blueprint",
}


class TestDependencies:
    """Test the installed MCP SDK line."""

    def test_mcp_sdk_is_the_1x_line(self):
        # FastMCP lives at mcp.server.fastmcp only in the 1.x releases.
        assert int(version("mcp").split(".")[0]) == 1


class TestToolRegistration:
    """Test the registered tool surface."""

    @pytest.mark.asyncio
    async def test_all_tools_registered(self):
        registered = {tool.name for tool in await mcp.list_tools()}
        assert registered == EXPECTED_TOOLS

    @pytest.mark.asyncio
    async def test_context_is_not_a_tool_argument(self):
        tools = {tool.name: tool for tool in await mcp.list_tools()}
        properties = tools["analyze_tech"].inputSchema["properties"]
        assert set(properties) == {"technology", "context"}
        assert "ctx" not in tools["compare_techs"].inputSchema["properties"]

    @pytest.mark.asyncio
    async def test_local_tools_are_read_only(self):
        tools = {tool.name: tool for tool in await mcp.list_tools()}
        assert tools["list_technologies"].annotations.readOnlyHint is True
        assert tools["recommend_stack"].annotations.readOnlyHint is False


class TestLifespan:
    """Test service construction."""

    @pytest.mark.asyncio
    async def test_builds_services(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STACKSFINDER_DATA_DIR", str(tmp_path))
        monkeypatch.delenv("STACKSFINDER_API_KEY", raising=False)

        async with lifespan(mcp) as services:
            assert isinstance(services, Services)
            assert len(services.catalog) > 0
            assert services.client.has_credentials is False
            assert await services.usage.used_today() is False

        assert (tmp_path / "usage.db").exists()
