"""Tests for MCP request dispatch."""

from __future__ import annotations

import json
import pytest
from pathlib import Path

from funneldesign.config import FunnelConfig
from funneldesign.server import INTERNAL_ERROR, METHOD_NOT_FOUND, FunnelServer
from funneldesign.storage import Collection


@pytest.fixture
def server(tmp_path: Path) -> FunnelServer:
    return FunnelServer(FunnelConfig(data_dir=tmp_path / "funnel-data"))


def tool_call(req_id: int, name: str, /, **arguments) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": req_id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }


def payload(response: dict):
    return json.loads(response["result"]["content"][0]["text"])


class TestProtocol:
    @pytest.mark.asyncio
    async def test_initialize(self, server: FunnelServer):
        resp = await server.handle_request({"jsonrpc": "2.0", "id": 1, "method": "initialize"})
        result = resp["result"]
        assert resp["id"] == 1
        assert result["protocolVersion"] == "2024-11-05"
        assert result["serverInfo"] == {"name": "funnel-design", "version": "1.0.0"}
        assert "tools" in result["capabilities"]

    @pytest.mark.asyncio
    async def test_notification_has_no_response(self, server: FunnelServer):
        resp = await server.handle_request(
            {"jsonrpc": "2.0", "method": "notifications/initialized"}
        )
        assert resp is None

    @pytest.mark.asyncio
    async def test_unknown_method(self, server: FunnelServer):
        resp = await server.handle_request({"jsonrpc": "2.0", "id": 2, "method": "resources/list"})
        assert resp["error"]["code"] == METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_tools_list(self, server: FunnelServer):
        resp = await server.handle_request({"jsonrpc": "2.0", "id": 3, "method": "tools/list"})
        tools = resp["result"]["tools"]
        names = [t["name"] for t in tools]
        assert names[0] == "create_project"
        assert "populate_framework" in names
        assert len(names) == 18
        assert all("inputSchema" in t for t in tools)


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_create_then_get(self, server: FunnelServer):
        created = await server.handle_request(tool_call(1, "create_project", name="Demo"))
        project = payload(created)
        assert project["name"] == "Demo"
        assert "isError" not in created["result"]

        fetched = payload(await server.handle_request(
            tool_call(2, "get_project", projectId=project["id"])
        ))
        assert fetched["project"]["id"] == project["id"]
        assert fetched["entities"] == []

    @pytest.mark.asyncio
    async def test_export_returns_raw_text(self, server: FunnelServer):
        project = payload(await server.handle_request(tool_call(1, "create_project", name="Text")))
        resp = await server.handle_request(
            tool_call(2, "export_project", projectId=project["id"], format="markdown")
        )
        assert resp["result"]["content"][0]["text"].startswith("# Text\n")

    @pytest.mark.asyncio
    async def test_not_found_is_tool_error(self, server: FunnelServer):
        resp = await server.handle_request(tool_call(1, "get_project", projectId="missing"))
        assert resp["result"]["isError"] is True
        assert resp["result"]["content"][0]["text"] == "Project missing not found"

    @pytest.mark.asyncio
    async def test_invalid_arguments_is_tool_error(self, server: FunnelServer):
        resp = await server.handle_request(tool_call(1, "create_project"))
        assert resp["result"]["isError"] is True
        assert "create_project" in resp["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_null_params(self, server: FunnelServer):
        resp = await server.handle_request(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": None}
        )
        assert resp["result"]["isError"] is True
        assert "Unknown tool" in resp["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_path_like_id_is_tool_error(self, server: FunnelServer):
        resp = await server.handle_request(
            tool_call(1, "delete_project", projectId="../entities/x")
        )
        assert resp["result"]["isError"] is True
        assert "Invalid projects id" in resp["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server: FunnelServer):
        resp = await server.handle_request(tool_call(1, "launch_rocket"))
        assert resp["result"]["isError"] is True
        assert "Unknown tool: launch_rocket" in resp["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_io_failure_is_internal_error(self, server: FunnelServer):
        server.storage.context.ensure_ready()
        corrupt = server.storage.context.path_for(Collection.PROJECTS, "broken")
        corrupt.write_text("{not json", encoding="utf-8")

        resp = await server.handle_request(tool_call(1, "get_project", projectId="broken"))
        assert resp["error"]["code"] == INTERNAL_ERROR
        assert "broken" in resp["error"]["message"]

    @pytest.mark.asyncio
    async def test_delete_reports_outcome(self, server: FunnelServer):
        resp = await server.handle_request(tool_call(1, "delete_project", projectId="ghost"))
        assert payload(resp) == {"success": False, "message": "Project ghost not found"}
