"""MCP server: funnel-design tools over stdio.

Protocol: JSON-RPC 2.0 over stdio (NDJSON). Stdout carries protocol
messages only; logging goes to stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

from funneldesign.config import FunnelConfig
from funneldesign.storage import Storage, StorageError
from funneldesign.tools import ToolDefinition, get_funnel_tools, to_jsonable

logger = logging.getLogger(__name__)

METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603


# ── JSON-RPC 2.0 helpers ─────────────────────────────────────


def jsonrpc_result(req_id, result):
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def jsonrpc_error(req_id, code, message):
    return {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}}


def text_content(text: str, is_error: bool = False) -> dict[str, Any]:
    content: dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        content["isError"] = True
    return content


def json_content(data: Any) -> dict[str, Any]:
    return text_content(json.dumps(to_jsonable(data), indent=2, ensure_ascii=False))


# ── Server ───────────────────────────────────────────────────


class FunnelServer:
    """Dispatch MCP requests to the funnel tools."""

    def __init__(self, config: FunnelConfig, storage: Storage | None = None) -> None:
        self.config = config
        self.storage = storage or Storage.from_config(config)
        self.tools: dict[str, ToolDefinition] = get_funnel_tools()

    async def handle_request(self, req: dict) -> dict | None:
        req_id = req.get("id")
        method = req.get("method", "")

        # Notifications (no id) get no response
        if req_id is None:
            if method == "notifications/initialized":
                logger.info("Client initialized")
            return None

        if method == "initialize":
            server = self.config.server
            return jsonrpc_result(req_id, {
                "protocolVersion": server.protocol_version,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": server.name, "version": server.version},
            })

        if method == "tools/list":
            return jsonrpc_result(req_id, {"tools": [t.describe() for t in self.tools.values()]})

        if method == "tools/call":
            params = req.get("params") or {}
            return await self._call_tool(req_id, params.get("name", ""), params.get("arguments"))

        return jsonrpc_error(req_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    async def _call_tool(self, req_id, name: str, arguments: dict | None) -> dict:
        tool = self.tools.get(name)
        if tool is None:
            return jsonrpc_result(req_id, text_content(f"Unknown tool: {name}", is_error=True))

        try:
            result = await tool.call(self.storage, arguments)
        except StorageError as e:
            if e.is_expected():
                return jsonrpc_result(req_id, text_content(str(e), is_error=True))
            logger.error("Tool %s failed: %s (%s)", name, e, e.cause)
            return jsonrpc_error(req_id, INTERNAL_ERROR, str(e))

        if isinstance(result, str):
            return jsonrpc_result(req_id, text_content(result))
        return jsonrpc_result(req_id, json_content(result))

    # ── Stdio transport (NDJSON) ─────────────────────────────

    async def serve(self) -> None:
        logger.info("Starting %s (data_dir=%s)", self.config.server.name, self.storage.root)

        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await asyncio.get_running_loop().connect_read_pipe(lambda: protocol, sys.stdin)

        while True:
            line = await reader.readline()
            if not line:
                break
            line = line.decode("utf-8").strip()
            if not line:
                continue

            try:
                req = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Parse error: %s", e)
                continue
            if not isinstance(req, dict):
                logger.warning("Ignoring non-object message: %.80s", line)
                continue

            logger.debug("<- %s", req.get("method", "?"))
            try:
                response = await self.handle_request(req)
            except Exception as e:
                logger.exception("Handler error")
                response = jsonrpc_error(req.get("id"), INTERNAL_ERROR, str(e))
            if response:
                sys.stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
                sys.stdout.flush()

        logger.info("Stdin closed, shutting down")
