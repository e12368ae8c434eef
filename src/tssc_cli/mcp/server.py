"""MCPServer - stdio MCP server facing assistants.

Handles newline-delimited JSON-RPC requests (initialize, tools/list,
tools/call) and dispatches tool calls to the registered tools.
"""

from __future__ import annotations

import logging
from typing import Any

from .. import __version__
from .tools import Tool

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "tssc"

# JSON-RPC error codes
JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_REQUEST = -32600
JSONRPC_METHOD_NOT_FOUND = -32601
JSONRPC_INVALID_PARAMS = -32602
JSONRPC_INTERNAL_ERROR = -32603

INSTRUCTIONS = """\
This server deploys interdependent platform components onto a Kubernetes
cluster. Check 'tssc_deploy_status' first: it reports whether the cluster is
configured, whether the components and their required integrations resolve,
and the state of the installer job. Deploy with 'tssc_deploy'."""


class MCPServer:
    """Stdio MCP server serving the tssc tools."""

    def __init__(self, tools: list[Tool]):
        """Initialize MCPServer.

        Args:
            tools: Tools to serve, unique by name
        """
        self.tools = {tool.name: tool for tool in tools}

    async def handle_request(self, request: Any) -> dict[str, Any] | None:
        """Handle incoming JSON-RPC request.

        Args:
            request: JSON-RPC request object

        Returns:
            JSON-RPC response object, or None for notifications (no id)
        """
        if not isinstance(request, dict):
            logger.warning(f"Invalid request: {request!r}")
            return self._make_error_response(
                None, JSONRPC_INVALID_REQUEST, "Invalid request: expected a JSON object"
            )

        method = request.get("method", "")
        request_id = request.get("id")
        params = request.get("params") or {}
        if not isinstance(params, dict):
            params = {}

        # JSON-RPC notifications have no id and never receive a response
        is_notification = "id" not in request

        logger.debug(
            f"Handling request: method={method} id={request_id} notification={is_notification}"
        )

        if is_notification:
            logger.debug(f"Received notification: {method}")
            return None

        try:
            if method == "initialize":
                return self._make_response(request_id, self._initialize_result())
            elif method == "ping":
                return self._make_response(request_id, {})
            elif method == "tools/list":
                tools = [tool.to_dict() for tool in self.tools.values()]
                return self._make_response(request_id, {"tools": tools})
            elif method == "tools/call":
                return await self._handle_tools_call(request_id, params)
            else:
                return self._make_error_response(
                    request_id, JSONRPC_METHOD_NOT_FOUND, f"Method not found: {method}"
                )
        except Exception as e:
            logger.exception(f"Error handling request: {e}")
            return self._make_error_response(
                request_id, JSONRPC_INTERNAL_ERROR, f"Internal server error: {e}"
            )

    def _initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
            "instructions": INSTRUCTIONS,
        }

    async def _handle_tools_call(self, request_id: Any, params: dict[str, Any]) -> dict[str, Any]:
        """Handle tools/call request - run the tool handler."""
        name = params.get("name")
        tool = self.tools.get(name)
        if tool is None:
            return self._make_error_response(
                request_id, JSONRPC_INVALID_PARAMS, f"Unknown tool: {name}"
            )
        arguments = params.get("arguments") or {}
        logger.info(f"Calling tool {name}")
        result = await tool.handler(arguments)
        return self._make_response(request_id, result)

    def _make_response(self, request_id: Any, result: dict[str, Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _make_error_response(self, request_id: Any, code: int, message: str) -> dict[str, Any]:
        """Create JSON-RPC error response."""
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": code, "message": message},
        }
