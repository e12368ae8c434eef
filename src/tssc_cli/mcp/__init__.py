"""MCP stdio front end.

Exposes the deployment status, deploy, configuration and integration
tools to assistants over newline-delimited JSON-RPC on stdin/stdout.
"""

from .server import MCPServer
from .tools import (
    CONFIG_GET_TOOL,
    DEPLOY_STATUS_TOOL,
    DEPLOY_TOOL,
    INTEGRATION_LIST_TOOL,
    ConfigTools,
    DeployTools,
    IntegrationTools,
    Tool,
    build_tools,
    error_result,
    text_result,
)

__all__ = [
    "MCPServer",
    # Tools
    "Tool",
    "ConfigTools",
    "DeployTools",
    "IntegrationTools",
    "build_tools",
    "text_result",
    "error_result",
    # Tool names
    "CONFIG_GET_TOOL",
    "DEPLOY_STATUS_TOOL",
    "DEPLOY_TOOL",
    "INTEGRATION_LIST_TOOL",
]
