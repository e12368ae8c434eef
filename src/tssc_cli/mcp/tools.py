"""MCP tools exposed by `tssc mcp-server`.

Each tool returns an MCP tool result. Missing configuration and taxonomy
errors become text results with guidance the assistant can relay to the
user; transport errors become results flagged with ``isError``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from ..cluster.errors import ClusterConfigNotFoundError, ClusterError
from ..deployment import Deployer
from ..formatters import describe_error
from ..integrations.base import secret_name
from ..integrations.manager import INTEGRATIONS, IntegrationManager
from ..resolver.errors import ResolverError

logger = logging.getLogger(__name__)

CONFIG_GET_TOOL = "tssc_config_get"
CONFIG_CREATE_TOOL = "tssc_config_create"
INTEGRATION_LIST_TOOL = "tssc_integration_list"
DEPLOY_STATUS_TOOL = "tssc_deploy_status"
DEPLOY_TOOL = "tssc_deploy"

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def text_result(text: str) -> dict[str, Any]:
    """Successful tool result."""
    return {"content": [{"type": "text", "text": text.strip("\n")}], "isError": False}


def error_result(text: str) -> dict[str, Any]:
    """Tool result reporting a failure."""
    return {"content": [{"type": "text", "text": text.strip("\n")}], "isError": True}


@dataclass
class Tool:
    """An MCP tool definition bound to its handler."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ConfigTools:
    """Cluster configuration tools."""

    def __init__(self, deployer: Deployer):
        self.deployer = deployer

    async def get_handler(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            config = await self.deployer.get_config()
        except ClusterConfigNotFoundError as e:
            return text_result(describe_error(e))
        except ClusterError as e:
            return error_result(describe_error(e))
        return text_result(
            f"Cluster configuration (namespace {config.namespace!r}):\n\n{config.raw}"
        )

    async def create_handler(self, arguments: dict[str, Any]) -> dict[str, Any]:
        document = arguments.get("config")
        if not isinstance(document, str) or not document.strip():
            return error_result("The 'config' argument must hold the configuration YAML.")
        try:
            config = await self.deployer.config_manager.create(
                document, force=bool(arguments.get("force", False))
            )
        except ValueError as e:
            return error_result(f"Invalid configuration: {e}")
        except ClusterError as e:
            return error_result(describe_error(e))

        namespace = self.deployer.config_manager.namespace
        lines = [f"Configuration stored in namespace {namespace!r}."]
        products = config.enabled_products
        if products:
            lines.append(f"Enabled products: {', '.join(products)}")
        lines += [
            "",
            f"Use '{INTEGRATION_LIST_TOOL}' to review the integrations, then "
            f"'{DEPLOY_STATUS_TOOL}' to check the deployment.",
        ]
        return text_result("\n".join(lines))

    def tools(self) -> list[Tool]:
        return [
            Tool(
                name=CONFIG_GET_TOOL,
                description="Shows the installer configuration stored in the cluster.",
                handler=self.get_handler,
            ),
            Tool(
                name=CONFIG_CREATE_TOOL,
                description=(
                    "Stores the installer configuration in the cluster. This is the first "
                    "step before configuring integrations and deploying."
                ),
                handler=self.create_handler,
                input_schema={
                    "type": "object",
                    "properties": {
                        "config": {
                            "type": "string",
                            "description": "Installer configuration YAML",
                        },
                        "force": {
                            "type": "boolean",
                            "description": "Overwrite an existing configuration",
                        },
                    },
                    "required": ["config"],
                },
            ),
        ]


class IntegrationTools:
    """Integration discovery tools."""

    def __init__(self, deployer: Deployer, manager: IntegrationManager):
        self.deployer = deployer
        self.manager = manager

    async def list_handler(self, arguments: dict[str, Any]) -> dict[str, Any]:
        configured: frozenset[str] | None = None
        try:
            config = await self.deployer.get_config()
            configured = await self.manager.configured_integrations(config)
        except ClusterConfigNotFoundError:
            configured = None
        except ClusterError as e:
            return error_result(describe_error(e))

        lines = ["Integrations supported by the installer:", ""]
        for name, info in sorted(INTEGRATIONS.items()):
            if configured is None:
                state = "unknown"
            else:
                state = "configured" if name in configured else "not configured"
            lines.append(f"- {name} ({info.kind}, {state}): {info.description}")
            lines.append(f"  secret: {secret_name(name)}")
            lines.append(f"  configure with: tssc integration {name} --help")
        if configured is None:
            lines += ["", "The cluster is not configured yet, so the configured state is unknown."]
        return text_result("\n".join(lines))

    def tools(self) -> list[Tool]:
        return [
            Tool(
                name=INTEGRATION_LIST_TOOL,
                description=(
                    "Lists the integrations the installer supports, whether each one is "
                    "configured, and how to configure it with the CLI."
                ),
                handler=self.list_handler,
            )
        ]


class DeployTools:
    """Deployment status and deploy tools."""

    def __init__(self, deployer: Deployer):
        self.deployer = deployer

    async def status_handler(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            status = await self.deployer.status()
        except ClusterError as e:
            return error_result(describe_error(e))
        if status.failed and status.error is None:
            return error_result(status.message)
        return text_result(status.message)

    async def deploy_handler(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            logs_cmd = await self.deployer.deploy()
        except ResolverError as e:
            return text_result(describe_error(e))
        except ClusterError as e:
            return error_result(describe_error(e))
        return text_result(
            "The installer job has been created successfully. Use the tool "
            f"'{DEPLOY_STATUS_TOOL}' to check the deployment status.\n\n"
            f"You can follow the logs by running:\n\n    {logs_cmd}"
        )

    def tools(self) -> list[Tool]:
        return [
            Tool(
                name=DEPLOY_STATUS_TOOL,
                description="Reports the status of the deploy Job running in the cluster.",
                handler=self.status_handler,
            ),
            Tool(
                name=DEPLOY_TOOL,
                description=(
                    "Deploys the components to the cluster, using the cluster configuration "
                    "to deploy them sequentially through the installer Job."
                ),
                handler=self.deploy_handler,
            ),
        ]


def build_tools(deployer: Deployer) -> list[Tool]:
    """Every tool served by the MCP server."""
    manager = IntegrationManager(deployer.kubectl)
    return [
        *ConfigTools(deployer).tools(),
        *IntegrationTools(deployer, manager).tools(),
        *DeployTools(deployer).tools(),
    ]
