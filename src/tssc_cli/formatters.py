"""CLI output formatting helpers.

``describe_error`` turns every error the tool can raise into a message with
next steps, using the structured fields of the error rather than its text.
The same guidance is shared by the command line and the MCP tools.
"""

from __future__ import annotations

import json
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from .cluster.errors import ClusterConfigNotFoundError, ClusterError, KubectlNotFoundError
from .cluster.job import JobState
from .integrations.base import IntegrationAPIError, IntegrationValidationError
from .resolver.errors import ErrorKind, ResolverError
from .resolver.topology import ResolutionResult

# Error kinds grouped by the guidance they share
COLLECTION_KINDS = frozenset(
    {
        ErrorKind.INVALID_COLLECTION,
        ErrorKind.DEPENDENCY_NOT_FOUND,
        ErrorKind.CIRCULAR_DEPENDENCY,
    }
)
EXPRESSION_KINDS = frozenset({ErrorKind.INVALID_EXPRESSION, ErrorKind.UNKNOWN_INTEGRATION})


def _indent(text: str) -> str:
    return "\n".join(f"    {line}" if line else line for line in text.splitlines())


def _describe_collection(error: ResolverError) -> str:
    lines = [
        "ATTENTION: The installer set of dependencies (Helm charts) is not properly",
        "resolved. Check the dependency collection given to the installer; prefer",
        "the bundled collection (omit --collection).",
        "",
        _indent(error.message),
    ]
    if error.kind == ErrorKind.CIRCULAR_DEPENDENCY:
        lines += ["", f"Break the cycle: {' -> '.join(error.path)}"]
    elif error.kind == ErrorKind.DEPENDENCY_NOT_FOUND:
        lines += [
            "",
            f"Add {error.dependency!r} to the collection or remove it from "
            f"the dependsOn list of {error.component!r}.",
        ]
    return "\n".join(lines)


def _describe_expression(error: ResolverError) -> str:
    lines = [
        "ATTENTION: The installer set of dependencies (Helm charts) references an",
        "invalid required-integrations expression or an unknown integration name.",
        "Check the dependency collection given to the installer; prefer the bundled",
        "collection (omit --collection).",
        "",
        _indent(error.message),
    ]
    if error.kind == ErrorKind.UNKNOWN_INTEGRATION:
        lines += ["", "Run 'tssc integration list' to see the supported integrations."]
    return "\n".join(lines)


def _describe_missing(error: ResolverError) -> str:
    lines = [
        "ATTENTION: One or more required integrations are missing. Run",
        "'tssc integration list' to describe the supported integrations.",
        "",
        _indent(error.message),
    ]
    if error.components:
        lines += ["", "Unsatisfied components:"]
        for component, expression in sorted(error.components.items()):
            lines.append(f"    {component}: {expression}")
    if error.integrations:
        lines += ["", "Configure one of them, for example:"]
        for name in error.integrations:
            lines.append(f"    tssc integration {name} --help")
    return "\n".join(lines)


def _describe_configured(error: ResolverError) -> str:
    return "\n".join(
        [
            f"The integration {error.integration!r} is already configured in the cluster:",
            "",
            f"    {error.secret}",
            "",
            f"Use 'tssc integration {error.integration} --force' to replace it, or",
            f"'tssc integration delete {error.integration}' to remove it.",
        ]
    )


def describe_error(error: BaseException) -> str:
    """Render an error with actionable next steps.

    Args:
        error: Any error raised by the resolver, cluster or integrations.

    Returns:
        Multi-line guidance text.
    """
    if isinstance(error, ResolverError):
        if error.kind in COLLECTION_KINDS:
            return _describe_collection(error)
        if error.kind in EXPRESSION_KINDS:
            return _describe_expression(error)
        if error.kind == ErrorKind.MISSING_INTEGRATIONS:
            return _describe_missing(error)
        if error.kind == ErrorKind.CONFIGURED_INTEGRATION:
            return _describe_configured(error)
        return error.message

    if isinstance(error, ClusterConfigNotFoundError):
        return "\n".join(
            [
                "The cluster is not configured yet, use 'tssc config create FILE' (or the",
                "'tssc_config_create' tool) to configure it. That's the first step to",
                "deploy the components.",
                "",
                "Inspecting the configuration in the cluster returned the following error:",
                "",
                _indent(error.message),
            ]
        )
    if isinstance(error, KubectlNotFoundError):
        return f"{error.message}\nInstall kubectl and make sure it is on your PATH."
    if isinstance(error, ClusterError):
        msg = f"Cluster error: {error.message}"
        if error.retryable:
            msg += "\nThis may be transient; check cluster connectivity and try again."
        return msg
    if isinstance(error, IntegrationValidationError):
        return f"Invalid integration input: {error}"
    if isinstance(error, IntegrationAPIError):
        return f"Integration API error: {error.message}"
    return str(error)


def describe_job_state(state: JobState, logs_cmd: str) -> str:
    """Next steps for an installer Job state."""
    if state == JobState.NOT_FOUND:
        return (
            "The cluster is ready to deploy the components. Use 'tssc deploy' (or the\n"
            "'tssc_deploy' tool) to deploy them."
        )
    if state == JobState.DEPLOYING:
        return (
            "The cluster is deploying the components. Please wait for the deployment to\n"
            "complete. You can use the following command to follow the deployment job logs:\n"
            f"\n    {logs_cmd}"
        )
    if state == JobState.FAILED:
        return (
            "The deployment job has failed. You can use the following command to view the\n"
            "related pod logs:\n"
            f"\n    {logs_cmd}"
        )
    return (
        "The components have been deployed successfully. You can use the following\n"
        "command to inspect the installation logs and get initial information for each\n"
        "product deployed:\n"
        f"\n    {logs_cmd}"
    )


def print_json(data: Any) -> None:
    """Print data as indented JSON."""
    click.echo(json.dumps(data, indent=2, default=str))


def print_yaml(data: Any, section: str | None = None) -> None:
    """Print data as YAML.

    Args:
        data: Data to print
        section: Optional section name for header
    """
    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
    if section:
        click.echo(f"{section}:")
        for line in yaml_str.splitlines():
            click.echo(f"  {line}")
    else:
        click.echo(yaml_str.rstrip("\n"))


def print_topology(result: ResolutionResult) -> None:
    """Print the install order as a table."""
    table = Table(title="Install order")
    table.add_column("#", justify="right")
    table.add_column("Component", no_wrap=True)
    table.add_column("Depends on")
    table.add_column("Integrations")
    table.add_column("Satisfied", justify="center")

    for i, component in enumerate(result.components, 1):
        table.add_row(
            str(i),
            component.name,
            ", ".join(component.depends_on) or "-",
            component.integrations or "-",
            "yes" if result.satisfied[component.name] else "no",
        )

    console = Console()
    console.print(table)
    configured = ", ".join(sorted(result.configured)) or "none"
    console.print(f"Configured integrations: {configured}", highlight=False)
