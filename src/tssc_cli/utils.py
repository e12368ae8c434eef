"""CLI utility functions."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Coroutine
from typing import Any, NoReturn, TypeVar

import click

from .cluster.errors import ClusterError
from .cluster.kubectl import Kubectl
from .config import CLIConfig
from .deployment import Deployer
from .formatters import describe_error
from .integrations.base import IntegrationAPIError, IntegrationValidationError
from .resolver.errors import ResolverError

T = TypeVar("T")

# Exit status for invalid dependency sets and other taxonomy errors
EXIT_TAXONOMY = 2
# Exit status for cluster, transport and input errors
EXIT_FAILURE = 1

HANDLED_ERRORS = (
    ResolverError,
    ClusterError,
    IntegrationValidationError,
    IntegrationAPIError,
)


def exit_code_for(error: BaseException) -> int:
    """Process exit status for an error."""
    return EXIT_TAXONOMY if isinstance(error, ResolverError) else EXIT_FAILURE


def fail(error: BaseException) -> NoReturn:
    """Print guidance for ``error`` on stderr and exit."""
    click.echo(describe_error(error), err=True)
    sys.exit(exit_code_for(error))


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, turning known errors into guidance and exit codes."""
    try:
        return asyncio.run(coro)
    except HANDLED_ERRORS as e:
        fail(e)


def get_cli_config(ctx: click.Context) -> CLIConfig:
    return ctx.obj["config"]


def get_kubectl(ctx: click.Context) -> Kubectl:
    return ctx.obj["kubectl"]


def get_deployer(ctx: click.Context) -> Deployer:
    """Deployer for the CLI configuration in ``ctx``."""
    cli_config = get_cli_config(ctx)
    return Deployer(
        get_kubectl(ctx),
        namespace=cli_config.namespace,
        collection=cli_config.collection,
        timeout=cli_config.timeout,
        image=cli_config.image,
    )
