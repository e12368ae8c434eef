"""Deploy command - run the installer Job in the cluster.

This module provides the `tssc deploy` command, which checks the cluster
configuration and the dependency topology and then creates the installer
Job, and `tssc deploy status`, which reports where the deployment stands.
"""

from __future__ import annotations

import sys

import click

from ..cluster.job import JobState
from ..formatters import print_json
from ..utils import EXIT_FAILURE, exit_code_for, get_deployer, run_async


@click.group(invoke_without_command=True)
@click.option("--image", default=None, help="Installer container image")
@click.pass_context
def deploy(ctx: click.Context, image: str | None) -> None:
    """Deploy the components to the cluster.

    Checks that the cluster is configured and that every component's
    dependencies and required integrations are resolved, then creates the
    installer Job which deploys the components in order.

    \b
    Examples:
      tssc deploy
      tssc deploy --image quay.io/redhat-tssc/cli:1.6
      tssc deploy status
    """
    if ctx.invoked_subcommand is not None:
        return  # Subcommand handles it

    deployer = get_deployer(ctx)
    image = image or deployer.image
    logs_cmd = run_async(deployer.deploy(image))

    if ctx.obj["json_output"]:
        print_json({"created": True, "image": image, "logs": logs_cmd})
        return

    click.echo("✓ The installer job has been created.")
    click.echo("\nCheck the deployment with 'tssc deploy status', or follow the logs by running:")
    click.echo(f"\n    {logs_cmd}")


@deploy.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the deployment status.

    Reports, in order: whether the cluster is configured, whether the
    topology resolves, and the state of the installer Job.
    """
    result = run_async(get_deployer(ctx).status())

    if ctx.obj["json_output"]:
        print_json(result.to_dict())
    else:
        click.echo(result.message)

    if result.error is not None:
        sys.exit(exit_code_for(result.error))
    if result.state == JobState.FAILED:
        sys.exit(EXIT_FAILURE)
