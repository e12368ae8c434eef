"""CLI main entry point."""

import sys

import click

from . import __version__
from .cluster.kubectl import Kubectl
from .commands.config import config
from .commands.deploy import deploy
from .commands.integration import integration
from .commands.mcp import mcp_server
from .commands.topology import topology
from .config import load_config
from .shared.logging import LOG_LEVELS, configure_logging
from .utils import EXIT_FAILURE


@click.group()
@click.option("--kubeconfig", type=click.Path(), help="Kubeconfig path")
@click.option("-n", "--namespace", help="Namespace holding the cluster configuration")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Cluster call timeout in seconds",
)
@click.option(
    "--collection",
    type=click.Path(exists=True, dir_okay=False),
    help="Dependency collection file (default: bundled collection)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="warning",
    show_default=True,
    help="Log level",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.version_option(__version__, prog_name="tssc")
@click.pass_context
def cli(
    ctx: click.Context,
    kubeconfig: str | None,
    namespace: str | None,
    timeout: float | None,
    collection: str | None,
    log_level: str,
    json_output: bool,
) -> None:
    """Deploy interdependent platform components onto a Kubernetes cluster."""
    configure_logging(log_level)

    try:
        cli_config = load_config()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    # Command line flags take precedence over environment and config file
    for key, value in (
        ("kubeconfig", kubeconfig),
        ("namespace", namespace),
        ("timeout", timeout),
        ("collection", collection),
    ):
        if value is not None:
            setattr(cli_config, key, value)
            cli_config._sources[key] = "flag"

    ctx.ensure_object(dict)
    ctx.obj["config"] = cli_config
    ctx.obj["log_level"] = log_level
    ctx.obj["json_output"] = json_output
    ctx.obj["kubectl"] = Kubectl(kubeconfig=cli_config.kubeconfig, timeout=cli_config.timeout)


cli.add_command(topology)
cli.add_command(deploy)
cli.add_command(integration)
cli.add_command(config)
cli.add_command(mcp_server)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
