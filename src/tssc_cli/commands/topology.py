"""Topology command - show the install order and integration requirements."""

from __future__ import annotations

import click

from ..formatters import print_json, print_topology
from ..resolver.topology import ResolutionResult
from ..utils import get_deployer, run_async


@click.command("topology")
@click.option(
    "--offline",
    is_flag=True,
    help="Only validate the collection and print the order; do not contact the cluster",
)
@click.pass_context
def topology(ctx: click.Context, offline: bool) -> None:
    """Resolve and print the component install order.

    Validates the dependency collection (dependency names, cycles and
    required-integrations expressions), then checks the integrations
    configured in the cluster.

    \b
    Examples:
      tssc topology
      tssc --collection ./collection.yaml topology --offline
      tssc --json topology
    """
    deployer = get_deployer(ctx)

    async def _resolve() -> ResolutionResult | list[str]:
        builder = deployer.topology_builder()
        # Collection problems are reported before the cluster is contacted
        _, order, _ = builder.plan()
        if offline:
            return order
        config = await deployer.get_config()
        return await builder.build(config, timeout=deployer.timeout)

    result = run_async(_resolve())

    if isinstance(result, list):
        if ctx.obj["json_output"]:
            print_json({"order": result})
        else:
            for i, name in enumerate(result, 1):
                click.echo(f"{i:>3}. {name}")
        return

    if ctx.obj["json_output"]:
        print_json(result.to_dict())
    else:
        print_topology(result)
