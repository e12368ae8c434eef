"""Config commands - local CLI settings and the cluster configuration.

`tssc config show/set/unset` manage ~/.tssc/config.yaml; `tssc config
get/create/delete` manage the installer configuration stored in the
cluster.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ..cluster.config import ConfigMapManager
from ..config import CONFIG_KEYS, get_config_path, save_config, unset_config
from ..formatters import print_json, print_yaml
from ..utils import EXIT_FAILURE, get_cli_config, get_kubectl, run_async


@click.group()
def config() -> None:
    """Manage configuration."""
    pass


def _manager(ctx: click.Context) -> ConfigMapManager:
    return ConfigMapManager(get_kubectl(ctx), namespace=get_cli_config(ctx).namespace)


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the local CLI configuration and where each value comes from."""
    cli_config = get_cli_config(ctx)
    values = cli_config.values()

    if ctx.obj["json_output"]:
        print_json(
            {
                "path": str(get_config_path()),
                "values": values,
                "sources": {key: cli_config.get_source(key) for key in CONFIG_KEYS},
            }
        )
        return

    click.echo("tssc CLI Configuration")
    click.echo(f"Config file: {get_config_path()}\n")
    for key in CONFIG_KEYS:
        value = values[key] if values[key] is not None else "(not set)"
        click.echo(f"  {key:<11} {value}  [{cli_config.get_source(key)}]")


@config.command("set")
@click.argument("key", type=click.Choice(CONFIG_KEYS))
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Save a local CLI setting."""
    try:
        save_config(key, value)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILURE)
    click.echo(f"✓ Set {key} = {value}")


@config.command("unset")
@click.argument("key", type=click.Choice(CONFIG_KEYS))
def config_unset(key: str) -> None:
    """Remove a local CLI setting."""
    if unset_config(key):
        click.echo(f"✓ Unset {key}")
    else:
        click.echo(f"{key} is not set in {get_config_path()}")


@config.command("get")
@click.pass_context
def config_get(ctx: click.Context) -> None:
    """Show the installer configuration stored in the cluster."""
    cluster_config = run_async(_manager(ctx).get_config())

    if ctx.obj["json_output"]:
        print_json(
            {
                "namespace": cluster_config.namespace,
                "settings": cluster_config.settings,
                "products": cluster_config.products,
            }
        )
    else:
        click.echo(cluster_config.raw.rstrip("\n"))


@config.command("create")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing cluster configuration")
@click.pass_context
def config_create(ctx: click.Context, file: Path, force: bool) -> None:
    """Store an installer configuration file in the cluster.

    \b
    Example:
      tssc config create ./config.yaml
    """
    document = file.read_text()

    async def _create():
        return await _manager(ctx).create(document, force=force)

    try:
        cluster_config = run_async(_create())
    except ValueError as e:
        click.echo(f"Error: {file}: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    click.echo(f"✓ Configuration stored in namespace '{get_cli_config(ctx).namespace}'")
    products = cluster_config.enabled_products
    if products:
        print_yaml(products, section="Enabled products")


@config.command("delete")
@click.confirmation_option(prompt="Delete the cluster configuration?")
@click.pass_context
def config_delete(ctx: click.Context) -> None:
    """Delete the installer configuration from the cluster."""
    run_async(_manager(ctx).delete())
    click.echo("✓ Cluster configuration deleted.")
