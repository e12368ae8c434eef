"""Integration commands - configure external systems for the components.

Each `tssc integration <name>` command validates its flags and stores the
credentials in the `tssc-<name>-integration` secret of the installer
namespace. An existing secret is only replaced with --force.
"""

from __future__ import annotations

import click

from ..cluster.errors import ClusterConfigNotFoundError
from ..formatters import print_json
from ..integrations import (
    INTEGRATIONS,
    ACSIntegration,
    GitHubIntegration,
    GitLabIntegration,
    ImageRegistryIntegration,
    Integration,
    IntegrationManager,
    IntegrationSecret,
    JenkinsIntegration,
    secret_name,
)
from ..integrations.image_registry import REGISTRY_DEFAULT_URLS
from ..utils import get_deployer, get_kubectl, run_async

force_option = click.option(
    "--force", is_flag=True, help="Replace the integration secret if it already exists"
)


@click.group()
def integration() -> None:
    """Configure integrations with external systems."""
    pass


def create_integration(ctx: click.Context, integration: Integration, force: bool) -> None:
    """Store ``integration`` in the cluster and report the secret."""
    kubectl = get_kubectl(ctx)
    deployer = get_deployer(ctx)

    async def _create():
        integration.validate()
        config = await deployer.get_config()
        return await IntegrationSecret(kubectl, integration, force=force).create(config)

    ref = run_async(_create())

    if ctx.obj["json_output"]:
        print_json({"integration": integration.name, "secret": str(ref)})
    else:
        click.echo(f"✓ Integration '{integration.name}' configured: secret {ref}")


@integration.command("list")
@click.pass_context
def integration_list(ctx: click.Context) -> None:
    """List supported integrations and whether they are configured."""
    deployer = get_deployer(ctx)

    async def _configured() -> frozenset[str] | None:
        try:
            config = await deployer.get_config()
        except ClusterConfigNotFoundError:
            return None
        return await IntegrationManager(get_kubectl(ctx)).configured_integrations(config)

    configured = run_async(_configured())

    rows = [
        {
            "name": info.name,
            "kind": info.kind,
            "description": info.description,
            "secret": secret_name(info.name),
            "configured": None if configured is None else info.name in configured,
        }
        for info in sorted(INTEGRATIONS.values(), key=lambda i: i.name)
    ]

    if ctx.obj["json_output"]:
        print_json(rows)
        return

    if configured is None:
        click.echo("The cluster is not configured yet; configured state is unknown.\n")
    click.echo(f"Integrations ({len(rows)} supported):\n")
    for row in rows:
        if row["configured"] is None:
            mark = " "
        else:
            mark = "✓" if row["configured"] else "✗"
        click.echo(f"  {mark} {row['name']:<12} {row['kind']:<9} {row['description']}")
    click.echo("\nConfigure one with: tssc integration <name> --help")


@integration.command("delete")
@click.argument("name", type=click.Choice(sorted(INTEGRATIONS)))
@click.pass_context
def integration_delete(ctx: click.Context, name: str) -> None:
    """Delete an integration secret."""
    kubectl = get_kubectl(ctx)
    deployer = get_deployer(ctx)

    async def _delete() -> None:
        config = await deployer.get_config()
        await IntegrationSecret(kubectl, _placeholder(name)).delete(config)

    run_async(_delete())
    click.echo(f"✓ Integration '{name}' deleted.")


def _placeholder(name: str) -> Integration:
    """An unconfigured integration instance, enough to locate its secret."""
    if name in REGISTRY_DEFAULT_URLS:
        return ImageRegistryIntegration(name)
    return {
        "acs": ACSIntegration,
        "github": GitHubIntegration,
        "gitlab": GitLabIntegration,
        "jenkins": JenkinsIntegration,
    }[name]()


@integration.command("github")
@click.option("--token", required=True, help="Personal access token")
@click.option("--organization", default="", help="Organization owning the repositories")
@click.option("--host", default="github.com", show_default=True, help="GitHub hostname")
@click.option("--insecure", is_flag=True, help="Skip TLS verification")
@force_option
@click.pass_context
def integration_github(
    ctx: click.Context, token: str, organization: str, host: str, insecure: bool, force: bool
) -> None:
    """Configure the GitHub integration."""
    create_integration(
        ctx,
        GitHubIntegration(
            token=token,
            organization=organization,
            host=host,
            insecure=insecure,
            timeout=ctx.obj["config"].timeout,
        ),
        force,
    )


@integration.command("gitlab")
@click.option("--token", required=True, help="Personal access token")
@click.option("--group", required=True, help="Group owning the repositories")
@click.option("--host", default="gitlab.com", show_default=True, help="GitLab hostname")
@click.option("--app-id", default="", help="OAuth application id")
@click.option("--app-secret", default="", help="OAuth application secret")
@click.option("--insecure", is_flag=True, help="Skip TLS verification")
@force_option
@click.pass_context
def integration_gitlab(
    ctx: click.Context,
    token: str,
    group: str,
    host: str,
    app_id: str,
    app_secret: str,
    insecure: bool,
    force: bool,
) -> None:
    """Configure the GitLab integration.

    \b
    Example:
      tssc integration gitlab --token glpat-xxx --group platform \\
        --app-id 1234 --app-secret s3cr3t
    """
    create_integration(
        ctx,
        GitLabIntegration(
            token=token,
            group=group,
            host=host,
            app_id=app_id,
            app_secret=app_secret,
            insecure=insecure,
            timeout=ctx.obj["config"].timeout,
        ),
        force,
    )


@integration.command("jenkins")
@click.option("--url", required=True, help="Jenkins URL, e.g. https://jenkins.example.com")
@click.option("--username", required=True, help="Jenkins user")
@click.option("--token", required=True, help="Jenkins API token")
@force_option
@click.pass_context
def integration_jenkins(
    ctx: click.Context, url: str, username: str, token: str, force: bool
) -> None:
    """Configure the Jenkins integration."""
    create_integration(ctx, JenkinsIntegration(url=url, username=username, token=token), force)


@integration.command("acs")
@click.option("--endpoint", required=True, help="Central endpoint, 'host:port'")
@click.option("--token", required=True, help="API token")
@force_option
@click.pass_context
def integration_acs(ctx: click.Context, endpoint: str, token: str, force: bool) -> None:
    """Configure the Advanced Cluster Security integration."""
    create_integration(ctx, ACSIntegration(endpoint=endpoint, token=token), force)


def _registry_command(name: str) -> click.Command:
    """Build the command for an image registry flavour."""
    default_url = REGISTRY_DEFAULT_URLS[name]
    if default_url:
        url_option = click.option(
            "--url", default=default_url, show_default=True, help="Registry API URL"
        )
    else:
        url_option = click.option("--url", required=True, help="Registry API URL")

    @click.command(name, help=f"Configure the {INTEGRATIONS[name].description} integration.")
    @click.option("--dockerconfigjson", required=True, help="Registry push credentials (JSON)")
    @click.option(
        "--dockerconfigjsonreadonly", default="", help="Registry pull credentials (JSON)"
    )
    @url_option
    @click.option("--token", default="", help="Registry API token")
    @force_option
    @click.pass_context
    def command(
        ctx: click.Context,
        dockerconfigjson: str,
        dockerconfigjsonreadonly: str,
        url: str,
        token: str,
        force: bool,
    ) -> None:
        create_integration(
            ctx,
            ImageRegistryIntegration(
                name,
                dockerconfigjson=dockerconfigjson,
                dockerconfigjson_readonly=dockerconfigjsonreadonly,
                url=url,
                token=token,
            ),
            force,
        )

    return command


for _name in REGISTRY_DEFAULT_URLS:
    integration.add_command(_registry_command(_name))
