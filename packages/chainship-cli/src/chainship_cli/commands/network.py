"""chainship network command - Inspect network configuration."""

from __future__ import annotations

import click

from chainship_cli.errors import handle_chainship_error
from chainship_cli.output import info, print_json
from chainship_core.config import KNOWN_NETWORKS, ChainshipSettings, resolve_network
from chainship_core.errors import ChainshipError


@click.group()
def network() -> None:
    """Inspect network configuration.

    **Commands:**

    - `chainship network list` - List known networks
    """
    pass


@network.command("list")
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Output as JSON",
)
@click.pass_context
def list_networks(ctx: click.Context, as_json: bool) -> None:
    """List known networks and mark the active one.

    The active network is chosen with `--network` or CHAINSHIP_NETWORK;
    CHAINSHIP_ENDPOINT, CHAINSHIP_EXPLORER_URL and CHAINSHIP_SIGNER_URL
    override its settings.

    Examples:

        chainship network list

        chainship --network proton network list --json
    """
    root = ctx.find_root()
    settings = root.obj if isinstance(root.obj, ChainshipSettings) else ChainshipSettings()

    try:
        active = resolve_network(settings)
    except ChainshipError as e:
        handle_chainship_error(e)

    networks = dict(KNOWN_NETWORKS)
    networks[active.chain] = active

    if as_json:
        print_json(
            {
                "active": active.chain,
                "networks": {
                    name: config.model_dump(mode="json")
                    for name, config in sorted(networks.items())
                },
            }
        )
        return

    info("Known networks:")
    click.echo()
    for name, config in sorted(networks.items()):
        marker = "*" if name == active.chain else " "
        click.echo(f"  {marker} {name}")
        click.echo(f"      endpoint: {config.endpoint}")
        click.echo(f"      explorer: {config.explorer_url or '(none)'}")
        click.echo(f"      signer:   {config.signer_url}")
