"""CLI entry point for chainship.

This module defines the main CLI group using LazyGroup pattern
for fast --help performance.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from chainship_cli import __version__
from chainship_cli.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily for fast --help performance.

    Commands are only imported when actually invoked, not at import time,
    so 'chainship --help' does not pay for httpx, pydantic or OpenTelemetry.

    Attributes:
        lazy_subcommands: Mapping of command names to module paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"contract": "chainship_cli.commands.contract.contract"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return list of available command names.

        Args:
            ctx: Click context.

        Returns:
            Sorted list of command names.
        """
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, loading lazily if needed.

        Args:
            ctx: Click context.
            cmd_name: Name of the command to get.

        Returns:
            Click Command instance, or None if not found.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


# Define lazy command mappings
LAZY_COMMANDS = {
    "contract": "chainship_cli.commands.contract.contract",
    "network": "chainship_cli.commands.network.network",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="chainship")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "-n",
    "--network",
    default=None,
    help="Network to use [default: $CHAINSHIP_NETWORK or proton-test]",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Minimum level of structured logs [default: WARNING]",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Emit structured logs as JSON.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    network: str | None,
    log_level: str | None,
    log_json: bool,
) -> None:
    """chainship - Safe smart contract deployments.

    Deploys a contract's WASM and ABI after checking that the new ABI does
    not drop or reshape tables that still hold data.

    **Getting Started:**

    - `chainship contract set ACCOUNT ./build/token` - Deploy a contract
    - `chainship contract clear ACCOUNT` - Remove a contract
    - `chainship network list` - Show known networks

    Settings are read from `CHAINSHIP_*` environment variables; a `.contract`
    file in the working directory can preset the account, source and network.
    """
    from chainship_core.config import ChainshipSettings
    from chainship_core.observability import configure_logging

    overrides: dict[str, Any] = {}
    if network:
        overrides["network"] = network
    if log_level:
        overrides["log_level"] = log_level
    if log_json:
        overrides["log_json"] = True

    settings = ChainshipSettings(**overrides)
    configure_logging(log_level=settings.log_level, json_format=settings.log_json)
    ctx.obj = settings


if __name__ == "__main__":
    cli()
