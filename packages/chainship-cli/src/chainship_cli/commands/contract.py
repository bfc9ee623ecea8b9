"""chainship contract command - Deploy, clear and configure contracts."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from pathlib import Path

import click
import httpx
from pydantic import ValidationError as PydanticValidationError

from chainship_cli.errors import (
    EXIT_USER_ERROR,
    CLIError,
    exit_with_error,
    handle_chainship_error,
    handle_validation_error,
)
from chainship_cli.output import ConsoleReporter, success, warning
from chainship_core.artifacts import ArtifactResolver
from chainship_core.chain import RpcChainClient, SignerClient
from chainship_core.config import ChainshipSettings, ContractFile, NetworkConfig, resolve_network
from chainship_core.errors import ChainshipError, NetworkMismatch
from chainship_core.inline import enable_inline
from chainship_core.pipeline import DeploymentPipeline, DeploymentRequest, DeploymentResult


class ClickConfirmer:
    """Asks confirmation questions on the terminal, defaulting to no.

    Closed or non-interactive input counts as a no.
    """

    def confirm(self, message: str) -> bool:
        try:
            return click.confirm(message, default=False)
        except click.Abort:
            return False


@dataclass
class _Clients:
    reader: RpcChainClient
    writer: SignerClient
    http: httpx.Client


@contextmanager
def _open_clients(settings: ChainshipSettings, network: NetworkConfig) -> Iterator[_Clients]:
    timeout = settings.request_timeout_seconds
    with ExitStack() as stack:
        http = stack.enter_context(httpx.Client(follow_redirects=True))
        reader = stack.enter_context(RpcChainClient(network, timeout_seconds=timeout))
        writer = stack.enter_context(SignerClient(network, timeout_seconds=timeout))
        yield _Clients(reader=reader, writer=writer, http=http)


def _settings(ctx: click.Context) -> ChainshipSettings:
    root = ctx.find_root()
    if isinstance(root.obj, ChainshipSettings):
        return root.obj
    return ChainshipSettings()


def _network(settings: ChainshipSettings) -> NetworkConfig:
    try:
        return resolve_network(settings)
    except ChainshipError as e:
        handle_chainship_error(e)


def _load_contract_file() -> ContractFile:
    contract_file = ContractFile.load(Path.cwd())
    if not contract_file.is_empty:
        success("Found .contract file. Using arguments from the file.")
    return contract_file


def _check_network(contract_file: ContractFile, network: NetworkConfig) -> None:
    if contract_file.network and contract_file.network != network.chain:
        handle_chainship_error(
            NetworkMismatch(current=network.chain, expected=contract_file.network)
        )


def _arguments(
    contract_file: ContractFile,
    positional: tuple[str, ...],
    *,
    source_required: bool,
) -> tuple[str, str | None]:
    """Merge preset `.contract` values with positional arguments.

    Preset values are not taken from the command line, so the positional
    arguments fill the remaining slots in order (ACCOUNT, then SOURCE).
    """
    presets = {"account": contract_file.account, "source": contract_file.source}
    slots = [name for name, preset in presets.items() if preset is None]
    if len(positional) > len(slots):
        raise CLIError(f"Unexpected argument: {positional[len(slots)]}")

    values: dict[str, str | None] = dict(presets)
    values.update(zip(slots, positional))

    if not values["account"]:
        raise CLIError("Missing argument 'ACCOUNT'")
    if source_required and not values["source"]:
        raise CLIError("Missing argument 'SOURCE'")
    return values["account"], values["source"]  # type: ignore[return-value]


def _deploy(ctx: click.Context, request_values: dict[str, object]) -> DeploymentResult:
    """Build the request, run the pipeline and report the outcome."""
    settings = _settings(ctx)
    network = _network(settings)

    try:
        request = DeploymentRequest.model_validate(request_values)
    except PydanticValidationError as e:
        handle_validation_error(e)

    reporter = ConsoleReporter()
    try:
        with _open_clients(settings, network) as clients:
            pipeline = DeploymentPipeline(
                clients.reader,
                clients.writer,
                network,
                confirmer=ClickConfirmer(),
                resolver=ArtifactResolver(http_client=clients.http, reporter=reporter),
                reporter=reporter,
            )
            result = pipeline.run(request)
    except ChainshipError as e:
        handle_chainship_error(e)

    if result.aborted:
        warning("Deployment cancelled")
    elif result.failed_operations:
        exit_with_error(
            f"Failed operations: {', '.join(result.failed_operations)}",
            exit_code=EXIT_USER_ERROR,
        )
    return result


@click.group()
def contract() -> None:
    """Deploy and manage contracts.

    **Commands:**

    - `chainship contract set` - Deploy WASM + ABI
    - `chainship contract clear` - Remove WASM + ABI
    - `chainship contract enableinline` - Allow the contract to send inline actions
    """
    pass


@contract.command("set")
@click.argument("arguments", nargs=-1, metavar="ACCOUNT SOURCE")
@click.option(
    "-c",
    "--clear",
    is_flag=True,
    default=False,
    help="Removes WASM + ABI from contract",
)
@click.option("-a", "--abi-only", is_flag=True, default=False, help="Only deploy ABI")
@click.option("-w", "--wasm-only", is_flag=True, default=False, help="Only deploy WASM")
@click.option(
    "-s",
    "--disable-inline",
    is_flag=True,
    default=False,
    help="Disable inline actions on contract",
)
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    default=False,
    help="Skip the initial confirmation (data loss warnings are still asked)",
)
@click.pass_context
def set_contract(
    ctx: click.Context,
    arguments: tuple[str, ...],
    clear: bool,
    abi_only: bool,
    wasm_only: bool,
    disable_inline: bool,
    yes: bool,
) -> None:
    """Deploy Contract (WASM + ABI).

    SOURCE is a directory holding exactly one .wasm and one .abi file, or the
    URL of a GitHub folder containing `<name>.wasm` and `<name>.abi`.

    Values preset in a `.contract` file (ACCOUNT, SOURCE, NETWORK) are not
    passed on the command line. A preset ACCOUNT skips the initial
    confirmation.

    Examples:

        chainship contract set mytoken ./build/token

        chainship contract set mytoken https://github.com/acme/contracts/tree/main/token

        chainship contract set mytoken ./build/token --abi-only
    """
    contract_file = _load_contract_file()
    settings = _settings(ctx)
    _check_network(contract_file, _network(settings))

    account, source = _arguments(contract_file, arguments, source_required=not clear)
    _deploy(
        ctx,
        {
            "account": account,
            "source": source,
            "clear": clear,
            "code_only": wasm_only,
            "schema_only": abi_only,
            "enable_inline": not disable_inline,
            "pre_confirmed": yes or contract_file.account is not None,
            "expected_network": contract_file.network,
        },
    )


@contract.command("clear")
@click.argument("account")
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    default=False,
    help="Skip the confirmation",
)
@click.pass_context
def clear_contract(ctx: click.Context, account: str, yes: bool) -> None:
    """Remove WASM + ABI from a contract account.

    A NETWORK preset in a `.contract` file must match the current network.

    Examples:

        chainship contract clear mytoken
    """
    contract_file = ContractFile.load(Path.cwd())
    _check_network(contract_file, _network(_settings(ctx)))

    _deploy(
        ctx,
        {
            "account": account,
            "clear": True,
            "enable_inline": False,
            "pre_confirmed": yes,
            "expected_network": contract_file.network,
        },
    )


@contract.command("enableinline")
@click.argument("account")
@click.pass_context
def enable_inline_command(ctx: click.Context, account: str) -> None:
    """Enable inline actions on a contract.

    Adds `ACCOUNT@eosio.code` to the account's active permission.

    Examples:

        chainship contract enableinline mytoken
    """
    settings = _settings(ctx)
    network = _network(settings)
    reporter = ConsoleReporter()

    with _open_clients(settings, network) as clients:
        enable_inline(
            clients.reader,
            clients.writer,
            account,
            system_account=network.system_account,
            reporter=reporter,
        )
