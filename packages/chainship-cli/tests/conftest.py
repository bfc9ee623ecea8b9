"""Shared test fixtures for chainship-cli tests.

Provides CliRunner fixtures, a clean settings environment and mocked
chain clients for testing CLI commands.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from chainship_core.chain.models import Action, TransactionReceipt

SETTINGS_VARIABLES = (
    "CHAINSHIP_NETWORK",
    "CHAINSHIP_ENDPOINT",
    "CHAINSHIP_EXPLORER_URL",
    "CHAINSHIP_SIGNER_URL",
    "CHAINSHIP_LOG_LEVEL",
    "CHAINSHIP_LOG_JSON",
)


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CHAINSHIP_* variables of the developer's shell out of the tests."""
    for name in SETTINGS_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    This fixture creates a temporary directory and changes to it
    for the duration of the test.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def write_artifacts() -> Callable[..., Path]:
    """Factory writing a bytecode and schema pair into a directory.

    The directory is relative to the working directory, so use it together
    with `isolated_runner`.
    """

    def _write(directory: str = "build", name: str = "token") -> Path:
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        (path / f"{name}.wasm").write_bytes(b"\x00asm\x01\x00\x00\x00")
        (path / f"{name}.abi").write_text(
            json.dumps(
                {
                    "version": "eosio::abi/1.1",
                    "structs": [{"name": "account", "base": "", "fields": []}],
                    "tables": [{"name": "accounts", "type": "account"}],
                }
            )
        )
        return path

    return _write


@dataclass
class MockChain:
    """Mocked chain clients handed to the contract commands."""

    reader: MagicMock
    writer: MagicMock

    @property
    def operations(self) -> list[str]:
        return [c.args[0][0].name for c in self.writer.transact.call_args_list]

    @property
    def actions(self) -> list[Action]:
        return [c.args[0][0] for c in self.writer.transact.call_args_list]


@pytest.fixture
def mock_chain() -> Generator[MockChain, None, None]:
    """Patch the RPC and signer clients used by `chainship contract`.

    The reader reports no deployed schema and empty tables; the writer
    accepts every transaction.
    """
    reader = MagicMock()
    reader.get_abi.return_value = None
    reader.get_table_by_scope.return_value = []
    writer = MagicMock()
    writer.transact.return_value = TransactionReceipt(transaction_id="abc123")

    with (
        patch("chainship_cli.commands.contract.RpcChainClient") as rpc_cls,
        patch("chainship_cli.commands.contract.SignerClient") as signer_cls,
    ):
        rpc_cls.return_value.__enter__.return_value = reader
        signer_cls.return_value.__enter__.return_value = writer
        yield MockChain(reader=reader, writer=writer)
