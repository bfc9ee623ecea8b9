"""Shared pytest fixtures for chainship-core tests.

Provides in-memory chain collaborators, a scripted confirmer, a
recording reporter and artifact directory helpers.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
import structlog

from chainship_core.chain.models import AccountInfo, Action, TransactionReceipt
from chainship_core.config import NetworkConfig
from chainship_core.schema.models import InterfaceSchema


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class FakeReader:
    """In-memory chain read API.

    Attributes:
        schema: Schema returned by get_abi (None = nothing deployed).
        abi_error: Raised by get_abi when set.
        rows: Rows per table returned by get_table_by_scope.
        failing_tables: Tables whose probe raises.
        account: Returned by get_account.
        calls: Every call as (method, *args).
    """

    def __init__(
        self,
        *,
        schema: InterfaceSchema | None = None,
        abi_error: Exception | None = None,
        rows: dict[str, list[dict[str, Any]]] | None = None,
        failing_tables: Sequence[str] = (),
        account: AccountInfo | None = None,
    ) -> None:
        self.schema = schema
        self.abi_error = abi_error
        self.rows = rows or {}
        self.failing_tables = set(failing_tables)
        self.account = account
        self.calls: list[tuple[str, ...]] = []

    def get_abi(self, account: str) -> InterfaceSchema | None:
        self.calls.append(("get_abi", account))
        if self.abi_error is not None:
            raise self.abi_error
        return self.schema

    def get_table_by_scope(self, code: str, table: str) -> list[dict[str, Any]]:
        self.calls.append(("get_table_by_scope", code, table))
        if table in self.failing_tables:
            raise RuntimeError(f"probe of {table} failed")
        return self.rows.get(table, [])

    def get_account(self, name: str) -> AccountInfo:
        self.calls.append(("get_account", name))
        if self.account is None:
            raise RuntimeError("account does not exist")
        return self.account

    @property
    def probed_tables(self) -> list[str]:
        return [call[2] for call in self.calls if call[0] == "get_table_by_scope"]


class FakeWriter:
    """In-memory chain write API.

    Attributes:
        errors: Exception to raise per operation name.
        submitted: Every submitted action, in order.
    """

    def __init__(self, *, errors: dict[str, Exception] | None = None) -> None:
        self.errors = errors or {}
        self.submitted: list[Action] = []

    def transact(self, actions: Sequence[Action]) -> TransactionReceipt:
        action = actions[0]
        if action.name in self.errors:
            raise self.errors[action.name]
        self.submitted.extend(actions)
        return TransactionReceipt(transaction_id=f"tx-{action.name}-{len(self.submitted)}")

    @property
    def operations(self) -> list[str]:
        return [action.name for action in self.submitted]


class ScriptedConfirmer:
    """Answers prompts from a fixed script and records the questions."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def confirm(self, message: str) -> bool:
        self.questions.append(message)
        return self.answers.pop(0) if self.answers else False


class RecordingReporter:
    """Reporter that keeps every message as (level, text)."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def hint(self, message: str) -> None:
        self.messages.append(("hint", message))

    def link(self, label: str, url: str) -> None:
        self.messages.append(("link", f"{label}: {url}"))

    def texts(self, level: str) -> list[str]:
        return [text for lvl, text in self.messages if lvl == level]


def schema_dict(tables: dict[str, list[tuple[str, str]]]) -> dict[str, Any]:
    """Build an ABI dict with one struct per table, named after the table.

    Args:
        tables: Table name -> ordered (field name, field type) pairs.
    """
    return {
        "version": "eosio::abi/1.1",
        "structs": [
            {
                "name": name,
                "base": "",
                "fields": [{"name": f, "type": t} for f, t in fields],
            }
            for name, fields in tables.items()
        ],
        "tables": [
            {
                "name": name,
                "index_type": "i64",
                "key_names": [],
                "key_types": [],
                "type": name,
            }
            for name in tables
        ],
    }


@pytest.fixture
def make_schema() -> Callable[[dict[str, list[tuple[str, str]]]], InterfaceSchema]:
    """Factory for schemas with one struct per table."""

    def _make(tables: dict[str, list[tuple[str, str]]]) -> InterfaceSchema:
        return InterfaceSchema.from_dict(schema_dict(tables))

    return _make


@pytest.fixture
def make_artifacts(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a directory with a bytecode file and a schema file.

    Returns:
        Function taking the table layout (and optional directory name) and
        returning the directory path.
    """

    def _make(
        tables: dict[str, list[tuple[str, str]]],
        name: str = "token",
        code: bytes = b"\x00asm\x01\x00\x00\x00",
    ) -> Path:
        directory = tmp_path / name
        directory.mkdir()
        (directory / f"{name}.wasm").write_bytes(code)
        (directory / f"{name}.abi").write_text(json.dumps(schema_dict(tables)))
        return directory

    return _make


@pytest.fixture
def network() -> NetworkConfig:
    """A test network with an explorer."""
    return NetworkConfig(
        chain="testnet",
        endpoints=["http://node.test"],
        explorer_url="https://explorer.test",
        signer_url="http://signer.test",
    )


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def make_reader() -> Callable[..., FakeReader]:
    """Factory for in-memory chain readers."""
    return FakeReader


@pytest.fixture
def make_writer() -> Callable[..., FakeWriter]:
    """Factory for in-memory chain writers."""
    return FakeWriter


@pytest.fixture
def make_confirmer() -> Callable[..., ScriptedConfirmer]:
    """Factory for confirmers answering from a script."""
    return ScriptedConfirmer
