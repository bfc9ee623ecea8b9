"""Interfaces of the chain collaborators used by the pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from chainship_core.chain.models import AccountInfo, Action, TransactionReceipt
    from chainship_core.schema.models import InterfaceSchema


class ChainReader(Protocol):
    """Read side of the chain API."""

    def get_abi(self, account: str) -> InterfaceSchema | None:
        """Return the schema deployed on `account`, or None if there is none."""
        ...

    def get_table_by_scope(self, code: str, table: str) -> list[dict[str, Any]]:
        """Return the scopes of `table` under contract `code` that hold rows."""
        ...

    def get_account(self, name: str) -> AccountInfo:
        """Return account permissions."""
        ...


class ChainWriter(Protocol):
    """Write side of the chain API. Signing happens behind this interface."""

    def transact(self, actions: Sequence[Action]) -> TransactionReceipt:
        """Submit one transaction carrying `actions`."""
        ...
