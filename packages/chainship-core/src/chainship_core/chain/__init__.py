"""Chain API collaborators: read client, signing client and their interfaces."""

from __future__ import annotations

from chainship_core.chain.models import (
    AccountInfo,
    Action,
    Authority,
    Permission,
    PermissionLevel,
    PermissionLevelWeight,
    TransactionReceipt,
)
from chainship_core.chain.protocol import ChainReader, ChainWriter
from chainship_core.chain.rpc import RpcChainClient, raise_for_chain_error
from chainship_core.chain.signer import SignerClient

__all__ = [
    "AccountInfo",
    "Action",
    "Authority",
    "ChainReader",
    "ChainWriter",
    "Permission",
    "PermissionLevel",
    "PermissionLevelWeight",
    "RpcChainClient",
    "SignerClient",
    "TransactionReceipt",
    "raise_for_chain_error",
]
