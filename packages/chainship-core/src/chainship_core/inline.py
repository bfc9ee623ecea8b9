"""Enable inline actions on a contract account.

A contract can only send actions on its own behalf when its `active`
permission lists `<account>@eosio.code`. This module adds that entry with
an `updateauth` operation, leaving the rest of the authority untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from chainship_core.chain.models import (
    Action,
    PermissionLevel,
    PermissionLevelWeight,
)
from chainship_core.hints import classify_error
from chainship_core.reporting import NullReporter, Reporter

if TYPE_CHECKING:
    from chainship_core.chain.models import Authority, TransactionReceipt
    from chainship_core.chain.protocol import ChainReader, ChainWriter

logger = structlog.get_logger(__name__)

CODE_PERMISSION = "eosio.code"
ACTIVE_PERMISSION = "active"


def with_code_permission(authority: Authority, account: str) -> Authority | None:
    """Return `authority` extended with `<account>@eosio.code`.

    Accounts stay sorted by actor then permission, as the chain requires.

    Returns:
        The new authority, or None if the entry is already present.
    """
    code_level = PermissionLevel(actor=account, permission=CODE_PERMISSION)
    if any(entry.permission == code_level for entry in authority.accounts):
        return None

    accounts = [*authority.accounts, PermissionLevelWeight(permission=code_level, weight=1)]
    accounts.sort(key=lambda entry: (entry.permission.actor, entry.permission.permission))
    return authority.model_copy(update={"accounts": accounts})


def enable_inline(
    reader: ChainReader,
    writer: ChainWriter,
    account: str,
    *,
    system_account: str = "eosio",
    reporter: Reporter | None = None,
) -> TransactionReceipt | None:
    """Add `<account>@eosio.code` to the account's active permission.

    Best-effort: failures are classified and reported, never raised.

    Args:
        reader: Chain read API.
        writer: Chain write API.
        account: Contract account.
        system_account: Account owning `updateauth`.
        reporter: Receives progress and error messages.

    Returns:
        Receipt of the update, or None if nothing was submitted.
    """
    reporter = reporter or NullReporter()
    log = logger.bind(account=account)

    try:
        info = reader.get_account(account)
        active = info.permission(ACTIVE_PERMISSION)
        if active is None:
            reporter.error(f"Account {account} has no {ACTIVE_PERMISSION} permission")
            return None

        authority = with_code_permission(active.required_auth, account)
        if authority is None:
            log.info("inline_already_enabled")
            reporter.success(f"Inline actions already enabled on {account}")
            return None

        receipt = writer.transact(
            [
                Action(
                    account=system_account,
                    name="updateauth",
                    data={
                        "account": account,
                        "permission": ACTIVE_PERMISSION,
                        "parent": active.parent or "owner",
                        "auth": authority.model_dump(mode="json"),
                    },
                    authorization=[PermissionLevel(actor=account, permission=ACTIVE_PERMISSION)],
                )
            ]
        )
    except Exception as e:
        classified = classify_error(e)
        log.warning("inline_enable_failed", error=classified.text)
        reporter.error(classified.text)
        if classified.hint:
            reporter.hint(classified.hint)
        return None

    log.info("inline_enabled", transaction_id=receipt.transaction_id)
    reporter.success(f"Inline actions enabled on {account}")
    return receipt
