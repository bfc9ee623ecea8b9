"""Unit tests for chainship_core.inline module."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from chainship_core.chain.models import (
    AccountInfo,
    Authority,
    KeyWeight,
    Permission,
    PermissionLevel,
    PermissionLevelWeight,
)
from chainship_core.errors import ChainRpcError
from chainship_core.inline import enable_inline, with_code_permission


def weight(actor: str, permission: str) -> PermissionLevelWeight:
    return PermissionLevelWeight(permission=PermissionLevel(actor=actor, permission=permission))


def account_with(
    authority: Authority, *, permissions: tuple[str, ...] = ("active",)
) -> AccountInfo:
    return AccountInfo(
        account_name="mytoken",
        permissions=[
            Permission(perm_name=name, parent="owner", required_auth=authority)
            for name in permissions
        ],
    )


KEY_ONLY = Authority(keys=[KeyWeight(key="PUB_K1_abc")])


class TestWithCodePermission:
    """Tests for with_code_permission function."""

    def test_adds_entry(self) -> None:
        """Test the code permission is appended to an authority without accounts."""
        authority = with_code_permission(KEY_ONLY, "mytoken")

        assert authority is not None
        assert [str(a.permission) for a in authority.accounts] == ["mytoken@eosio.code"]
        assert authority.keys == KEY_ONLY.keys
        assert authority.threshold == 1

    def test_keeps_accounts_sorted(self) -> None:
        """Test the new entry is placed in actor order."""
        existing = Authority(accounts=[weight("alice", "active"), weight("zed", "active")])

        authority = with_code_permission(existing, "mytoken")

        assert authority is not None
        assert [a.permission.actor for a in authority.accounts] == ["alice", "mytoken", "zed"]

    def test_already_present(self) -> None:
        """Test None is returned when nothing needs to change."""
        existing = Authority(accounts=[weight("mytoken", "eosio.code")])

        assert with_code_permission(existing, "mytoken") is None


class TestEnableInline:
    """Tests for enable_inline function."""

    def test_submits_updateauth(
        self,
        make_reader: Callable[..., Any],
        make_writer: Callable[..., Any],
        reporter: Any,
    ) -> None:
        """Test the active permission is updated through the system account."""
        writer = make_writer()

        receipt = enable_inline(
            make_reader(account=account_with(KEY_ONLY)),
            writer,
            "mytoken",
            system_account="eosio",
            reporter=reporter,
        )

        assert receipt is not None
        (action,) = writer.submitted
        assert action.account == "eosio"
        assert action.name == "updateauth"
        assert action.data["permission"] == "active"
        assert action.data["parent"] == "owner"
        assert action.data["auth"]["accounts"] == [
            {"permission": {"actor": "mytoken", "permission": "eosio.code"}, "weight": 1}
        ]
        assert reporter.texts("success") == ["Inline actions enabled on mytoken"]

    def test_already_enabled(
        self,
        make_reader: Callable[..., Any],
        make_writer: Callable[..., Any],
        reporter: Any,
    ) -> None:
        """Test nothing is submitted when the permission is already present."""
        authority = Authority(accounts=[weight("mytoken", "eosio.code")])
        writer = make_writer()

        receipt = enable_inline(
            make_reader(account=account_with(authority)), writer, "mytoken", reporter=reporter
        )

        assert receipt is None
        assert writer.submitted == []
        assert reporter.texts("success") == ["Inline actions already enabled on mytoken"]

    def test_missing_active_permission(
        self,
        make_reader: Callable[..., Any],
        make_writer: Callable[..., Any],
        reporter: Any,
    ) -> None:
        """Test an account without active permission is reported."""
        reader = make_reader(account=account_with(KEY_ONLY, permissions=("owner",)))

        assert enable_inline(reader, make_writer(), "mytoken", reporter=reporter) is None
        assert reporter.texts("error") == ["Account mytoken has no active permission"]

    def test_rejection_reported_with_hint(
        self,
        make_reader: Callable[..., Any],
        make_writer: Callable[..., Any],
        reporter: Any,
    ) -> None:
        """Test a rejected update is reported with its hint, never raised."""
        error = ChainRpcError("x", details=[{"message": "missing authority of mytoken"}])
        writer = make_writer(errors={"updateauth": error})

        receipt = enable_inline(
            make_reader(account=account_with(KEY_ONLY)), writer, "mytoken", reporter=reporter
        )

        assert receipt is None
        assert reporter.texts("error") == ["missing authority of mytoken"]
        assert len(reporter.texts("hint")) == 1
