"""Chain API data models.

Operations submitted to the chain and the subset of account data the
deployment pipeline reads.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PermissionLevel(BaseModel):
    """An `actor@permission` pair."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor: str = Field(..., min_length=1)
    permission: str = Field(default="active", min_length=1)

    def __str__(self) -> str:
        return f"{self.actor}@{self.permission}"


class Action(BaseModel):
    """One chain operation.

    Attributes:
        account: Contract account executing the operation.
        name: Operation name (e.g. "setcode").
        data: Operation payload.
        authorization: Permissions signing the operation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    account: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
    authorization: list[PermissionLevel] = Field(default_factory=list)


class TransactionReceipt(BaseModel):
    """Identifier of an accepted transaction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    transaction_id: str = Field(..., min_length=1)


class PermissionLevelWeight(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    permission: PermissionLevel
    weight: int = Field(default=1, ge=1)


class KeyWeight(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str
    weight: int = Field(default=1, ge=1)


class WaitWeight(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    wait_sec: int = Field(..., ge=0)
    weight: int = Field(default=1, ge=1)


class Authority(BaseModel):
    """Threshold authority of a permission."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    threshold: int = Field(default=1, ge=1)
    keys: list[KeyWeight] = Field(default_factory=list)
    accounts: list[PermissionLevelWeight] = Field(default_factory=list)
    waits: list[WaitWeight] = Field(default_factory=list)


class Permission(BaseModel):
    """Named permission of an account."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    perm_name: str
    parent: str = ""
    required_auth: Authority = Field(default_factory=Authority)


class AccountInfo(BaseModel):
    """Subset of `get_account` output used by chainship."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    account_name: str
    permissions: list[Permission] = Field(default_factory=list)

    def permission(self, name: str) -> Permission | None:
        return next((p for p in self.permissions if p.perm_name == name), None)
