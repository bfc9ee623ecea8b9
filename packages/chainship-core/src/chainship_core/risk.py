"""Data-loss risk assessment.

Before a schema change removes or reshapes a table, chainship checks
whether the table currently holds rows. Probes are conservative: a probe
that fails counts as "no data" instead of stopping the deployment.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import partial
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

from chainship_core.concurrency import join_all

if TYPE_CHECKING:
    from chainship_core.chain.protocol import ChainReader
    from chainship_core.schema.diff import DiffResult

logger = structlog.get_logger(__name__)

DATA_CORRUPTION_NOTICE = "Deploy of the contract may corrupt the data"
MAX_PROBE_WORKERS = 8


def _has_rows(reader: ChainReader, account: str, table: str) -> bool:
    return len(reader.get_table_by_scope(account, table)) > 0


def assess_risk(reader: ChainReader, account: str, table_names: Sequence[str]) -> list[str]:
    """Return the tables that currently hold at least one row.

    Probes run concurrently, at most MAX_PROBE_WORKERS at a time. A failed
    probe is logged and treated as an empty table.

    Args:
        reader: Chain read API.
        account: Contract account owning the tables.
        table_names: Tables to probe.

    Returns:
        Tables with data, in input order, without duplicates.
    """
    names = list(dict.fromkeys(table_names))
    if not names:
        return []

    outcomes = join_all(
        [partial(_has_rows, reader, account, name) for name in names],
        max_workers=MAX_PROBE_WORKERS,
    )

    with_data: list[str] = []
    for name, outcome in zip(names, outcomes, strict=True):
        if not outcome.ok:
            logger.debug(
                "table_probe_failed",
                account=account,
                table=name,
                error=str(outcome.error),
            )
        if outcome.value_or(False):
            with_data.append(name)

    logger.info("risk_assessed", account=account, probed=len(names), with_data=len(with_data))
    return with_data


class RiskAssessment(BaseModel):
    """Tables with data that a deployment would remove or change.

    Attributes:
        removed: Removed tables that hold rows.
        updated: Changed tables that hold rows.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    removed: tuple[str, ...] = Field(default=(), description="Removed tables with rows")
    updated: tuple[str, ...] = Field(default=(), description="Changed tables with rows")

    @classmethod
    def from_diff(cls, reader: ChainReader, account: str, diff: DiffResult) -> RiskAssessment:
        """Probe the removed and the updated tables of a diff separately."""
        removed = assess_risk(reader, account, diff.removed) if diff.removed else []
        updated = assess_risk(reader, account, diff.updated) if diff.updated else []
        return cls(removed=tuple(removed), updated=tuple(updated))

    @property
    def has_risk(self) -> bool:
        return bool(self.removed or self.updated)

    def warning_text(self) -> str:
        """Render the grouped warning shown before the risk confirmation.

        Returns:
            Warning text, or "" when no table with data is affected.
        """
        warning = ""
        if self.removed:
            tables = "\n    ".join(self.removed)
            warning += f"The following tables you are going to remove have rows:\n    {tables}\n"
        if self.updated:
            tables = "\n    ".join(self.updated)
            warning += f"The following tables you are going to change have rows:\n    {tables}\n"
        return warning
