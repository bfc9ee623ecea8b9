"""Breaking-change detection between two interface schemas.

Only regressions against the live schema are reported: tables that
disappear and tables whose row layout changes. Tables added by the
candidate schema are never reported.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from chainship_core.schema.models import FieldDef, InterfaceSchema, StructDef


class DiffResult(BaseModel):
    """Tables of the existing schema affected by the candidate schema.

    Attributes:
        removed: Tables absent from the candidate schema.
        updated: Tables present in both whose record descriptor differs.

    A table appears in at most one of the two lists.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    removed: tuple[str, ...] = Field(default=(), description="Removed tables")
    updated: tuple[str, ...] = Field(default=(), description="Changed tables")

    @property
    def is_empty(self) -> bool:
        return not self.removed and not self.updated


def fields_equal(left: FieldDef, right: FieldDef) -> bool:
    return left.name == right.name and left.type == right.type


def records_equal(left: StructDef | None, right: StructDef | None) -> bool:
    """Compare two record descriptors field by field.

    A missing descriptor only equals another missing descriptor. Field
    order is significant: the row encoding follows it.
    """
    if left is None or right is None:
        return left is right
    if left.name != right.name or left.base != right.base:
        return False
    if len(left.fields) != len(right.fields):
        return False
    return all(fields_equal(a, b) for a, b in zip(left.fields, right.fields, strict=True))


def diff_schemas(existing: InterfaceSchema, candidate: InterfaceSchema) -> DiffResult:
    """Classify the existing schema's tables against a candidate schema.

    Args:
        existing: Schema currently deployed on the account.
        candidate: Schema about to be deployed.

    Returns:
        DiffResult listing removed and updated tables in existing-schema order.

    Example:
        >>> diff_schemas(schema, schema)
        DiffResult(removed=(), updated=())
    """
    removed: list[str] = []
    updated: list[str] = []

    for table in existing.tables:
        new_table = candidate.table(table.name)
        if new_table is None:
            removed.append(table.name)
            continue

        existing_record = existing.struct(table.type)
        candidate_record = candidate.struct(new_table.type)
        if not records_equal(existing_record, candidate_record):
            updated.append(table.name)

    return DiffResult(removed=tuple(removed), updated=tuple(updated))
