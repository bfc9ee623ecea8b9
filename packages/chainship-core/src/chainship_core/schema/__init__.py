"""Interface schema models, binary encoding and diffing."""

from __future__ import annotations

from chainship_core.schema.diff import DiffResult, diff_schemas, records_equal
from chainship_core.schema.models import (
    AbiExtension,
    ActionDef,
    ActionResult,
    ClausePair,
    ErrorMessage,
    FieldDef,
    InterfaceSchema,
    StructDef,
    TableDef,
    TypeDef,
    VariantDef,
)
from chainship_core.schema.serializer import encode_name, serialize_schema, serialize_schema_hex

__all__ = [
    # Models
    "InterfaceSchema",
    "TypeDef",
    "FieldDef",
    "StructDef",
    "ActionDef",
    "TableDef",
    "ClausePair",
    "ErrorMessage",
    "AbiExtension",
    "VariantDef",
    "ActionResult",
    # Diff
    "DiffResult",
    "diff_schemas",
    "records_equal",
    # Encoding
    "encode_name",
    "serialize_schema",
    "serialize_schema_hex",
]
