"""Interface schema (ABI) models.

Immutable pydantic models mirroring the chain's ABI definition. The same
models are used for schema files on disk and for schemas fetched from a
deployed account, so the differ compares like with like. Unknown keys are
ignored: nodes and contract toolchains add sections over time.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from chainship_core.errors import InvalidSchema

DEFAULT_ABI_VERSION = "eosio::abi/1.1"


class TypeDef(BaseModel):
    """Type alias declared by the schema."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    new_type_name: str
    type: str


class FieldDef(BaseModel):
    """One field of a record descriptor."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    type: str


class StructDef(BaseModel):
    """Record descriptor: the row layout of a table or the payload of an action.

    Attributes:
        name: Record type name.
        base: Name of the record this one extends ("" for none).
        fields: Ordered fields.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    base: str = ""
    fields: list[FieldDef] = Field(default_factory=list)


class ActionDef(BaseModel):
    """Action exposed by the contract."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    type: str
    ricardian_contract: str = ""


class TableDef(BaseModel):
    """Table descriptor.

    Attributes:
        name: Table name.
        index_type: Primary index type.
        key_names: Secondary key names.
        key_types: Secondary key types.
        type: Name of the record descriptor used for rows.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    index_type: str = "i64"
    key_names: list[str] = Field(default_factory=list)
    key_types: list[str] = Field(default_factory=list)
    type: str


class ClausePair(BaseModel):
    """Ricardian clause."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    body: str


class ErrorMessage(BaseModel):
    """Contract error code description."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    error_code: int = Field(..., ge=0, le=2**64 - 1)
    error_msg: str


class AbiExtension(BaseModel):
    """Tagged extension; `value` is hex encoded bytes.

    Nodes return extensions as `[tag, value]` pairs; schema files usually
    spell them as objects. Both forms are accepted.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    tag: int = Field(..., ge=0, le=0xFFFF)
    value: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"tag": data[0], "value": data[1]}
        return data


class VariantDef(BaseModel):
    """Variant type declaration."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    types: list[str] = Field(default_factory=list)


class ActionResult(BaseModel):
    """Declared return type of an action."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    result_type: str


class InterfaceSchema(BaseModel):
    """A contract's interface schema.

    Missing sections default to empty lists, matching how schema files
    produced by contract toolchains often omit unused sections.

    Example:
        >>> schema = InterfaceSchema.from_file(Path("build/token.abi"))
        >>> [table.name for table in schema.tables]
        ['accounts', 'stat']
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: str = DEFAULT_ABI_VERSION
    types: list[TypeDef] = Field(default_factory=list)
    structs: list[StructDef] = Field(default_factory=list)
    actions: list[ActionDef] = Field(default_factory=list)
    tables: list[TableDef] = Field(default_factory=list)
    ricardian_clauses: list[ClausePair] = Field(default_factory=list)
    error_messages: list[ErrorMessage] = Field(default_factory=list)
    abi_extensions: list[AbiExtension] = Field(default_factory=list)
    variants: list[VariantDef] = Field(default_factory=list)
    action_results: list[ActionResult] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InterfaceSchema:
        """Build a schema from decoded JSON."""
        return cls.model_validate(data)

    @classmethod
    def from_file(cls, path: Path) -> InterfaceSchema:
        """Read a schema file.

        Args:
            path: Path to a JSON ABI file.

        Returns:
            Parsed InterfaceSchema.

        Raises:
            InvalidSchema: If the file is not JSON or a section has the wrong
                shape.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidSchema(str(path), internal_details=str(e)) from e

        if not isinstance(data, dict):
            raise InvalidSchema(str(path), internal_details="top level value is not an object")
        try:
            return cls.from_dict(data)
        except ValidationError as e:
            raise InvalidSchema(str(path), internal_details=str(e)) from e

    def struct(self, name: str) -> StructDef | None:
        """Look up a record descriptor by name."""
        return next((s for s in self.structs if s.name == name), None)

    def table(self, name: str) -> TableDef | None:
        """Look up a table descriptor by name."""
        return next((t for t in self.tables if t.name == name), None)
