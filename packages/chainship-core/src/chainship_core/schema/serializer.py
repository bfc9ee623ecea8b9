"""Binary encoding of interface schemas.

The schema-replacement operation carries the ABI in the chain's binary
`abi_def` encoding, hex encoded. Layout, in order:

    version            string
    types              type_def[]
    structs            struct_def[]
    actions            action_def[]        (name is a 64-bit account name)
    tables             table_def[]         (name is a 64-bit account name)
    ricardian_clauses  clause_pair[]
    error_messages     error_message[]     (error_code is uint64)
    abi_extensions     extensions_entry[]  (uint16 tag, bytes value)
    variants           variant_def[]
    action_results     action_result_def[] (name is a 64-bit account name)

Arrays, strings and byte blobs are prefixed with a varuint32 length.
"""

from __future__ import annotations

import re
import struct
from collections.abc import Callable, Sequence
from typing import TypeVar

from chainship_core.schema.models import (
    AbiExtension,
    ActionDef,
    ActionResult,
    ClausePair,
    ErrorMessage,
    InterfaceSchema,
    StructDef,
    TableDef,
    TypeDef,
    VariantDef,
)

T = TypeVar("T")

_NAME_PATTERN = re.compile(r"^[.1-5a-z]{0,12}[.1-5a-j]?$")


def _char_to_symbol(char: str) -> int:
    if "a" <= char <= "z":
        return ord(char) - ord("a") + 6
    if "1" <= char <= "5":
        return ord(char) - ord("1") + 1
    return 0


def encode_name(name: str) -> int:
    """Convert an account/table/action name to its 64-bit value.

    Args:
        name: Up to 13 characters from `.12345abcdefghijklmnopqrstuvwxyz`
            (the 13th limited to `.1-5a-j`).

    Returns:
        Unsigned 64-bit integer.

    Raises:
        ValueError: If the name contains invalid characters or is too long.

    Example:
        >>> encode_name("eosio")
        6138663577826885632
    """
    if not _NAME_PATTERN.match(name):
        raise ValueError(f"Invalid name: {name!r}")

    value = 0
    for i in range(13):
        symbol = _char_to_symbol(name[i]) if i < len(name) else 0
        if i < 12:
            symbol &= 0x1F
            symbol <<= 64 - 5 * (i + 1)
        else:
            symbol &= 0x0F
        value |= symbol
    return value


class _Writer:
    """Append-only little-endian buffer."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def varuint32(self, value: int) -> None:
        if value < 0 or value > 0xFFFFFFFF:
            raise ValueError(f"varuint32 out of range: {value}")
        while True:
            if value >> 7:
                self._buffer.append(0x80 | (value & 0x7F))
                value >>= 7
            else:
                self._buffer.append(value)
                break

    def uint16(self, value: int) -> None:
        self._buffer += struct.pack("<H", value)

    def uint64(self, value: int) -> None:
        self._buffer += struct.pack("<Q", value)

    def blob(self, value: bytes) -> None:
        self.varuint32(len(value))
        self._buffer += value

    def string(self, value: str) -> None:
        self.blob(value.encode("utf-8"))

    def name(self, value: str) -> None:
        self.uint64(encode_name(value))

    def array(self, items: Sequence[T], write_item: Callable[[T], None]) -> None:
        self.varuint32(len(items))
        for item in items:
            write_item(item)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


def serialize_schema(schema: InterfaceSchema) -> bytes:
    """Encode a schema as a binary `abi_def`.

    Args:
        schema: Schema to encode.

    Returns:
        Encoded bytes.

    Raises:
        ValueError: If a table, action or action result name is not a valid
            chain name, or an extension value is not hex.
    """
    w = _Writer()

    def type_def(item: TypeDef) -> None:
        w.string(item.new_type_name)
        w.string(item.type)

    def struct_def(item: StructDef) -> None:
        w.string(item.name)
        w.string(item.base)
        w.varuint32(len(item.fields))
        for field in item.fields:
            w.string(field.name)
            w.string(field.type)

    def action_def(item: ActionDef) -> None:
        w.name(item.name)
        w.string(item.type)
        w.string(item.ricardian_contract)

    def table_def(item: TableDef) -> None:
        w.name(item.name)
        w.string(item.index_type)
        w.array(item.key_names, w.string)
        w.array(item.key_types, w.string)
        w.string(item.type)

    def clause_pair(item: ClausePair) -> None:
        w.string(item.id)
        w.string(item.body)

    def error_message(item: ErrorMessage) -> None:
        w.uint64(item.error_code)
        w.string(item.error_msg)

    def extension(item: AbiExtension) -> None:
        w.uint16(item.tag)
        w.blob(bytes.fromhex(item.value))

    def variant_def(item: VariantDef) -> None:
        w.string(item.name)
        w.array(item.types, w.string)

    def action_result(item: ActionResult) -> None:
        w.name(item.name)
        w.string(item.result_type)

    w.string(schema.version)
    w.array(schema.types, type_def)
    w.array(schema.structs, struct_def)
    w.array(schema.actions, action_def)
    w.array(schema.tables, table_def)
    w.array(schema.ricardian_clauses, clause_pair)
    w.array(schema.error_messages, error_message)
    w.array(schema.abi_extensions, extension)
    w.array(schema.variants, variant_def)
    w.array(schema.action_results, action_result)
    return w.getvalue()


def serialize_schema_hex(schema: InterfaceSchema) -> str:
    """Encode a schema as a hex string, the form carried by `setabi`."""
    return serialize_schema(schema).hex()
