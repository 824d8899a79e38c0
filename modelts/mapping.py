# File: modelts/mapping.py
"""
modelts - Field Typer & Cast Mapping
======================================
Rule tables that turn storage-type identifiers and cast identifiers into
TypeScript types.

Resolution order for a stored column::

    cast declared?  ──yes──▶ map_cast(cast)          (enum → literal union,
         │                                             then CAST_TYPE_MAP)
         no
         ▼
    map_storage_type(column.type_name)               (STORAGE_TYPE_MAP)
         │
         ▼
    column.nullable?  ──yes──▶  <type> | null

Nothing here raises for an unknown identifier: it becomes
``unknown /* <identifier> */`` so generation never blocks on an exotic type.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Dict, Mapping, Optional, Type

from modelts.models import ColumnDescriptor, TypeExpression
from modelts.tstypes import (
    ANY,
    ANY_ARRAY,
    BOOLEAN,
    NUMBER,
    STRING,
    LiteralUnion,
    TsType,
    Unresolved,
    nullable,
)
from modelts.utils import import_object

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts.mapping")


# ---------------------------------------------------------------------------
# Rule tables (identifiers are case-sensitive)
# ---------------------------------------------------------------------------

STORAGE_TYPE_MAP: Dict[str, TsType] = {
    # Strings
    "uuid": STRING,
    "string": STRING,
    "text": STRING,
    "varchar": STRING,
    "character varying": STRING,
    "date": STRING,
    "datetime": STRING,
    "timestamp": STRING,
    "timestamp without time zone": STRING,
    "bpchar": STRING,
    "timestamptz": STRING,
    "time": STRING,
    "bytea": STRING,
    "blob": STRING,
    # Numbers
    "integer": NUMBER,
    "bigint": NUMBER,
    "int2": NUMBER,
    "int4": NUMBER,
    "int8": NUMBER,
    "float": NUMBER,
    "double": NUMBER,
    "decimal": NUMBER,
    "float8": NUMBER,
    "numeric": NUMBER,
    # Booleans
    "boolean": BOOLEAN,
    "bool": BOOLEAN,
}

CAST_TYPE_MAP: Dict[str, TsType] = {
    "boolean": BOOLEAN,
    "bool": BOOLEAN,
    "int": NUMBER,
    "float": NUMBER,
    "string": STRING,
    "datetime": STRING,
    "timestamp": STRING,
    "date": STRING,
    "uuid": STRING,
    "array": ANY,
    "object": ANY,
    "collection": ANY_ARRAY,
    # Python spellings
    "str": STRING,
    "dict": ANY,
    "list": ANY_ARRAY,
}


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


def _is_enum_class(obj: Any) -> bool:
    return isinstance(obj, type) and issubclass(obj, enum.Enum)


def resolve_enum(
    cast: Any,
    enums: Optional[Mapping[str, Type[enum.Enum]]] = None,
) -> Optional[Type[enum.Enum]]:
    """
    Return the enumeration *cast* names, or ``None``.

    *cast* may be an ``Enum`` subclass, a key of the *enums* registry, or a
    dotted import path to an ``Enum`` subclass.
    """
    if _is_enum_class(cast):
        return cast
    if not isinstance(cast, str):
        return None

    if enums and cast in enums:
        return enums[cast]

    if "." in cast or ":" in cast:
        try:
            target: Any = import_object(cast)
        except ImportError:
            logger.debug("Cast '%s' is not an importable enum.", cast)
            return None
        if _is_enum_class(target):
            return target

    return None


def enum_literal_union(enum_cls: Type[enum.Enum]) -> LiteralUnion:
    """Literal union of the member values, in declaration order."""
    return LiteralUnion(tuple(str(member.value) for member in enum_cls))


# ---------------------------------------------------------------------------
# Mapping functions
# ---------------------------------------------------------------------------


def cast_identifier(cast: Any) -> str:
    """The string a cast is looked up by (Python types map by ``__name__``)."""
    if isinstance(cast, str):
        return cast
    if isinstance(cast, type):
        return cast.__name__
    return str(cast)


def map_storage_type(type_name: str) -> TsType:
    """Map a storage-type identifier through ``STORAGE_TYPE_MAP``."""
    mapped: Optional[TsType] = STORAGE_TYPE_MAP.get(type_name)
    if mapped is None:
        logger.debug("Unmapped storage type '%s'.", type_name)
        return Unresolved(type_name)
    return mapped


def map_cast(
    cast: Any,
    enums: Optional[Mapping[str, Type[enum.Enum]]] = None,
) -> TsType:
    """
    Map a cast identifier to a type, without nullability.

    Enumerations win over the fixed table, so a registered enum called
    ``"string"`` would shadow the built-in ``string`` cast.  A cast that is
    already a ``TsType`` (an inferred enum-column union) is used as is.
    """
    if isinstance(cast, TsType):
        return cast

    enum_cls: Optional[Type[enum.Enum]] = resolve_enum(cast, enums)
    if enum_cls is not None:
        return enum_literal_union(enum_cls)

    identifier: str = cast_identifier(cast)
    mapped: Optional[TsType] = CAST_TYPE_MAP.get(identifier)
    if mapped is None:
        logger.debug("Unmapped cast '%s'.", identifier)
        return Unresolved(identifier)
    return mapped


def type_field(
    column: ColumnDescriptor,
    cast: Any = None,
    enums: Optional[Mapping[str, Type[enum.Enum]]] = None,
) -> TypeExpression:
    """
    Field Typer: type one stored column.

    Args:
        column: The column snapshot.
        cast: Cast identifier registered for the column, if any.
        enums: Registry of named enumerations.
    """
    if cast is not None:
        type_: TsType = map_cast(cast, enums)
    else:
        type_ = map_storage_type(column.type_name)

    if column.nullable:
        type_ = nullable(type_)

    return TypeExpression(column.name, type_)


__all__ = [
    "STORAGE_TYPE_MAP",
    "CAST_TYPE_MAP",
    "resolve_enum",
    "enum_literal_union",
    "cast_identifier",
    "map_storage_type",
    "map_cast",
    "type_field",
]
