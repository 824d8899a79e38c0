# File: modelts/introspection.py
"""
modelts - Model Introspection
===============================
Builds ``ModelDescriptor`` snapshots from SQLAlchemy declarative classes.

Serialization metadata lives in optional class attributes::

    class User(Base):
        \"\"\"@property int $post_count\"\"\"

        __tablename__ = "users"
        __hidden__ = ("password",)
        __casts__ = {"status": Status, "is_admin": "bool"}
        __appends__ = ("post_count",)

Storage-type identifiers are the column types as the target database spells
them: compiled against a dialect, lower-cased, parameters removed
(``VARCHAR(255)`` -> ``varchar``), then renamed to the catalog spelling where
the two differ (``DOUBLE PRECISION`` -> ``float8``, ``TIMESTAMP WITH TIME
ZONE`` -> ``timestamptz``, ``CHAR(3)`` -> ``bpchar``).  Without a bind the columns come
from the mapped ``Table``; with one they are reflected from the live
database.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import Column, Enum as SQLEnum
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.dialects import registry
from sqlalchemy.engine import Connection, Dialect, Engine
from sqlalchemy.exc import CompileError
from sqlalchemy.orm import Mapper
from sqlalchemy.types import TypeEngine

from modelts.models import ColumnDescriptor, ModelDescriptor, TransformerConfig
from modelts.tstypes import LiteralUnion

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts.introspection")

_TYPE_PARAMS_RE: re.Pattern[str] = re.compile(r"\([^)]*\)")
_WHITESPACE_RE: re.Pattern[str] = re.compile(r"\s+")

Bind = Union[Engine, Connection]

# DDL spellings that the database catalog reports under a shorter name
_CATALOG_NAMES: Dict[str, str] = {
    "smallint": "int2",
    "double precision": "float8",
    "real": "float4",
    "timestamp with time zone": "timestamptz",
    "time without time zone": "time",
    "time with time zone": "timetz",
    "character": "bpchar",
    "char": "bpchar",
}


# ---------------------------------------------------------------------------
# Model detection
# ---------------------------------------------------------------------------


def is_model(obj: Any) -> bool:
    """True for classes mapped by SQLAlchemy; False for everything else."""
    if not isinstance(obj, type):
        return False
    return isinstance(sa_inspect(obj, raiseerr=False), Mapper)


# ---------------------------------------------------------------------------
# Storage-type naming
# ---------------------------------------------------------------------------


def load_dialect(name: str) -> Dialect:
    """Instantiate the default SQLAlchemy dialect registered under *name*."""
    return registry.load(name)()


def storage_type_name(type_: TypeEngine, dialect: Dialect) -> str:
    """
    Spell *type_* the way *dialect* would in DDL, normalised for lookup.

    >>> storage_type_name(String(255), postgresql.dialect())
    'varchar'
    >>> storage_type_name(SmallInteger(), postgresql.dialect())
    'int2'
    """
    try:
        compiled: str = type_.compile(dialect=dialect)
    except CompileError as exc:
        logger.debug(
            "Dialect %s cannot compile %r (%s); using class name.",
            dialect.name,
            type_,
            exc,
        )
        compiled = type(type_).__name__

    compiled = _TYPE_PARAMS_RE.sub("", compiled)
    name: str = _WHITESPACE_RE.sub(" ", compiled).strip().lower()
    return _CATALOG_NAMES.get(name, name)


def column_descriptors(table_columns: Any, dialect: Dialect) -> List[ColumnDescriptor]:
    """Describe the columns of a ``Table`` in declaration order."""
    descriptors: List[ColumnDescriptor] = []
    for column in table_columns:
        descriptors.append(
            ColumnDescriptor(
                name=column.name,
                type_name=storage_type_name(column.type, dialect),
                nullable=bool(column.nullable),
            )
        )
    return descriptors


def reflect_columns(
    bind: Bind, table_name: str, schema: Optional[str] = None
) -> List[ColumnDescriptor]:
    """Describe the columns of *table_name* as the live database reports them."""
    inspector = sa_inspect(bind)
    dialect: Dialect = bind.dialect
    descriptors: List[ColumnDescriptor] = []
    for info in inspector.get_columns(table_name, schema=schema):
        descriptors.append(
            ColumnDescriptor(
                name=info["name"],
                type_name=storage_type_name(info["type"], dialect),
                nullable=bool(info.get("nullable", True)),
            )
        )
    logger.debug("Reflected %d columns from %s.", len(descriptors), table_name)
    return descriptors


def _enum_casts(table_columns: Any) -> Dict[str, Any]:
    """
    Literal unions for ``sqlalchemy.Enum`` columns.

    The literals are the strings the column persists: member names for a
    Python enum unless the type was given a ``values_callable``.
    """
    casts: Dict[str, Any] = {}
    for column in table_columns:
        if not isinstance(column, Column):
            continue
        column_type: TypeEngine = column.type
        if isinstance(column_type, SQLEnum):
            casts[column.name] = LiteralUnion(tuple(column_type.enums))
    return casts


# ---------------------------------------------------------------------------
# Descriptor builder
# ---------------------------------------------------------------------------


def describe_model(
    model: type,
    config: Optional[TransformerConfig] = None,
    bind: Optional[Bind] = None,
) -> ModelDescriptor:
    """
    Snapshot *model* for the typers.

    Args:
        model: A mapped declarative class.
        config: Transformer settings (dialect, enum inference).
        bind: Optional Engine/Connection; when given, columns are reflected
              from the database instead of read from the mapped table.

    Raises:
        ValueError: If *model* is not a mapped class.
    """
    if not is_model(model):
        raise ValueError(f"{model!r} is not a mapped SQLAlchemy class.")

    config = config or TransformerConfig()
    mapper: Mapper = sa_inspect(model)
    table = mapper.local_table

    if bind is not None:
        columns: List[ColumnDescriptor] = reflect_columns(
            bind, table.name, schema=table.schema
        )
    else:
        columns = column_descriptors(table.columns, load_dialect(config.dialect))

    casts: Dict[str, Any] = {}
    if config.infer_enum_casts:
        casts.update(_enum_casts(table.columns))
    casts.update(dict(getattr(model, "__casts__", None) or {}))

    descriptor: ModelDescriptor = ModelDescriptor(
        name=model.__name__,
        table_name=table.name,
        columns=columns,
        hidden=frozenset(getattr(model, "__hidden__", None) or ()),
        casts=casts,
        appends=list(getattr(model, "__appends__", None) or ()),
        doc=model.__doc__,
    )
    logger.debug("Described %r.", descriptor)
    return descriptor


__all__ = [
    "is_model",
    "load_dialect",
    "storage_type_name",
    "column_descriptors",
    "reflect_columns",
    "describe_model",
]
