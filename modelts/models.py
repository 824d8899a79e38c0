# File: modelts/models.py
"""
modelts - Core Data Models
============================
Pydantic V2 models describing what the transformer consumes and produces.

Pipeline::

    mapped class ──▶ ModelDescriptor ──▶ [TypeExpression, ...] ──▶ TransformedType
                       (introspection)        (typers)              (transformer)

Descriptors are snapshots: they are built fresh for every transformation and
never cached, so two runs over the same snapshot render identical text.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modelts.tstypes import TsType
from modelts.utils import import_object

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts.models")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Cardinality(str, enum.Enum):
    """How many related rows a relationship accessor yields."""

    SINGLE = "single"
    MANY = "many"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SNAPSHOT_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    arbitrary_types_allowed=True,
)


# ---------------------------------------------------------------------------
# Introspection snapshots
# ---------------------------------------------------------------------------


class ColumnDescriptor(BaseModel):
    """A single stored column as reported by the model layer."""

    model_config = _SNAPSHOT_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    type_name: str = Field(
        ...,
        description="Storage-type identifier, e.g. 'uuid', 'int4', 'timestamptz'.",
    )
    nullable: bool = Field(default=True, description="Whether the column allows NULL.")

    def __repr__(self) -> str:
        null: str = " NULL" if self.nullable else ""
        return f"<ColumnDescriptor {self.name}: {self.type_name}{null}>"


class ModelDescriptor(BaseModel):
    """
    Everything the typers need to know about one model.

    ``casts`` values are cast identifiers: plain strings (``"bool"``,
    ``"datetime"``), ``enum.Enum`` subclasses, Python types, or ready-made
    ``TsType`` values (inferred enum-column unions).
    """

    model_config = _SNAPSHOT_CONFIG

    name: str = Field(..., min_length=1, description="Model (class) name.")
    table_name: str = Field(..., min_length=1, description="Backing table name.")
    columns: List[ColumnDescriptor] = Field(default_factory=list)
    hidden: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Column names excluded from serialization.",
    )
    casts: Dict[str, Any] = Field(
        default_factory=dict,
        description="Field name -> cast identifier.",
    )
    appends: List[str] = Field(
        default_factory=list,
        description="Computed field names, in declared order.",
    )
    doc: Optional[str] = Field(
        default=None, description="Raw documentation block of the model class."
    )

    @property
    def serialized_columns(self) -> List[ColumnDescriptor]:
        return [col for col in self.columns if col.name not in self.hidden]

    def __repr__(self) -> str:
        return (
            f"<ModelDescriptor {self.name} table={self.table_name} "
            f"columns={len(self.columns)} appends={len(self.appends)}>"
        )


class RelationshipDescriptor(BaseModel):
    """A resolved relationship accessor pointing at another model."""

    model_config = _SNAPSHOT_CONFIG

    name: str = Field(..., min_length=1, description="Accessor name on the model.")
    related_name: str = Field(..., min_length=1, description="Target class name.")
    cardinality: Cardinality = Field(default=Cardinality.SINGLE)

    @property
    def is_many(self) -> bool:
        return self.cardinality == Cardinality.MANY

    def __repr__(self) -> str:
        suffix: str = "[]" if self.is_many else ""
        return f"<RelationshipDescriptor {self.name} -> {self.related_name}{suffix}>"


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TypeExpression:
    """One ``name: type`` entry of a generated structural type."""

    name: str
    type: TsType

    def render(self) -> str:
        return f"{self.name}: {self.type.render()}"


@dataclass(frozen=True, slots=True)
class TransformedType:
    """Named structural type produced for one model."""

    name: str
    properties: Tuple[TypeExpression, ...]

    @property
    def property_names(self) -> List[str]:
        return [prop.name for prop in self.properties]

    @property
    def body(self) -> str:
        return "{\n" + "\n".join(prop.render() for prop in self.properties) + "\n}"

    def declaration(self, keyword: str = "type") -> str:
        """Render as an exported TypeScript declaration."""
        if keyword == "interface":
            return f"export interface {self.name} {self.body}"
        return f"export type {self.name} = {self.body};"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_HEADER: str = "// This file is generated by modelts. Do not edit it by hand."


class TransformerConfig(BaseModel):
    """
    Settings shared by the transformer, the exporter and the CLI.

    ``enums`` maps a cast identifier to an ``enum.Enum`` subclass so that a
    plain string cast (or a docstring annotation) such as ``"Status"`` can be
    rendered as a literal union.  Values may be given as dotted import paths;
    they are resolved once, on validation.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )

    dialect: str = Field(
        default="postgresql",
        description="SQLAlchemy dialect used to name column storage types.",
    )
    enums: Dict[str, Any] = Field(
        default_factory=dict,
        description="Cast identifier -> Enum class (or dotted path to one).",
    )
    infer_enum_casts: bool = Field(
        default=True,
        description="Type sqlalchemy.Enum columns as unions of their stored strings.",
    )
    missing_append_type: Literal["unknown", "any"] = Field(
        default="unknown",
        description="Type used for computed fields without an annotation.",
    )
    type_keyword: Literal["type", "interface"] = Field(default="type")
    header: str = Field(default=DEFAULT_HEADER)

    @field_validator("dialect")
    @classmethod
    def _normalise_dialect(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("dialect must not be empty")
        return v

    @field_validator("enums")
    @classmethod
    def _resolve_enums(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        resolved: Dict[str, Any] = {}
        for name, target in v.items():
            if isinstance(target, str):
                try:
                    target = import_object(target)
                except ImportError as exc:
                    raise ValueError(f"Cannot import enum '{name}': {exc}") from exc
            if not (isinstance(target, type) and issubclass(target, enum.Enum)):
                raise ValueError(f"Enum '{name}' does not resolve to an Enum subclass.")
            resolved[name] = target
        return resolved


__all__ = [
    "Cardinality",
    "ColumnDescriptor",
    "ModelDescriptor",
    "RelationshipDescriptor",
    "TypeExpression",
    "TransformedType",
    "TransformerConfig",
    "DEFAULT_HEADER",
]
