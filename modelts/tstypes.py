# File: modelts/tstypes.py
"""
modelts - TypeScript Type Expressions
=======================================
Small immutable type model for the TypeScript side of the bridge.

Every mapping rule in the package produces one of these variants instead of
a raw string, so that nullability, arrays and the "unresolved" escape hatch
compose without string surgery.  Only ``render()`` turns them into text.

Variants::

    Primitive("string")            -> string
    Reference("Post")              -> Post
    ArrayOf(Reference("Post"))     -> Post[]
    LiteralUnion(("a", "b"))       -> 'a' | 'b'
    Nullable(Primitive("string"))  -> string | null
    Unresolved("jsonb")            -> unknown /* jsonb */
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


class TsType:
    """Base class for all TypeScript type expressions."""

    __slots__ = ()

    def render(self) -> str:
        raise NotImplementedError

    @property
    def is_union(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True, slots=True)
class Primitive(TsType):
    """A built-in TypeScript type keyword (``string``, ``number``, ``any`` ...)."""

    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Reference(TsType):
    """A reference to another generated type by name."""

    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class ArrayOf(TsType):
    item: TsType

    def render(self) -> str:
        inner: str = self.item.render()
        if self.item.is_union:
            return f"({inner})[]"
        return f"{inner}[]"


@dataclass(frozen=True, slots=True)
class LiteralUnion(TsType):
    """
    Union of single-quoted string literals, in the given order.

    An empty union has no inhabitants and renders as ``never``.
    """

    values: Tuple[str, ...]

    def render(self) -> str:
        if not self.values:
            return "never"
        return " | ".join(_quote(value) for value in self.values)

    @property
    def is_union(self) -> bool:
        return len(self.values) > 1


@dataclass(frozen=True, slots=True)
class Nullable(TsType):
    inner: TsType

    def render(self) -> str:
        return f"{self.inner.render()} | null"

    @property
    def is_union(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Unresolved(TsType):
    """
    Fallback for a source type no rule recognised.

    Carries the original identifier so the emitted code still shows where
    the ``unknown`` came from.
    """

    source: str

    def render(self) -> str:
        return f"unknown /* {self.source} */"


def _quote(value: str) -> str:
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def nullable(type_: TsType) -> TsType:
    """Union *type_* with ``null`` unless it already is."""
    if isinstance(type_, Nullable):
        return type_
    return Nullable(type_)


# ---------------------------------------------------------------------------
# Shared singletons
# ---------------------------------------------------------------------------

STRING: Primitive = Primitive("string")
NUMBER: Primitive = Primitive("number")
BOOLEAN: Primitive = Primitive("boolean")
ANY: Primitive = Primitive("any")
UNKNOWN: Primitive = Primitive("unknown")
ANY_ARRAY: ArrayOf = ArrayOf(ANY)


__all__ = [
    "TsType",
    "Primitive",
    "Reference",
    "ArrayOf",
    "LiteralUnion",
    "Nullable",
    "Unresolved",
    "nullable",
    "STRING",
    "NUMBER",
    "BOOLEAN",
    "ANY",
    "UNKNOWN",
    "ANY_ARRAY",
]
