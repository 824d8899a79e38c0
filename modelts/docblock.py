# File: modelts/docblock.py
"""
modelts - Computed-Property Typer
===================================
Types computed ("append") fields from ``@property`` annotations in the model's
docstring.

Annotation grammar::

    annotation := "@property" WS+ TYPE WS+ "$" NAME [ \\t]* (NEWLINE | END)
    TYPE       := one or more non-whitespace characters
    NAME       := one or more word characters

Example docstring::

    class User(Base):
        \"\"\"A registered user.

        @property int $post_count
        @property Status $state
        \"\"\"

The captured ``TYPE`` token goes through the same cast mapping as a column
cast, so ``int`` becomes ``number`` and a registered enum becomes a literal
union.  Anything trailing the name on the same line (a description, say)
means the line is not an annotation.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Type

from modelts.mapping import map_cast
from modelts.models import TypeExpression
from modelts.tstypes import ANY, UNKNOWN, TsType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts.docblock")

_PROPERTY_RE: re.Pattern[str] = re.compile(
    r"@property\s+(?P<type>\S+)\s+\$(?P<name>\w+)[ \t]*(?:\r?\n|$)"
)


@dataclass(frozen=True, slots=True)
class PropertyAnnotation:
    """A parsed ``@property <type> $<name>`` annotation."""

    type_token: str
    name: str


def iter_property_annotations(doc: Optional[str]) -> Iterator[PropertyAnnotation]:
    """Yield every annotation in *doc*, in textual order."""
    if not doc:
        return
    for match in _PROPERTY_RE.finditer(doc):
        yield PropertyAnnotation(match.group("type"), match.group("name"))


def find_property_annotation(
    doc: Optional[str], name: str
) -> Optional[PropertyAnnotation]:
    """Return the first annotation declaring *name*, or ``None``."""
    for annotation in iter_property_annotations(doc):
        if annotation.name == name:
            return annotation
    return None


def type_computed_property(
    doc: Optional[str],
    name: str,
    enums: Optional[Mapping[str, Type[enum.Enum]]] = None,
    fallback: TsType = UNKNOWN,
) -> TypeExpression:
    """
    Computed-Property Typer: type one append field.

    No nullability is inferred; an annotation of ``int|null`` is an unknown
    cast and renders as such.
    """
    annotation: Optional[PropertyAnnotation] = find_property_annotation(doc, name)
    if annotation is None:
        logger.debug("No @property annotation for '%s'.", name)
        return TypeExpression(name, fallback)
    return TypeExpression(name, map_cast(annotation.type_token, enums))


def fallback_for(missing_append_type: str) -> TsType:
    """The permissive type configured for unannotated computed fields."""
    return ANY if missing_append_type == "any" else UNKNOWN


__all__ = [
    "PropertyAnnotation",
    "iter_property_annotations",
    "find_property_annotation",
    "type_computed_property",
    "fallback_for",
]
