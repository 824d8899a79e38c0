# File: modelts/relationships.py
"""
modelts - Relationship Typer
==============================
Turns relationship accessors into ``name: Related`` / ``name: Related[]``
entries.

Relationships are discovered through a ``RelationshipResolver`` rather than
by calling accessors and looking at what comes back: the resolver lists the
attribute names declared on the model and answers, for each one, whether it
is a relationship and what it points to.  ``MapperRelationshipResolver``
answers from a SQLAlchemy ``Mapper``; tests and other model layers can plug
in their own.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper, RelationshipProperty

from modelts.models import Cardinality, RelationshipDescriptor, TypeExpression
from modelts.tstypes import ArrayOf, Reference, TsType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts.relationships")


@runtime_checkable
class RelationshipResolver(Protocol):
    """Typed access to a model's relationship accessors."""

    def candidate_names(self) -> Sequence[str]:
        """Attribute names declared directly on the model, in declaration order."""
        ...

    def try_resolve_relationship(self, name: str) -> Optional[RelationshipDescriptor]:
        """Describe *name* if it is a relationship, else return ``None``."""
        ...


class NoRelationships:
    """Resolver for models that declare no relationships."""

    def candidate_names(self) -> Sequence[str]:
        return ()

    def try_resolve_relationship(self, name: str) -> Optional[RelationshipDescriptor]:
        return None


class MapperRelationshipResolver:
    """
    Resolver backed by the SQLAlchemy mapper of a declarative class.

    Only properties whose parent is the model's own mapper are candidates, so
    relationships inherited from a mapped base class are left to the base's
    type.  A relationship that loads a collection (``uselist``) is ``MANY``;
    scalar ones, including one-to-one, are ``SINGLE``.

    Accessing ``mapper.attrs`` configures pending mappers; configuration
    errors (e.g. a relationship to an unknown class) surface here.
    """

    def __init__(self, model: type) -> None:
        self._model: type = model
        self._mapper: Mapper = sa_inspect(model)

    def candidate_names(self) -> Sequence[str]:
        return [
            prop.key for prop in self._mapper.attrs if prop.parent is self._mapper
        ]

    def try_resolve_relationship(self, name: str) -> Optional[RelationshipDescriptor]:
        prop = self._mapper.attrs.get(name)
        if not isinstance(prop, RelationshipProperty):
            return None
        if prop.parent is not self._mapper:
            return None

        return RelationshipDescriptor(
            name=prop.key,
            related_name=prop.mapper.class_.__name__,
            cardinality=Cardinality.MANY if prop.uselist else Cardinality.SINGLE,
        )

    def __repr__(self) -> str:
        return f"<MapperRelationshipResolver {self._model.__name__}>"


def relationship_type(relationship: RelationshipDescriptor) -> TsType:
    target: Reference = Reference(relationship.related_name)
    if relationship.is_many:
        return ArrayOf(target)
    return target


def type_relationships(resolver: RelationshipResolver) -> List[TypeExpression]:
    """
    Relationship Typer: one entry per candidate that resolves to a relationship.

    Exceptions raised by the resolver propagate to the caller.
    """
    expressions: List[TypeExpression] = []
    for name in resolver.candidate_names():
        relationship: Optional[RelationshipDescriptor] = (
            resolver.try_resolve_relationship(name)
        )
        if relationship is None:
            continue
        logger.debug("Relationship %r.", relationship)
        expressions.append(
            TypeExpression(relationship.name, relationship_type(relationship))
        )
    return expressions


__all__ = [
    "RelationshipResolver",
    "NoRelationships",
    "MapperRelationshipResolver",
    "relationship_type",
    "type_relationships",
]
