# File: modelts/transformer.py
"""
modelts - Model Transformer
=============================
Composes the three typers into one structural type per model.

Body order::

    1. stored columns      (declaration order, hidden columns removed)
    2. computed fields     (``__appends__`` order)
    3. relationships       (resolver candidate order)

Usage::

    transformer = ModelTransformer(TransformerConfig(dialect="postgresql"))
    transformed = transformer.transform(User)
    if transformed is not None:
        print(transformed.declaration())

The transformer is selective: ``transform()`` returns ``None`` for anything
that is not a mapped class, leaving it to whatever dispatches inputs.

Failure policy: a relationship resolver that raises aborts the whole model
with ``TransformationError``; so does a property name produced twice (for
example a computed field named like a column).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from modelts.docblock import fallback_for, type_computed_property
from modelts.introspection import Bind, describe_model, is_model
from modelts.mapping import type_field
from modelts.models import (
    ModelDescriptor,
    TransformedType,
    TransformerConfig,
    TypeExpression,
)
from modelts.relationships import (
    MapperRelationshipResolver,
    NoRelationships,
    RelationshipResolver,
    type_relationships,
)
from modelts.tstypes import TsType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts.transformer")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TransformationError(Exception):
    """A model could not be turned into a type."""

    def __init__(self, model_name: str, message: str) -> None:
        super().__init__(f"{model_name}: {message}")
        self.model_name: str = model_name


class DuplicatePropertyError(TransformationError):
    """Two sources produced the same property name for one model."""

    def __init__(self, model_name: str, property_name: str) -> None:
        super().__init__(
            model_name,
            f"property '{property_name}' is defined more than once "
            "(column, computed field or relationship).",
        )
        self.property_name: str = property_name


# ---------------------------------------------------------------------------
# Transformer
# ---------------------------------------------------------------------------


class ModelTransformer:
    """
    Turns mapped models (or pre-built descriptors) into ``TransformedType``s.

    Holds configuration only; every call introspects afresh.
    """

    def __init__(
        self,
        config: Optional[TransformerConfig] = None,
        *,
        bind: Optional[Bind] = None,
    ) -> None:
        """
        Args:
            config: Transformer settings; defaults are used when omitted.
            bind: Optional Engine/Connection used to reflect columns from a
                  live database instead of the mapped tables.
        """
        self._config: TransformerConfig = config or TransformerConfig()
        self._bind: Optional[Bind] = bind

    @property
    def config(self) -> TransformerConfig:
        return self._config

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def transform(self, obj: Any, name: Optional[str] = None) -> Optional[TransformedType]:
        """
        Transform a mapped class; ``None`` for any other input.

        Args:
            obj: Candidate model class.
            name: Type name to emit; defaults to the class name.
        """
        if not is_model(obj):
            logger.debug("Skipping %r: not a mapped class.", obj)
            return None

        try:
            descriptor: ModelDescriptor = describe_model(
                obj, self._config, bind=self._bind
            )
        except SQLAlchemyError as exc:
            raise TransformationError(
                obj.__name__, f"introspection failed: {exc}"
            ) from exc

        resolver: RelationshipResolver = MapperRelationshipResolver(obj)
        return self.transform_descriptor(descriptor, resolver, name=name)

    def transform_descriptor(
        self,
        descriptor: ModelDescriptor,
        resolver: Optional[RelationshipResolver] = None,
        *,
        name: Optional[str] = None,
    ) -> TransformedType:
        """Build the type for an already introspected model."""
        properties: List[TypeExpression] = []
        properties.extend(self.type_columns(descriptor))
        properties.extend(self.type_appends(descriptor))
        properties.extend(
            self._type_relationships(descriptor, resolver or NoRelationships())
        )

        _check_unique(descriptor.name, properties)

        transformed: TransformedType = TransformedType(
            name=name or descriptor.name,
            properties=tuple(properties),
        )
        logger.info(
            "Transformed %s: %d properties.",
            transformed.name,
            len(transformed.properties),
        )
        return transformed

    # -----------------------------------------------------------------
    # Typers
    # -----------------------------------------------------------------

    def type_columns(self, descriptor: ModelDescriptor) -> List[TypeExpression]:
        enums: Dict[str, Any] = self._config.enums
        return [
            type_field(column, descriptor.casts.get(column.name), enums)
            for column in descriptor.serialized_columns
        ]

    def type_appends(self, descriptor: ModelDescriptor) -> List[TypeExpression]:
        fallback: TsType = fallback_for(self._config.missing_append_type)
        return [
            type_computed_property(descriptor.doc, append, self._config.enums, fallback)
            for append in descriptor.appends
        ]

    def _type_relationships(
        self, descriptor: ModelDescriptor, resolver: RelationshipResolver
    ) -> List[TypeExpression]:
        try:
            return type_relationships(resolver)
        except Exception as exc:
            raise TransformationError(
                descriptor.name, f"relationship resolution failed: {exc}"
            ) from exc


def _check_unique(model_name: str, properties: List[TypeExpression]) -> None:
    seen: Set[str] = set()
    for prop in properties:
        if prop.name in seen:
            raise DuplicatePropertyError(model_name, prop.name)
        seen.add(prop.name)


__all__ = [
    "ModelTransformer",
    "TransformationError",
    "DuplicatePropertyError",
]
