# File: modelts/__init__.py
"""
modelts - TypeScript Types from SQLAlchemy Models
===================================================

Derives one structural TypeScript type per mapped SQLAlchemy class: stored
columns, computed (``__appends__``) fields documented in the class docstring,
and relationships as single or array references.

Architecture overview::

    cli.py ──▶ exporters.py ──▶ transformer.py
                                    │
        ┌──────────────┬────────────┼──────────────┬─────────────────┐
        ▼              ▼            ▼              ▼                 ▼
    introspection   mapping     docblock     relationships       tstypes
    (snapshots)   (columns,   (computed    (Single / Many      (type model,
                    casts)      fields)      references)         rendering)

Usage::

    # As a library
    from modelts import ModelTransformer
    transformed = ModelTransformer().transform(User)
    print(transformed.declaration())

    # From the command line
    python -m modelts -m app.models -o frontend/src/models.ts

Public API:
    - ModelTransformer    - Per-model orchestrator
    - TypeScriptExporter  - Renders and writes a .ts module
    - TransformerConfig   - Settings model
    - type_field / map_cast / type_computed_property / type_relationships
                          - The individual typers
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from modelts.models import (
    Cardinality,
    ColumnDescriptor,
    ModelDescriptor,
    RelationshipDescriptor,
    TransformedType,
    TransformerConfig,
    TypeExpression,
)
from modelts.mapping import map_cast, map_storage_type, type_field
from modelts.docblock import find_property_annotation, type_computed_property
from modelts.relationships import (
    MapperRelationshipResolver,
    RelationshipResolver,
    type_relationships,
)
from modelts.introspection import describe_model, is_model
from modelts.transformer import (
    DuplicatePropertyError,
    ModelTransformer,
    TransformationError,
)
from modelts.exporters import ExportReport, TypeScriptExporter, collect_models

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "ModelTransformer",
    "TransformationError",
    "DuplicatePropertyError",
    # Models
    "Cardinality",
    "ColumnDescriptor",
    "ModelDescriptor",
    "RelationshipDescriptor",
    "TransformedType",
    "TransformerConfig",
    "TypeExpression",
    # Typers
    "type_field",
    "map_cast",
    "map_storage_type",
    "find_property_annotation",
    "type_computed_property",
    "RelationshipResolver",
    "MapperRelationshipResolver",
    "type_relationships",
    # Introspection
    "describe_model",
    "is_model",
    # Export
    "TypeScriptExporter",
    "ExportReport",
    "collect_models",
]
