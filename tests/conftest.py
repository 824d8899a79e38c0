"""
tests/conftest.py
Shared fixtures for the modelts test suite.

Models live in ``tests/samples.py``; everything here is cheap to build and
function-scoped unless it touches a database.
"""

from __future__ import annotations

import logging
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from modelts.models import (
    Cardinality,
    ColumnDescriptor,
    ModelDescriptor,
    RelationshipDescriptor,
    TransformerConfig,
)
from modelts.transformer import ModelTransformer
from samples import Base, StubResolver


# ---------------------------------------------------------------------------
# Logging isolation (the CLI reconfigures the "modelts" logger)
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_modelts_logger() -> Iterator[None]:
    yield
    root_logger: logging.Logger = logging.getLogger("modelts")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True


# ---------------------------------------------------------------------------
# Configuration / transformer fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> TransformerConfig:
    """Default settings: postgresql naming, enum inference on."""
    return TransformerConfig()


@pytest.fixture()
def transformer(config: TransformerConfig) -> ModelTransformer:
    return ModelTransformer(config)


# ---------------------------------------------------------------------------
# Descriptor fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def author_descriptor() -> ModelDescriptor:
    """id uuid NOT NULL, name string NULL; nothing hidden, cast or appended."""
    return ModelDescriptor(
        name="Author",
        table_name="authors",
        columns=[
            ColumnDescriptor(name="id", type_name="uuid", nullable=False),
            ColumnDescriptor(name="name", type_name="string", nullable=True),
        ],
    )


@pytest.fixture()
def posts_resolver() -> StubResolver:
    """One to-many ``posts`` relation plus a non-relationship candidate."""
    return StubResolver(
        relations={
            "posts": RelationshipDescriptor(
                name="posts", related_name="Post", cardinality=Cardinality.MANY
            ),
        },
        plain=["full_name"],
    )


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    """In-memory SQLite database with the sample schema created."""
    engine: Engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()
