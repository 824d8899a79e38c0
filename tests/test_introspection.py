"""
tests/test_introspection.py
Unit tests for modelts.introspection.

Tests cover:
- Model detection
- Storage-type naming per dialect (catalog spellings on PostgreSQL)
- Descriptor snapshots (columns, hidden, casts, appends, doc)
- Enum-column cast inference
- Live reflection through an Engine
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import (
    CHAR,
    JSON,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Double,
    Enum,
    Float,
    Integer,
    LargeBinary,
    Numeric,
    SmallInteger,
    String,
    Text,
    Time,
    Unicode,
    UnicodeText,
    Uuid,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from modelts.introspection import (
    describe_model,
    is_model,
    load_dialect,
    reflect_columns,
    storage_type_name,
)
from modelts.mapping import type_field
from modelts.models import TransformerConfig
from modelts.tstypes import LiteralUnion
from samples import Dog, NotAModel, Post, Status, User, Visibility


class _CatalogBase(DeclarativeBase):
    pass


class Measurement(_CatalogBase):
    """One column per common SQLAlchemy generic type."""

    __tablename__ = "measurements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    small: Mapped[int] = mapped_column(SmallInteger)
    big: Mapped[int] = mapped_column(BigInteger)
    ratio: Mapped[float] = mapped_column(Float)
    score: Mapped[float] = mapped_column(Double)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    flag: Mapped[bool] = mapped_column(Boolean)
    label: Mapped[str] = mapped_column(String(40))
    code: Mapped[str] = mapped_column(CHAR(3))
    title: Mapped[str] = mapped_column(Unicode(80))
    body: Mapped[str] = mapped_column(Text)
    notes: Mapped[str] = mapped_column(UnicodeText)
    day: Mapped[datetime.date] = mapped_column(Date)
    starts: Mapped[datetime.time] = mapped_column(Time)
    seen_at: Mapped[datetime.datetime] = mapped_column(DateTime)
    stamped_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True))
    payload: Mapped[bytes] = mapped_column(LargeBinary)
    token: Mapped[uuid.UUID] = mapped_column(Uuid)
    status: Mapped[Status] = mapped_column(Enum(Status, name="measurement_status"))
    size: Mapped[str] = mapped_column(Enum("small", "large", name="measurement_size"))


MEASUREMENT_TYPES = [
    ("id", "number"),
    ("small", "number"),
    ("big", "number"),
    ("ratio", "number"),
    ("score", "number"),
    ("amount", "number"),
    ("flag", "boolean"),
    ("label", "string"),
    ("code", "string"),
    ("title", "string"),
    ("body", "string"),
    ("notes", "string"),
    ("day", "string"),
    ("starts", "string"),
    ("seen_at", "string"),
    ("stamped_at", "string"),
    ("payload", "string"),
    ("token", "string"),
    ("status", "'ACTIVE' | 'SUSPENDED'"),
    ("size", "'small' | 'large'"),
]


class TestIsModel:
    @pytest.mark.parametrize("obj", [User, Post, Dog])
    def test_mapped_classes(self, obj: type) -> None:
        assert is_model(obj)

    @pytest.mark.parametrize("obj", [NotAModel, int, "User", None, User(), Status])
    def test_everything_else(self, obj: object) -> None:
        assert not is_model(obj)


class TestStorageTypeName:
    @pytest.mark.parametrize(
        "type_, expected",
        [
            (String(255), "varchar"),
            (Text(), "text"),
            (Integer(), "integer"),
            (BigInteger(), "bigint"),
            (Numeric(10, 2), "numeric"),
            (Float(), "float"),
            (Boolean(), "boolean"),
            (Uuid(), "uuid"),
            (DateTime(), "timestamp without time zone"),
            (DateTime(timezone=True), "timestamptz"),
            (SmallInteger(), "int2"),
            (Double(), "float8"),
            (Time(), "time"),
            (Time(timezone=True), "timetz"),
            (CHAR(3), "bpchar"),
            (LargeBinary(), "bytea"),
            (JSON(), "json"),
            (Enum(Visibility, name="post_visibility"), "post_visibility"),
        ],
    )
    def test_postgresql(self, type_: object, expected: str) -> None:
        assert storage_type_name(type_, load_dialect("postgresql")) == expected

    @pytest.mark.parametrize(
        "type_, expected",
        [
            (String(255), "varchar"),
            (Integer(), "integer"),
            (DateTime(), "datetime"),
            (Boolean(), "boolean"),
            (LargeBinary(), "blob"),
        ],
    )
    def test_sqlite(self, type_: object, expected: str) -> None:
        assert storage_type_name(type_, load_dialect("sqlite")) == expected

    def test_uncompilable_type_uses_class_name(self) -> None:
        # String without a length has no MySQL DDL spelling
        assert storage_type_name(String(), load_dialect("mysql")) == "string"


class TestDescribeModel:
    def test_columns_in_declaration_order(self) -> None:
        descriptor = describe_model(User)
        assert [c.name for c in descriptor.columns] == [
            "id", "name", "email", "password", "status",
            "is_admin", "settings", "created_at",
        ]

    def test_column_types_and_nullability(self) -> None:
        columns = {c.name: c for c in describe_model(User).columns}
        assert columns["id"].type_name == "uuid"
        assert not columns["id"].nullable
        assert columns["name"].type_name == "varchar"
        assert columns["name"].nullable
        assert columns["created_at"].type_name == "timestamp without time zone"

    def test_metadata_attributes(self) -> None:
        descriptor = describe_model(User)
        assert descriptor.name == "User"
        assert descriptor.table_name == "users"
        assert descriptor.hidden == frozenset({"password"})
        assert descriptor.appends == ["post_count", "display_name", "avatar_url"]
        assert descriptor.casts["status"] is Status
        assert "@property int $post_count" in (descriptor.doc or "")

    def test_hidden_columns_are_not_serialized(self) -> None:
        names = [c.name for c in describe_model(User).serialized_columns]
        assert "password" not in names
        assert "email" in names

    def test_enum_cast_is_inferred(self) -> None:
        assert describe_model(Post).casts == {
            "visibility": LiteralUnion(("public", "private"))
        }

    def test_enum_inference_can_be_disabled(self) -> None:
        config = TransformerConfig(infer_enum_casts=False)
        assert describe_model(Post, config).casts == {}

    def test_model_without_metadata(self) -> None:
        descriptor = describe_model(Dog)
        assert descriptor.hidden == frozenset()
        assert descriptor.appends == []
        assert descriptor.doc is None

    def test_joined_subclass_uses_its_own_table(self) -> None:
        descriptor = describe_model(Dog)
        assert descriptor.table_name == "dogs"
        assert [c.name for c in descriptor.columns] == ["id", "breed"]

    def test_dialect_changes_type_names(self) -> None:
        columns = {
            c.name: c.type_name
            for c in describe_model(Post, TransformerConfig(dialect="sqlite")).columns
        }
        assert columns["published_at"] == "datetime"
        assert columns["visibility"] == "varchar"

    def test_non_model_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="not a mapped"):
            describe_model(NotAModel)


class TestReflection:
    def test_reflect_columns(self, sqlite_engine: Engine) -> None:
        columns = reflect_columns(sqlite_engine, "posts")
        assert [(c.name, c.type_name, c.nullable) for c in columns] == [
            ("id", "integer", False),
            ("user_id", "bpchar", False),
            ("title", "text", False),
            ("rating", "numeric", True),
            ("published_at", "datetime", True),
            ("visibility", "varchar", False),
        ]

    def test_describe_with_bind(self, sqlite_engine: Engine) -> None:
        descriptor = describe_model(Post, bind=sqlite_engine)
        assert descriptor.columns[1].type_name == "bpchar"
        assert descriptor.casts == {"visibility": LiteralUnion(("public", "private"))}


class TestCatalogTypes:
    """Introspected names on the default dialect reach the storage-type table."""

    @pytest.mark.parametrize("name, expected", MEASUREMENT_TYPES)
    def test_generic_type_is_typed(self, name: str, expected: str) -> None:
        descriptor = describe_model(Measurement)
        column = next(c for c in descriptor.columns if c.name == name)
        assert type_field(column, descriptor.casts.get(name)).render() == f"{name}: {expected}"

    def test_no_column_falls_back(self) -> None:
        descriptor = describe_model(Measurement)
        rendered = [
            type_field(column, descriptor.casts.get(column.name)).render()
            for column in descriptor.columns
        ]
        assert len(rendered) == len(MEASUREMENT_TYPES)
        assert not [line for line in rendered if "unknown" in line]

    def test_enum_without_values_callable_uses_member_names(self) -> None:
        assert describe_model(Measurement).casts["status"] == LiteralUnion(
            ("ACTIVE", "SUSPENDED")
        )
