"""
tests/samples.py
Sample SQLAlchemy models and a stub relationship resolver shared by the
test suite.

Kept in a plain module (not conftest) so the CLI tests can import it by
name with ``-m samples``.
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from modelts.models import RelationshipDescriptor


class Status(enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Visibility(enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class Base(DeclarativeBase):
    pass


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", ForeignKey("posts.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class User(Base):
    """A registered user.

    @property int $post_count
    @property string $display_name
    """

    __tablename__ = "users"
    __hidden__ = ("password",)
    __casts__ = {"status": Status, "is_admin": "bool", "settings": "array"}
    __appends__ = ("post_count", "display_name", "avatar_url")

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    email: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20))
    is_admin: Mapped[int] = mapped_column(Integer, default=0)
    settings: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime)

    posts: Mapped[List["Post"]] = relationship(back_populates="author")
    profile: Mapped[Optional["Profile"]] = relationship(back_populates="user")


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"))
    title: Mapped[str] = mapped_column(Text)
    rating: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 2), nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    visibility: Mapped[Visibility] = mapped_column(
        Enum(
            Visibility,
            name="post_visibility",
            values_callable=lambda members: [m.value for m in members],
        )
    )

    author: Mapped["User"] = relationship(back_populates="posts")
    tags: Mapped[List["Tag"]] = relationship(secondary=post_tags)


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), unique=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship(back_populates="profile")


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    label: Mapped[str] = mapped_column(String(50))


class Animal(Base):
    __tablename__ = "animals"

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[str] = mapped_column(String(20))
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )

    owner: Mapped[Optional["User"]] = relationship()

    __mapper_args__ = {"polymorphic_on": "kind", "polymorphic_identity": "animal"}


class Dog(Animal):
    __tablename__ = "dogs"

    id: Mapped[int] = mapped_column(ForeignKey("animals.id"), primary_key=True)
    breed: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    toys: Mapped[List["Toy"]] = relationship(back_populates="dog")

    __mapper_args__ = {"polymorphic_identity": "dog"}


class Toy(Base):
    __tablename__ = "toys"

    id: Mapped[int] = mapped_column(primary_key=True)
    dog_id: Mapped[int] = mapped_column(ForeignKey("dogs.id"))

    dog: Mapped["Dog"] = relationship(back_populates="toys")


class NotAModel:
    """Plain class with model-looking attributes; never mapped."""

    __tablename__ = "nothing"
    __appends__ = ("fake",)


class StubResolver:
    """
    In-memory RelationshipResolver.

    ``relations`` maps accessor name -> descriptor; names in ``plain`` are
    candidates that are not relationships.  ``fail_on`` makes resolving that
    name raise.
    """

    def __init__(
        self,
        relations: Optional[Dict[str, RelationshipDescriptor]] = None,
        plain: Sequence[str] = (),
        fail_on: Optional[str] = None,
    ) -> None:
        self.relations: Dict[str, RelationshipDescriptor] = dict(relations or {})
        self.plain: List[str] = list(plain)
        self.fail_on: Optional[str] = fail_on

    def candidate_names(self) -> Sequence[str]:
        return [*self.plain, *self.relations]

    def try_resolve_relationship(self, name: str) -> Optional[RelationshipDescriptor]:
        if name == self.fail_on:
            raise RuntimeError(f"boom while resolving {name}")
        return self.relations.get(name)
