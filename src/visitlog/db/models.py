"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic auto-generates migrations by comparing
these models to the actual DB.

Key concepts:
- User ids are chosen by the application (random 31-bit), not by a
  sequence, so the primary key has autoincrement disabled and a range
  check that matches a PostgreSQL INTEGER.
- Visited paths are append-only and keep a surrogate serial key that
  never leaves the database.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

MAX_USER_ID = 2_147_483_647


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered user. Email is the natural lookup key."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            f"id > 0 AND id <= {MAX_USER_ID}", name="ck_users_id_range"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    visited_paths: Mapped[list["VisitedPath"]] = relationship(
        back_populates="user"
    )


class VisitedPath(Base):
    """One GET request to a path, attributed to the user who made it."""

    __tablename__ = "visited_paths"
    __table_args__ = (
        Index("ix_visited_paths_user_date", "user_id", "visit_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(Text, nullable=False)
    visit_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="visited_paths")
