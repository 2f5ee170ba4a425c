"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Relationships, constraints, and indexes defined here.
Alembic migrations mirror these models.

Key concepts:
- UUID primary keys (opaque ids, safe to expose in URLs)
- Ownership chain User → Board → Task, each link a required foreign key
- Cascades in two places: ORM relationships (cascade="all, delete-orphan")
  and ON DELETE CASCADE in the schema, so raw SQL deletes behave the same
- created_at is set in Python (microsecond precision) so list ordering
  by creation time is stable
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


TASK_STATUSES = ("todo", "inprogress", "done")


class User(Base):
    """A person who owns boards.

    Learn: password_hash is an empty string (not NULL) for accounts that
    were created through Google sign-in. Password login must treat the
    empty hash as "no password set" and reject.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    google_id: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    boards: Mapped[list["Board"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Board.created_at",
    )


class Board(Base):
    """A named collection of tasks owned by one user."""

    __tablename__ = "boards"
    __table_args__ = (
        Index("ix_boards_user_created", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="boards")
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="board",
        cascade="all, delete-orphan",
        order_by="Task.created_at",
    )


class Task(Base):
    """A unit of work on a board, with status and progress.

    Learn: The status/progress coupling (todo ⇒ 0, done ⇒ 100) is applied
    by TaskService on every write. The CHECK constraints only guard the
    ranges, as a last line for writes that bypass the service.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "status IN ('todo', 'inprogress', 'done')", name="ck_tasks_status"
        ),
        CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_tasks_progress"
        ),
        Index("ix_tasks_board_created", "board_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="todo")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    estimated_finish_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reminder_date_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    board_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    board: Mapped["Board"] = relationship(back_populates="tasks")
