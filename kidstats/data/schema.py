"""Declarative base, shared columns and id generation for the ORM models.

Constraint and index names follow a fixed naming convention so schema
changes can address them by name.

Example:
    >>> from kidstats.data.schema import Base, TimestampMixin, new_id
    >>> class Venue(TimestampMixin, Base):
    ...     __tablename__ = "venues"
    ...     id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
"""
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def new_id() -> str:
    """Random string UUID used as every primary key."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base for all kidstats models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    """Adds ``created_at`` and ``updated_at``, both set in Python.

    ``updated_at`` is refreshed by the ORM on every UPDATE of the row.
    """

    created_at: Mapped[datetime] = mapped_column(default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.now, onupdate=datetime.now, nullable=False
    )
