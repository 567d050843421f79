"""Object store over a SQLAlchemy session.

:class:`StatStore` is the storage port handed to every core component.
It exposes create/fetch/query/save over the ORM models and converts any
SQLAlchemy failure into :class:`kidstats.types.StorageError`, rolling the
session back first so the caller can retry.

Example:
    >>> from kidstats.data import StatStore, session_scope
    >>> with session_scope() as session:
    ...     store = StatStore(session)
    ...     games = store.query(Game, Game.is_complete.is_(True))
"""
from __future__ import annotations

import logging
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kidstats.logging import FAIL
from kidstats.types import NotFoundError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StatStore:
    """Predicate-filterable store bound to one session.

    Attributes:
        session: The SQLAlchemy session all operations run in.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _guard(self, action: str) -> Generator[None, None, None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(f"{FAIL} Storage {action} failed: {exc}")
            self.session.rollback()
            raise StorageError(f"Storage {action} failed: {exc}") from exc

    def add(self, obj: T) -> T:
        """Stage a new record and flush it so column defaults are populated.

        Args:
            obj: ORM instance to insert.

        Returns:
            The same instance, with its primary key assigned.
        """
        with self._guard("insert"):
            self.session.add(obj)
            self.session.flush()
        return obj

    def get(self, model: type[T], ident: str) -> T | None:
        """Fetch a record by primary key, or None."""
        with self._guard("read"):
            return self.session.get(model, ident)

    def get_required(self, model: type[T], ident: str) -> T:
        """Fetch a record by primary key.

        Raises:
            NotFoundError: If no record has this key.
        """
        obj = self.get(model, ident)
        if obj is None:
            raise NotFoundError(f"{model.__name__} {ident} not found")
        return obj

    def query(
        self,
        model: type[T],
        *predicates: Any,
        order_by: Sequence[Any] = (),
        limit: int | None = None,
    ) -> list[T]:
        """Fetch every record of ``model`` matching all predicates.

        Args:
            model: ORM class to select.
            *predicates: SQLAlchemy boolean expressions, ANDed together.
            order_by: Optional ordering expressions.
            limit: Optional maximum row count.

        Returns:
            Matching records, in the requested order.
        """
        stmt = select(model).where(*predicates).order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._guard("read"):
            return list(self.session.scalars(stmt).all())

    def first(self, model: type[T], *predicates: Any, order_by: Sequence[Any] = ()) -> T | None:
        """First matching record, or None."""
        rows = self.query(model, *predicates, order_by=order_by, limit=1)
        return rows[0] if rows else None

    def scalar(self, statement: Any) -> Any:
        """Execute a select and return the first column of the first row."""
        with self._guard("read"):
            return self.session.scalar(statement)

    def rows(self, statement: Any) -> list[Any]:
        """Execute a select and return all result rows."""
        with self._guard("read"):
            return list(self.session.execute(statement).all())

    def save(self) -> None:
        """Commit pending changes.

        Raises:
            StorageError: If the commit fails; the session is rolled back.
        """
        with self._guard("commit"):
            self.session.commit()
        logger.debug("Store changes committed")

    def rollback(self) -> None:
        """Discard pending changes."""
        self.session.rollback()
