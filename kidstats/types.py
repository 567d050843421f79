"""Type definitions, protocols and exceptions for kidstats.

This module defines common type aliases, the storage port protocol that
every component receives by injection, and the exception hierarchy
surfaced to callers.

Example:
    >>> from kidstats.types import StoragePort
    >>> def count_games(store: StoragePort) -> int:
    ...     return len(store.query(Game))
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, TypeVar

# =============================================================================
# Type Aliases
# =============================================================================

ChildId = str
TeamId = str
PlayerId = str  # Roster assignment id, not a child id
GameId = str
EventId = str

T = TypeVar("T")


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class StoragePort(Protocol):
    """Predicate-filterable object store consumed by the core components.

    Implemented by :class:`kidstats.data.store.StatStore`. Any failure of the
    underlying persistence layer surfaces as :class:`StorageError`.
    """

    def add(self, obj: T) -> T:
        """Stage a new record."""
        ...

    def get(self, model: type[T], ident: str) -> T | None:
        """Fetch a record by primary key."""
        ...

    def get_required(self, model: type[T], ident: str) -> T:
        """Fetch a record by primary key or raise NotFoundError."""
        ...

    def query(
        self,
        model: type[T],
        *predicates: Any,
        order_by: Sequence[Any] = (),
        limit: int | None = None,
    ) -> list[T]:
        """Fetch every record of ``model`` matching all predicates."""
        ...

    def first(
        self, model: type[T], *predicates: Any, order_by: Sequence[Any] = ()
    ) -> T | None:
        """First matching record, or None."""
        ...

    def scalar(self, statement: Any) -> Any:
        """Execute a select and return its first column of the first row."""
        ...

    def rows(self, statement: Any) -> list[Any]:
        """Execute a select and return all result rows."""
        ...

    def save(self) -> None:
        """Durably persist pending changes."""
        ...

    def rollback(self) -> None:
        """Discard pending changes."""
        ...


# =============================================================================
# Exceptions
# =============================================================================


class KidStatsError(Exception):
    """Base exception for kidstats errors."""


class NoDataError(KidStatsError):
    """Child has no roster records, so there is nothing to aggregate."""


class StorageError(KidStatsError):
    """Underlying persistence read or write failed.

    Always raised ``from`` the underlying driver exception.
    """


class NotFoundError(KidStatsError):
    """Requested record does not exist."""
