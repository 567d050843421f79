"""Data layer for kidstats.

Submodules:
    db: Database engine and session management
    schema: SQLAlchemy base class and mixins
    models: SQLAlchemy ORM model definitions
    store: Storage port over a session
    ledger: Stat event ledger
    roster: Children, teams, roster and game creation

Example:
    >>> from kidstats.data import init_db, session_scope, StatStore, EventLedger
    >>> init_db()
    >>> with session_scope() as session:
    ...     ledger = EventLedger(StatStore(session))
    ...     print(ledger.team_score(game_id))
"""
from __future__ import annotations

from kidstats.data.db import (
    get_engine,
    get_session,
    init_db,
    read_pragma,
    reset_engine,
    session_scope,
    verify_foreign_keys_enabled,
)
from kidstats.data.ledger import EventLedger
from kidstats.data.models import Child, Game, Player, StatEvent, Team
from kidstats.data.roster import RosterService
from kidstats.data.schema import Base, TimestampMixin, new_id
from kidstats.data.store import StatStore

__all__ = [
    # Database utilities
    "get_engine",
    "get_session",
    "init_db",
    "read_pragma",
    "reset_engine",
    "session_scope",
    "verify_foreign_keys_enabled",
    # Base and mixins
    "Base",
    "TimestampMixin",
    "new_id",
    # Models
    "Child",
    "Team",
    "Player",
    "Game",
    "StatEvent",
    # Services
    "EventLedger",
    "RosterService",
    "StatStore",
]
