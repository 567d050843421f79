"""Shared pytest fixtures for kidstats tests.

This module contains fixtures used across multiple test modules:
- Configuration fixtures (test settings)
- Database session fixtures (in-memory SQLite)
- Seeded reference data (child, team, roster, game)

Example:
    def test_something(store, game, focus_player):
        # store is a StatStore over an in-memory SQLite session
        # game is an in-progress game with focus_player's child as focus
        pass
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generator

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from kidstats.config import Settings, reset_settings

if TYPE_CHECKING:
    from kidstats.data.models import Child, Game, Player, Team
    from kidstats.data.roster import RosterService
    from kidstats.data.store import StatStore


# =============================================================================
# Paths
# =============================================================================


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """Create and return temporary data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def test_settings(tmp_data_dir: Path) -> Generator[Settings, None, None]:
    """Provide test settings with temporary directories.

    Automatically resets settings singleton after test.
    """
    import os

    os.environ["KIDSTATS_DB_PATH"] = str(tmp_data_dir / "test.db")
    os.environ["LOG_DIR"] = str(tmp_data_dir / "logs")
    os.environ["LOG_LEVEL"] = "DEBUG"

    reset_settings()
    from kidstats.config import get_settings

    settings = get_settings()
    settings.ensure_directories()

    yield settings

    reset_settings()
    for key in ["KIDSTATS_DB_PATH", "LOG_DIR", "LOG_LEVEL"]:
        os.environ.pop(key, None)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session with all tables created."""
    from kidstats.data import models  # noqa: F401
    from kidstats.data.schema import Base

    engine = create_engine("sqlite://")

    @event.listens_for(engine, "connect")
    def _foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def store(db_session: Session) -> StatStore:
    """StatStore bound to the in-memory session."""
    from kidstats.data.store import StatStore

    return StatStore(db_session)


@pytest.fixture
def roster(store: StatStore) -> RosterService:
    """RosterService over the test store."""
    from kidstats.data.roster import RosterService

    return RosterService(store)


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def child(roster: RosterService) -> Child:
    """A tracked child."""
    return roster.create_child("Maya")


@pytest.fixture
def team(roster: RosterService) -> Team:
    """An active team."""
    return roster.create_team("Hawks", season="Fall 2025", organization="YMCA")


@pytest.fixture
def focus_player(roster: RosterService, child: Child, team: Team) -> Player:
    """The child's roster assignment on the team."""
    return roster.add_player(child.id, team.id, jersey_number="7")


@pytest.fixture
def teammate(roster: RosterService, team: Team) -> Player:
    """Another child on the same team."""
    other = roster.create_child("Leo")
    return roster.add_player(other.id, team.id, jersey_number="12")


@pytest.fixture
def game(
    roster: RosterService, team: Team, child: Child, focus_player: Player
) -> Game:
    """An in-progress game tracking the child."""
    return roster.start_game(
        team.id, child.id, opponent_name="Tigers", game_date=datetime(2025, 10, 4, 9, 0)
    )


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
