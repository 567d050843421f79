"""SQLAlchemy ORM models for youth basketball tracking.

Models:
- Child: a tracked kid
- Team: a team for one season
- Player: roster assignment binding one child to one team (the scoping
  key of every stat event)
- Game: one game of a team, with a stored opponent score
- StatEvent: append-only, soft-deletable ledger entry

The team's own score is never stored on Game; it is derived from the
ledger (see :class:`kidstats.data.ledger.EventLedger`).

Example:
    >>> from kidstats.data.models import Child
    >>> from kidstats.data.db import session_scope
    >>> with session_scope() as session:
    ...     child = session.query(Child).first()
    ...     print([p.team.name for p in child.players])
"""
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kidstats.data.schema import Base, TimestampMixin, new_id
from kidstats.stats.kinds import StatEventKind


# =============================================================================
# Reference Models
# =============================================================================


class Child(TimestampMixin, Base):
    """A child whose games are tracked.

    Attributes:
        id: String UUID primary key.
        name: Display name.
        date_of_birth: Optional birth date.
        last_used_at: When a game was last started for this child; the most
            recent value selects the default child.
        players: Roster assignments held by this child.
    """

    __tablename__ = "children"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(nullable=True)
    last_used_at: Mapped[datetime | None] = mapped_column(nullable=True)

    players: Mapped[list[Player]] = relationship(back_populates="child")

    def __repr__(self) -> str:
        return f"<Child(id={self.id!r}, name={self.name!r})>"


class Team(TimestampMixin, Base):
    """A team for one season.

    Teams are deactivated rather than deleted.

    Attributes:
        id: String UUID primary key.
        name: Team name.
        season: Free-text season label (e.g. "Fall 2025").
        organization: Optional league or club.
        color_hex: Display colour tag.
        is_active: False once the team is retired.
    """

    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    season: Mapped[str] = mapped_column(String(50), nullable=False)
    organization: Mapped[str | None] = mapped_column(String(100), nullable=True)
    color_hex: Mapped[str | None] = mapped_column(String(9), nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    players: Mapped[list[Player]] = relationship(back_populates="team")
    games: Mapped[list[Game]] = relationship(back_populates="team")

    def __repr__(self) -> str:
        return f"<Team(id={self.id!r}, name={self.name!r}, season={self.season!r})>"


class Player(Base):
    """Roster assignment of a child to a team.

    A child holds one Player per team it has played for; stat events are
    scoped to the Player, never directly to the child.

    Attributes:
        id: String UUID primary key.
        child_id: Foreign key to children.
        team_id: Foreign key to teams.
        jersey_number: Optional jersey number.
        position: Optional position (e.g. "G", "F").
        created_at: When the assignment was created.
    """

    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    child_id: Mapped[str] = mapped_column(ForeignKey("children.id"), nullable=False)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    jersey_number: Mapped[str | None] = mapped_column(String(3), nullable=True)
    position: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.now, nullable=False)

    child: Mapped[Child] = relationship(back_populates="players")
    team: Mapped[Team] = relationship(back_populates="players")

    __table_args__ = (
        UniqueConstraint("child_id", "team_id", name="uq_player_child_team"),
    )

    def __repr__(self) -> str:
        return f"<Player(id={self.id!r}, child_id={self.child_id!r}, team_id={self.team_id!r})>"


# =============================================================================
# Game Models
# =============================================================================


class Game(TimestampMixin, Base):
    """A game played by a team.

    Attributes:
        id: String UUID primary key.
        team_id: Foreign key to teams.
        focus_child_id: Child whose full box score is tracked live.
        opponent_name: Opponent display name.
        opponent_score: Stored opponent points, mutated directly.
        game_date: When the game was played.
        is_complete: One-way flag set when the game ends.
        location: Optional venue.
        notes: Optional free-text notes.
    """

    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    focus_child_id: Mapped[str | None] = mapped_column(
        ForeignKey("children.id"), nullable=True
    )
    opponent_name: Mapped[str] = mapped_column(String(100), nullable=False)
    opponent_score: Mapped[int] = mapped_column(default=0, nullable=False)
    game_date: Mapped[datetime] = mapped_column(default=datetime.now, nullable=False)
    is_complete: Mapped[bool] = mapped_column(default=False, nullable=False)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    team: Mapped[Team] = relationship(back_populates="games")
    stat_events: Mapped[list[StatEvent]] = relationship(back_populates="game")

    __table_args__ = (
        Index("ix_games_focus_child_complete", "focus_child_id", "is_complete"),
    )

    def __repr__(self) -> str:
        return f"<Game(id={self.id!r}, opponent_name={self.opponent_name!r}, is_complete={self.is_complete})>"


class StatEvent(Base):
    """One recorded stat, never physically deleted.

    Attributes:
        id: String UUID primary key.
        game_id: Foreign key to games.
        player_id: Foreign key to players (roster assignment).
        stat_type: Stable kind code (see StatEventKind values).
        value: Points credited at recording time.
        timestamp: When the event was recorded.
        is_soft_deleted: True once undone; excluded from aggregation.
    """

    __tablename__ = "stat_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), nullable=False)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    stat_type: Mapped[str] = mapped_column(String(16), nullable=False)
    value: Mapped[int] = mapped_column(default=0, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(default=datetime.now, nullable=False)
    is_soft_deleted: Mapped[bool] = mapped_column(default=False, nullable=False)

    game: Mapped[Game] = relationship(back_populates="stat_events")
    player: Mapped[Player] = relationship()

    __table_args__ = (
        Index("ix_stat_events_game_player", "game_id", "player_id"),
        Index("ix_stat_events_player_deleted", "player_id", "is_soft_deleted"),
    )

    @property
    def kind(self) -> StatEventKind | None:
        """Parsed kind, or None for a code this version does not know."""
        try:
            return StatEventKind(self.stat_type)
        except ValueError:
            return None

    def __repr__(self) -> str:
        return f"<StatEvent(id={self.id!r}, stat_type={self.stat_type!r}, is_soft_deleted={self.is_soft_deleted})>"
