"""Children, teams, roster assignments and game creation.

Example:
    >>> roster = RosterService(store)
    >>> maya = roster.create_child("Maya")
    >>> hawks = roster.create_team("Hawks", season="Fall 2025")
    >>> roster.add_player(maya.id, hawks.id, jersey_number="7")
    >>> game = roster.start_game(hawks.id, maya.id, opponent_name="Tigers")
    >>> roster.default_child().name
    'Maya'
"""
from __future__ import annotations

import logging
from datetime import date, datetime

from kidstats.data.models import Child, Game, Player, Team
from kidstats.types import ChildId, StoragePort, TeamId

logger = logging.getLogger(__name__)


class RosterService:
    """Creates and looks up the reference records around the ledger."""

    def __init__(self, store: StoragePort) -> None:
        self.store = store

    # -------------------------------------------------------------------------
    # Children
    # -------------------------------------------------------------------------

    def create_child(self, name: str, date_of_birth: date | None = None) -> Child:
        if not name.strip():
            raise ValueError("Child name cannot be empty")
        child = self.store.add(Child(name=name.strip(), date_of_birth=date_of_birth))
        self.store.save()
        logger.info(f"Created child {child.name} ({child.id})")
        return child

    def list_children(self) -> list[Child]:
        """All children sorted by name."""
        return self.store.query(Child, order_by=(Child.name,))

    def default_child(self) -> Child | None:
        """The most recently used child.

        Children that were never used sort after every used child; ties
        fall back to name order.
        """
        return self.store.first(
            Child,
            order_by=(
                Child.last_used_at.is_(None),
                Child.last_used_at.desc(),
                Child.name,
            ),
        )

    def mark_used(self, child_id: ChildId, when: datetime | None = None) -> Child:
        child = self.store.get_required(Child, child_id)
        child.last_used_at = when or datetime.now()
        self.store.save()
        return child

    # -------------------------------------------------------------------------
    # Teams and roster
    # -------------------------------------------------------------------------

    def create_team(
        self,
        name: str,
        season: str,
        organization: str | None = None,
        color_hex: str | None = None,
    ) -> Team:
        if not name.strip():
            raise ValueError("Team name cannot be empty")
        if not season.strip():
            raise ValueError("Team season cannot be empty")
        team = self.store.add(
            Team(
                name=name.strip(),
                season=season.strip(),
                organization=organization,
                color_hex=color_hex,
                is_active=True,
            )
        )
        self.store.save()
        logger.info(f"Created team {team.name} ({team.season})")
        return team

    def list_teams(self, active_only: bool = True) -> list[Team]:
        predicates = [Team.is_active.is_(True)] if active_only else []
        return self.store.query(Team, *predicates, order_by=(Team.season, Team.name))

    def deactivate_team(self, team_id: TeamId) -> Team:
        team = self.store.get_required(Team, team_id)
        team.is_active = False
        self.store.save()
        return team

    def add_player(
        self,
        child_id: ChildId,
        team_id: TeamId,
        jersey_number: str | None = None,
        position: str | None = None,
    ) -> Player:
        """Roster a child on a team.

        Returns the existing assignment when the child is already on the
        team, so there is at most one Player per (child, team) pair.
        """
        self.store.get_required(Child, child_id)
        self.store.get_required(Team, team_id)
        existing = self.store.first(
            Player, Player.child_id == child_id, Player.team_id == team_id
        )
        if existing is not None:
            return existing
        player = self.store.add(
            Player(
                child_id=child_id,
                team_id=team_id,
                jersey_number=jersey_number,
                position=position,
            )
        )
        self.store.save()
        return player

    def team_roster(self, team_id: TeamId) -> list[Player]:
        return self.store.query(
            Player, Player.team_id == team_id, order_by=(Player.jersey_number,)
        )

    def players_for_child(self, child_id: ChildId) -> list[Player]:
        """Every roster assignment the child has held."""
        return self.store.query(Player, Player.child_id == child_id)

    def player_for(self, child_id: ChildId, team_id: TeamId) -> Player | None:
        return self.store.first(
            Player, Player.child_id == child_id, Player.team_id == team_id
        )

    # -------------------------------------------------------------------------
    # Games
    # -------------------------------------------------------------------------

    def start_game(
        self,
        team_id: TeamId,
        focus_child_id: ChildId,
        opponent_name: str,
        game_date: datetime | None = None,
        location: str | None = None,
        notes: str | None = None,
    ) -> Game:
        """Create an in-progress game and mark the focus child as used.

        Raises:
            NotFoundError: If the team or child does not exist.
            ValueError: If the child is not on the team's roster.
        """
        self.store.get_required(Team, team_id)
        self.store.get_required(Child, focus_child_id)
        if self.player_for(focus_child_id, team_id) is None:
            raise ValueError(f"Child {focus_child_id} is not on the roster of team {team_id}")
        game = self.store.add(
            Game(
                team_id=team_id,
                focus_child_id=focus_child_id,
                opponent_name=opponent_name,
                opponent_score=0,
                game_date=game_date or datetime.now(),
                is_complete=False,
                location=location,
                notes=notes,
            )
        )
        self.mark_used(focus_child_id)
        logger.info(f"Started game {game.id} vs {opponent_name}")
        return game

    def last_completed_game(self, child_id: ChildId) -> Game | None:
        return self.store.first(
            Game,
            Game.focus_child_id == child_id,
            Game.is_complete.is_(True),
            order_by=(Game.game_date.desc(),),
        )
