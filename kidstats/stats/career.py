"""Career aggregation over a child's full event history.

A child may hold several roster assignments (one per team and season).
:class:`CareerStatsCalculator` gathers the active events of all of them,
keeps those belonging to completed games, and derives in one pass:

- career totals and shooting splits,
- a per-game box score (source of the career highs),
- a per-team box score, combined with each game's derived team score
  and stored opponent score into wins, losses and ties.

Rates divide by the number of completed games in scope and are 0.0 when
that number is zero.

Example:
    >>> calculator = CareerStatsCalculator(store)
    >>> stats = calculator.compute(child.id)
    >>> print(f"{stats.points_per_game:.1f} PPG, high {stats.career_high_points}")
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from kidstats.data.ledger import EventLedger
from kidstats.data.models import Child, Game, Player, Team
from kidstats.stats.accumulator import LiveStats, per_game, percentage
from kidstats.stats.kinds import GameResult, StatEventKind
from kidstats.types import ChildId, GameId, NoDataError, StoragePort, TeamId

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class GameLine:
    """One completed game in a child's history.

    Attributes:
        game_id: Game id.
        game_date: When the game was played.
        team_id: Team the child played for.
        opponent_name: Opponent display name.
        team_score: Derived team score.
        opponent_score: Stored opponent score.
        result: Win, loss or tie.
        stats: The child's box score for the game.
    """

    game_id: GameId
    game_date: datetime
    team_id: TeamId
    opponent_name: str
    team_score: int
    opponent_score: int
    result: GameResult
    stats: LiveStats

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_id": self.game_id,
            "game_date": self.game_date.isoformat(),
            "team_id": self.team_id,
            "opponent_name": self.opponent_name,
            "team_score": self.team_score,
            "opponent_score": self.opponent_score,
            "result": self.result.value,
            "stats": self.stats.to_dict(),
        }


@dataclass
class TeamSeasonStats:
    """A child's performance for one team (one season).

    Attributes:
        team_id: Team id.
        team_name: Team name.
        season: Team season label.
        organization: Optional league or club.
        games: Completed games played for the team.
        wins: Games won.
        losses: Games lost.
        ties: Games tied.
        points_per_game: Child's points per game for this team.
        rebounds_per_game: Child's rebounds per game for this team.
        assists_per_game: Child's assists per game for this team.
        steals_per_game: Child's steals per game for this team.
        blocks_per_game: Child's blocks per game for this team.
        fg_percentage: Field goal percentage for this team.
        three_percentage: Three-point percentage for this team.
        ft_percentage: Free throw percentage for this team.
    """

    team_id: TeamId
    team_name: str
    season: str
    organization: str | None = None
    games: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_per_game: float = 0.0
    rebounds_per_game: float = 0.0
    assists_per_game: float = 0.0
    steals_per_game: float = 0.0
    blocks_per_game: float = 0.0
    fg_percentage: float = 0.0
    three_percentage: float = 0.0
    ft_percentage: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "season": self.season,
            "organization": self.organization,
            "games": self.games,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "points_per_game": self.points_per_game,
            "rebounds_per_game": self.rebounds_per_game,
            "assists_per_game": self.assists_per_game,
            "steals_per_game": self.steals_per_game,
            "blocks_per_game": self.blocks_per_game,
            "fg_percentage": self.fg_percentage,
            "three_percentage": self.three_percentage,
            "ft_percentage": self.ft_percentage,
        }


@dataclass
class CareerStats:
    """Career totals, averages and highs for one child.

    Attributes:
        child_id: Child id.
        child_name: Child display name.
        total_games: Completed games with at least one active event.
        *_per_game: Totals divided by total_games (0.0 without games).
        total_*: Career totals.
        field_goal_*, three_point_*, free_throw_*: Shooting splits, with
            percentages on a 0-100 scale.
        career_high_*: Best single-game value.
        team_stats: Per-team breakdown, ordered by season then team name.
        game_lines: Per-game breakdown, ordered by game date.
    """

    child_id: ChildId
    child_name: str
    total_games: int = 0

    # Averages
    points_per_game: float = 0.0
    rebounds_per_game: float = 0.0
    assists_per_game: float = 0.0
    steals_per_game: float = 0.0
    blocks_per_game: float = 0.0
    turnovers_per_game: float = 0.0
    fouls_per_game: float = 0.0

    # Totals
    total_points: int = 0
    total_rebounds: int = 0
    total_assists: int = 0
    total_steals: int = 0
    total_blocks: int = 0
    total_turnovers: int = 0
    total_fouls: int = 0

    # Shooting
    field_goal_made: int = 0
    field_goal_attempted: int = 0
    field_goal_percentage: float = 0.0
    three_point_made: int = 0
    three_point_attempted: int = 0
    three_point_percentage: float = 0.0
    free_throw_made: int = 0
    free_throw_attempted: int = 0
    free_throw_percentage: float = 0.0

    # Career highs
    career_high_points: int = 0
    career_high_rebounds: int = 0
    career_high_assists: int = 0

    # Breakdowns
    team_stats: list[TeamSeasonStats] = field(default_factory=list)
    game_lines: list[GameLine] = field(default_factory=list)

    @classmethod
    def from_totals(
        cls,
        child_id: ChildId,
        child_name: str,
        totals: LiveStats,
        games: int,
    ) -> CareerStats:
        """Build totals, averages and shooting splits from a folded box score."""
        return cls(
            child_id=child_id,
            child_name=child_name,
            total_games=games,
            points_per_game=per_game(totals.points, games),
            rebounds_per_game=per_game(totals.rebounds, games),
            assists_per_game=per_game(totals.assists, games),
            steals_per_game=per_game(totals.steals, games),
            blocks_per_game=per_game(totals.blocks, games),
            turnovers_per_game=per_game(totals.turnovers, games),
            fouls_per_game=per_game(totals.fouls, games),
            total_points=totals.points,
            total_rebounds=totals.rebounds,
            total_assists=totals.assists,
            total_steals=totals.steals,
            total_blocks=totals.blocks,
            total_turnovers=totals.turnovers,
            total_fouls=totals.fouls,
            field_goal_made=totals.fg_made,
            field_goal_attempted=totals.fg_attempted,
            field_goal_percentage=percentage(totals.fg_made, totals.fg_attempted),
            three_point_made=totals.three_made,
            three_point_attempted=totals.three_attempted,
            three_point_percentage=percentage(totals.three_made, totals.three_attempted),
            free_throw_made=totals.ft_made,
            free_throw_attempted=totals.ft_attempted,
            free_throw_percentage=percentage(totals.ft_made, totals.ft_attempted),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert career stats to dictionary format."""
        data: dict[str, Any] = {
            key: value
            for key, value in self.__dict__.items()
            if key not in ("team_stats", "game_lines")
        }
        data["team_stats"] = [team.to_dict() for team in self.team_stats]
        data["game_lines"] = [line.to_dict() for line in self.game_lines]
        return data


# =============================================================================
# Calculator
# =============================================================================


class CareerStatsCalculator:
    """Rebuilds a child's career statistics from the event ledger."""

    def __init__(self, store: StoragePort) -> None:
        self.store = store
        self.ledger = EventLedger(store)

    def compute(self, child_id: ChildId) -> CareerStats:
        """Compute career statistics for a child.

        Args:
            child_id: Child to aggregate.

        Returns:
            Complete CareerStats, including per-team and per-game breakdowns.

        Raises:
            NoDataError: If the child has no roster records.
            StorageError: If reading from storage fails.
        """
        started = time.perf_counter()

        players = self.store.query(Player, Player.child_id == child_id)
        if not players:
            raise NoDataError(f"Child {child_id} has no roster records")

        events = self.ledger.events_for_players(p.id for p in players)
        referenced = {event.game_id for event in events}
        games = (
            self.store.query(
                Game,
                Game.id.in_(sorted(referenced)),
                Game.is_complete.is_(True),
                order_by=(Game.game_date,),
            )
            if referenced
            else []
        )
        games_by_id = {game.id: game for game in games}

        totals = LiveStats()
        by_game: dict[GameId, LiveStats] = {game_id: LiveStats() for game_id in games_by_id}
        by_team: dict[TeamId, LiveStats] = defaultdict(LiveStats)
        skipped = 0

        for event in events:
            game = games_by_id.get(event.game_id)
            if game is None:
                continue  # in-progress game
            kind = event.kind
            if kind is None:
                skipped += 1
                continue
            if kind is StatEventKind.TEAM_POINT:
                continue  # teammate basket, not this child's
            totals.record(kind)
            by_game[game.id].record(kind)
            by_team[game.team_id].record(kind)

        if skipped:
            logger.warning(f"Skipped {skipped} events with unrecognised stat types")

        child = self.store.get(Child, child_id)
        stats = CareerStats.from_totals(
            child_id=child_id,
            child_name=child.name if child is not None else "Unknown",
            totals=totals,
            games=len(games),
        )

        if by_game:
            stats.career_high_points = max(s.points for s in by_game.values())
            stats.career_high_rebounds = max(s.rebounds for s in by_game.values())
            stats.career_high_assists = max(s.assists for s in by_game.values())

        team_scores = self.ledger.team_scores(games_by_id)
        stats.game_lines = [
            GameLine(
                game_id=game.id,
                game_date=game.game_date,
                team_id=game.team_id,
                opponent_name=game.opponent_name,
                team_score=team_scores[game.id],
                opponent_score=game.opponent_score,
                result=GameResult.from_scores(team_scores[game.id], game.opponent_score),
                stats=by_game[game.id],
            )
            for game in games
        ]
        stats.team_stats = self._team_breakdown(games, stats.game_lines, by_team)

        logger.info(
            f"Career stats for {stats.child_name}: {stats.total_games} games, "
            f"{len(events)} events, {len(stats.team_stats)} teams "
            f"in {(time.perf_counter() - started) * 1000:.1f}ms"
        )
        return stats

    def _team_breakdown(
        self,
        games: list[Game],
        lines: list[GameLine],
        by_team: dict[TeamId, LiveStats],
    ) -> list[TeamSeasonStats]:
        records: dict[TeamId, TeamSeasonStats] = {}
        teams: dict[TeamId, Team] = {game.team_id: game.team for game in games}

        for line in lines:
            record = records.get(line.team_id)
            if record is None:
                team = teams[line.team_id]
                record = TeamSeasonStats(
                    team_id=team.id,
                    team_name=team.name,
                    season=team.season,
                    organization=team.organization,
                )
                records[line.team_id] = record
            record.games += 1
            if line.result is GameResult.WIN:
                record.wins += 1
            elif line.result is GameResult.LOSS:
                record.losses += 1
            else:
                record.ties += 1

        for team_id, record in records.items():
            box = by_team.get(team_id, LiveStats())
            record.points_per_game = per_game(box.points, record.games)
            record.rebounds_per_game = per_game(box.rebounds, record.games)
            record.assists_per_game = per_game(box.assists, record.games)
            record.steals_per_game = per_game(box.steals, record.games)
            record.blocks_per_game = per_game(box.blocks, record.games)
            record.fg_percentage = box.fg_percentage
            record.three_percentage = box.three_percentage
            record.ft_percentage = box.ft_percentage

        return sorted(records.values(), key=lambda r: (r.season, r.team_name))


def compute_career_stats(store: StoragePort, child_id: ChildId) -> CareerStats:
    """Compute career statistics for a child with a one-off calculator."""
    return CareerStatsCalculator(store).compute(child_id)
