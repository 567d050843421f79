"""Tests for career aggregation."""

from __future__ import annotations

import json
import time
from datetime import datetime, timedelta

import pytest

from kidstats.data.ledger import EventLedger
from kidstats.data.models import Child, Game, Player, StatEvent, Team
from kidstats.data.roster import RosterService
from kidstats.stats.career import (
    CareerStats,
    CareerStatsCalculator,
    compute_career_stats,
)
from kidstats.stats.kinds import GameResult, StatEventKind
from kidstats.types import NoDataError

TWO = StatEventKind.TWO_POINT_MADE
THREE = StatEventKind.THREE_POINT_MADE

_BASE_DATE = datetime(2025, 9, 6, 10, 0)


def play_game(
    roster: RosterService,
    ledger: EventLedger,
    team: Team,
    child: Child,
    player: Player,
    kinds: list[StatEventKind],
    opponent_score: int = 0,
    complete: bool = True,
    day: int = 0,
) -> Game:
    """Create a game, record the focus player's events and optionally end it."""
    game = roster.start_game(
        team.id,
        child.id,
        opponent_name=f"Opponent {day}",
        game_date=_BASE_DATE + timedelta(days=day),
    )
    for kind in kinds:
        ledger.append(game.id, player.id, kind)
    game.opponent_score = opponent_score
    game.is_complete = complete
    roster.store.save()
    return game


class TestCareerStatsDataclass:
    """Tests for CareerStats defaults and serialization."""

    def test_default_values(self) -> None:
        """A fresh CareerStats should be all zeros."""
        stats = CareerStats(child_id="c", child_name="Maya")

        assert stats.total_games == 0
        assert stats.points_per_game == 0.0
        assert stats.team_stats == []
        assert stats.game_lines == []

    def test_to_dict_is_json_serializable(self) -> None:
        """to_dict output should serialize to JSON."""
        stats = CareerStats(child_id="c", child_name="Maya", total_points=5)

        payload = json.loads(json.dumps(stats.to_dict()))

        assert payload["total_points"] == 5
        assert payload["team_stats"] == []


class TestCareerStatsCalculator:
    """Tests for CareerStatsCalculator.compute."""

    @pytest.fixture
    def ledger(self, store) -> EventLedger:
        """Ledger over the test store."""
        return EventLedger(store)

    def test_child_without_roster_raises_no_data(self, store, child) -> None:
        """A child never rostered has nothing to aggregate."""
        with pytest.raises(NoDataError):
            CareerStatsCalculator(store).compute(child.id)

    def test_unknown_child_raises_no_data(self, store) -> None:
        """An unknown child id has no roster records."""
        with pytest.raises(NoDataError):
            compute_career_stats(store, "missing")

    def test_rostered_child_without_games(self, store, child, focus_player) -> None:
        """A rostered child with no events gets zeroed stats, not an error."""
        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.child_name == "Maya"
        assert stats.total_games == 0
        assert stats.points_per_game == 0.0
        assert stats.field_goal_percentage == 0.0
        assert stats.career_high_points == 0
        assert stats.team_stats == []

    def test_totals_and_averages(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """Two games of 2 and 3 points should give 5 total and 2.5 per game."""
        play_game(roster, ledger, team, child, focus_player, [TWO], day=0)
        play_game(
            roster,
            ledger,
            team,
            child,
            focus_player,
            [THREE, StatEventKind.THREE_POINT_MISS, StatEventKind.REBOUND],
            day=1,
        )

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_games == 2
        assert stats.total_points == 5
        assert stats.points_per_game == 2.5
        assert stats.total_rebounds == 1
        assert stats.rebounds_per_game == 0.5
        assert stats.field_goal_made == 2
        assert stats.field_goal_attempted == 3
        assert stats.three_point_made == 1
        assert stats.three_point_attempted == 2
        assert stats.three_point_percentage == 50.0
        assert stats.free_throw_percentage == 0.0

    def test_career_high_is_best_single_game(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """Career high should be the maximum single-game value."""
        for day, makes in enumerate([6, 10, 4]):
            play_game(roster, ledger, team, child, focus_player, [TWO] * makes, day=day)

        stats = CareerStatsCalculator(store).compute(child.id)

        assert [line.stats.points for line in stats.game_lines] == [12, 20, 8]
        assert stats.career_high_points == 20
        assert stats.total_points == 40

    def test_team_points_excluded_from_child_totals(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """TEAM_POINT should count for the team score only."""
        play_game(
            roster,
            ledger,
            team,
            child,
            focus_player,
            [TWO, StatEventKind.TEAM_POINT, StatEventKind.TEAM_POINT],
            opponent_score=5,
        )

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_points == 2
        assert stats.game_lines[0].team_score == 6
        assert stats.game_lines[0].result is GameResult.WIN

    def test_incomplete_games_are_excluded(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """Games still in progress should not count."""
        play_game(roster, ledger, team, child, focus_player, [TWO], day=0)
        play_game(
            roster, ledger, team, child, focus_player, [THREE] * 4, complete=False, day=1
        )

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_games == 1
        assert stats.total_points == 2

    def test_soft_deleted_events_are_excluded(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """Undone events should not contribute."""
        game = play_game(roster, ledger, team, child, focus_player, [TWO], day=0)
        undone = ledger.append(game.id, focus_player.id, THREE)
        ledger.soft_delete(undone)

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_points == 2
        assert stats.three_point_attempted == 0

    def test_game_with_only_deleted_events_is_not_counted(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """A game whose every event was undone should not count as played."""
        play_game(roster, ledger, team, child, focus_player, [TWO], day=0)
        empty = play_game(roster, ledger, team, child, focus_player, [], day=1)
        ledger.soft_delete(ledger.append(empty.id, focus_player.id, TWO))

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_games == 1

    def test_teammate_points_do_not_count_for_child(
        self, store, roster, ledger, child, team, focus_player, teammate
    ) -> None:
        """Teammate baskets should only affect the team score."""
        game = play_game(roster, ledger, team, child, focus_player, [TWO], opponent_score=6)
        ledger.append(game.id, teammate.id, THREE, value=3)

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_points == 2
        assert stats.game_lines[0].team_score == 5
        assert stats.game_lines[0].result is GameResult.LOSS

    def test_multi_team_breakdown(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """Per-team records should split wins, losses and ties."""
        comets = roster.create_team("Comets", season="Spring 2026")
        comets_player = roster.add_player(child.id, comets.id)

        play_game(roster, ledger, team, child, focus_player, [TWO], opponent_score=0, day=0)
        play_game(roster, ledger, team, child, focus_player, [TWO], opponent_score=9, day=1)
        play_game(roster, ledger, comets, child, comets_player, [THREE], opponent_score=3, day=2)

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_games == 3
        assert [t.team_name for t in stats.team_stats] == ["Hawks", "Comets"]
        hawks, comets_stats = stats.team_stats
        assert (hawks.games, hawks.wins, hawks.losses, hawks.ties) == (2, 1, 1, 0)
        assert hawks.points_per_game == 2.0
        assert hawks.organization == "YMCA"
        assert (comets_stats.games, comets_stats.ties) == (1, 1)
        assert comets_stats.points_per_game == 3.0
        assert comets_stats.three_percentage == 100.0

    def test_game_lines_ordered_by_date(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """Game lines should follow game date order."""
        later = play_game(roster, ledger, team, child, focus_player, [TWO], day=5)
        earlier = play_game(roster, ledger, team, child, focus_player, [THREE], day=1)

        stats = CareerStatsCalculator(store).compute(child.id)

        assert [line.game_id for line in stats.game_lines] == [earlier.id, later.id]

    def test_unknown_stat_codes_are_skipped(
        self, store, roster, ledger, child, team, focus_player
    ) -> None:
        """Events with codes this version does not know should be ignored."""
        game = play_game(roster, ledger, team, child, focus_player, [TWO])
        store.add(
            StatEvent(
                game_id=game.id,
                player_id=focus_player.id,
                stat_type="DUNK",
                value=0,
                timestamp=datetime.now(),
            )
        )
        store.save()

        stats = CareerStatsCalculator(store).compute(child.id)

        assert stats.total_points == 2

    @pytest.mark.slow
    def test_large_history_is_fast(
        self, store, roster, child, team, focus_player
    ) -> None:
        """50 games of 40 events each should aggregate in under a second."""
        kinds = [TWO, StatEventKind.TWO_POINT_MISS, StatEventKind.REBOUND, StatEventKind.ASSIST]
        for day in range(50):
            game = store.add(
                Game(
                    team_id=team.id,
                    focus_child_id=child.id,
                    opponent_name="Tigers",
                    opponent_score=20,
                    game_date=_BASE_DATE + timedelta(days=day),
                    is_complete=True,
                )
            )
            for i in range(40):
                kind = kinds[i % len(kinds)]
                store.session.add(
                    StatEvent(
                        game_id=game.id,
                        player_id=focus_player.id,
                        stat_type=kind.value,
                        value=kind.point_value,
                        timestamp=game.game_date + timedelta(seconds=i),
                    )
                )
        store.save()

        started = time.perf_counter()
        stats = CareerStatsCalculator(store).compute(child.id)
        elapsed = time.perf_counter() - started

        assert stats.total_games == 50
        assert stats.total_points == 50 * 10 * 2
        assert stats.points_per_game == 20.0
        assert elapsed < 1.0
