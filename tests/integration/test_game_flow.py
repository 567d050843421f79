"""Integration tests for the game recording flow.

Tests a full season slice end to end: roster setup, live recording with
undo, ending games and rebuilding the child's career statistics from the
ledger, on both the in-memory test store and a file database.
"""
from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from kidstats.config import Settings
from kidstats.data import RosterService, StatStore, init_db, reset_engine, session_scope
from kidstats.data.ledger import EventLedger
from kidstats.data.models import Child, Game, Player, StatEvent, Team
from kidstats.live.session import LiveGameSession
from kidstats.stats.career import CareerStatsCalculator
from kidstats.stats.kinds import GameResult, StatEventKind
from kidstats.types import StorageError


def _play_home_opener(
    store: StatStore, roster: RosterService, team: Team, child: Child, teammate: Player
) -> Game:
    """Hawks beat the Tigers 9-4; the focus child scores 5."""
    game = roster.start_game(
        team.id, child.id, opponent_name="Tigers", game_date=datetime(2025, 10, 4, 9, 0)
    )
    live = LiveGameSession.open(store, game.id)

    live.record_focus_player_stat(StatEventKind.TWO_POINT_MADE)
    live.record_focus_player_stat(StatEventKind.TWO_POINT_MISS)
    live.record_focus_player_stat(StatEventKind.THREE_POINT_MADE)
    live.record_focus_player_stat(StatEventKind.REBOUND)
    live.record_focus_player_stat(StatEventKind.ASSIST)
    live.record_teammate_score(teammate.id, 2)
    live.record_focus_player_stat(StatEventKind.TEAM_POINT)
    live.record_opponent_score(4)
    live.record_opponent_score(3)
    live.undo_last_action()
    live.record_focus_player_stat(StatEventKind.FREE_THROW_MADE)
    live.undo_last_action()

    assert (live.team_score, live.opponent_score) == (9, 4)
    live.end_game()
    assert live.result is GameResult.WIN
    return game


@pytest.mark.integration
class TestGameToCareerFlow:
    """Tests for recording games and aggregating the career."""

    def test_season_across_two_teams(
        self,
        store: StatStore,
        roster: RosterService,
        child: Child,
        team: Team,
        focus_player: Player,
        teammate: Player,
    ) -> None:
        """Career stats should reflect only what survived undo in completed games."""
        opener = _play_home_opener(store, roster, team, child, teammate)

        comets = roster.create_team("Comets", season="Spring 2026")
        roster.add_player(child.id, comets.id, jersey_number="3")
        second = roster.start_game(
            comets.id, child.id, opponent_name="Bears", game_date=datetime(2026, 3, 7, 10, 0)
        )
        live = LiveGameSession.open(store, second.id)
        live.record_focus_player_stat(StatEventKind.FREE_THROW_MADE)
        live.record_focus_player_stat(StatEventKind.FREE_THROW_MISS)
        live.record_focus_player_stat(StatEventKind.FREE_THROW_MADE)
        live.record_focus_player_stat(StatEventKind.REBOUND)
        live.record_opponent_score(10)
        live.end_game()

        unfinished = roster.start_game(
            team.id, child.id, opponent_name="Owls", game_date=datetime(2026, 4, 1, 9, 0)
        )
        LiveGameSession.open(store, unfinished.id).record_focus_player_stat(
            StatEventKind.THREE_POINT_MADE
        )

        career = CareerStatsCalculator(store).compute(child.id)

        assert career.total_games == 2
        assert career.total_points == 7
        assert career.total_rebounds == 2
        assert career.total_assists == 1
        assert (career.field_goal_made, career.field_goal_attempted) == (2, 3)
        assert (career.free_throw_made, career.free_throw_attempted) == (2, 3)
        assert career.points_per_game == pytest.approx(3.5)
        assert career.career_high_points == 5

        assert [line.game_id for line in career.game_lines] == [opener.id, second.id]
        assert [(line.team_score, line.opponent_score) for line in career.game_lines] == [
            (9, 4),
            (2, 10),
        ]
        assert [line.result for line in career.game_lines] == [
            GameResult.WIN,
            GameResult.LOSS,
        ]

        assert [(t.team_name, t.season) for t in career.team_stats] == [
            ("Hawks", "Fall 2025"),
            ("Comets", "Spring 2026"),
        ]
        hawks, comets_stats = career.team_stats
        assert (hawks.games, hawks.wins, hawks.losses) == (1, 1, 0)
        assert hawks.points_per_game == pytest.approx(5.0)
        assert (comets_stats.games, comets_stats.wins, comets_stats.losses) == (1, 0, 1)

    def test_audit_trail_keeps_undone_events(
        self,
        store: StatStore,
        roster: RosterService,
        child: Child,
        team: Team,
        focus_player: Player,
        teammate: Player,
    ) -> None:
        """Undone events stay in the audit trail but not in the active ledger."""
        game = _play_home_opener(store, roster, team, child, teammate)
        ledger = EventLedger(store)

        active = ledger.events_for(game.id)
        audit = ledger.audit_events(game.id)

        assert len(active) == 7
        assert len(audit) == 8
        deleted = [event for event in audit if event.is_soft_deleted]
        assert [event.kind for event in deleted] == [StatEventKind.FREE_THROW_MADE]
        assert ledger.team_score(game.id) == 9

    def test_recording_recovers_after_storage_failure(
        self,
        store: StatStore,
        game: Game,
        focus_player: Player,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A failed write leaves the ledger and session in step and can be retried."""

        def failing_commit() -> None:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        live = LiveGameSession.open(store, game.id)
        live.record_focus_player_stat(StatEventKind.TWO_POINT_MADE)

        with monkeypatch.context() as m:
            m.setattr(store.session, "commit", failing_commit)
            with pytest.raises(StorageError):
                live.record_focus_player_stat(StatEventKind.THREE_POINT_MADE)
            with pytest.raises(StorageError):
                live.undo_last_action()

        ledger = EventLedger(store)
        assert live.team_score == ledger.team_score(game.id) == 2
        assert live.current_stats == ledger.live_stats(game.id, focus_player.id)

        live.record_focus_player_stat(StatEventKind.THREE_POINT_MADE)
        assert live.undo_last_action() is True
        assert live.undo_last_action() is False
        assert live.team_score == ledger.team_score(game.id) == 2

        live.end_game()
        career = CareerStatsCalculator(store).compute(game.focus_child_id)
        assert career.total_points == 2


@pytest.mark.integration
class TestFileDatabaseFlow:
    """Tests for the flow against a file database across units of work."""

    @pytest.fixture(autouse=True)
    def fresh_engine(self, test_settings: Settings):
        reset_engine()
        yield
        reset_engine()

    def test_state_survives_new_sessions(self, test_settings: Settings) -> None:
        """Each unit of work should see what earlier ones committed."""
        assert "stat_events" in init_db()

        with session_scope() as session:
            roster = RosterService(StatStore(session))
            child = roster.create_child("Maya")
            team = roster.create_team("Hawks", season="Fall 2025")
            roster.add_player(child.id, team.id, jersey_number="7")
            game_id = roster.start_game(team.id, child.id, opponent_name="Tigers").id
            child_id = child.id

        with session_scope() as session:
            live = LiveGameSession.open(StatStore(session), game_id)
            live.record_focus_player_stat(StatEventKind.THREE_POINT_MADE)
            live.record_focus_player_stat(StatEventKind.STEAL)
            live.record_opponent_score(2)

        with session_scope() as session:
            store = StatStore(session)
            live = LiveGameSession.open(store, game_id)
            assert (live.team_score, live.opponent_score) == (3, 2)
            assert live.current_stats.steals == 1
            assert live.can_undo is False
            live.end_game()

        with session_scope() as session:
            store = StatStore(session)
            career = CareerStatsCalculator(store).compute(child_id)
            assert store.get_required(Game, game_id).is_complete is True
            assert len(store.query(StatEvent, StatEvent.game_id == game_id)) == 2

        assert career.total_games == 1
        assert career.total_points == 3
        assert career.total_steals == 1
        assert career.game_lines[0].result is GameResult.WIN
