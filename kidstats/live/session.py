"""Live game recording with single-step undo.

A :class:`LiveGameSession` is the only writer for one game while it is
being tracked. Each action appends to the ledger (or, for opponent
points, mutates the stored opponent score), updates the in-memory
counters and becomes the one undoable action.

The in-memory counters are a cache: opening a session rebuilds them from
the ledger, so an abandoned session can simply be reopened.

Example:
    >>> session = LiveGameSession.open(store, game_id)
    >>> session.record_focus_player_stat(StatEventKind.TWO_POINT_MADE)
    >>> session.record_opponent_score(3)
    >>> session.undo_last_action()   # removes the 3 opponent points
    True
    >>> session.team_score, session.opponent_score
    (2, 0)
    >>> session.end_game()
"""
from __future__ import annotations

import logging

from kidstats.data.ledger import EventLedger
from kidstats.data.models import Game, Player
from kidstats.live.undo import (
    FocusStatAction,
    OpponentScoreAction,
    TeammateScoreAction,
    UndoController,
)
from kidstats.logging import SUCCESS, WARN
from kidstats.stats.accumulator import LiveStats
from kidstats.stats.kinds import GameResult, StatEventKind
from kidstats.types import EventId, GameId, NotFoundError, PlayerId, StoragePort

logger = logging.getLogger(__name__)


class LiveGameSession:
    """Live recording surface for one game and its focus player.

    Attributes:
        game: The game being recorded.
        focus_player: Roster assignment of the focus child on the game's team.
        current_stats: Focus player's box score.
        team_score: Running team score (matches the ledger-derived score).
        opponent_score: Running opponent score (stored on the game).
        teammate_scores: Points per teammate roster assignment.
    """

    def __init__(self, store: StoragePort, game: Game, focus_player: Player) -> None:
        self.store = store
        self.ledger = EventLedger(store)
        self.game = game
        self.focus_player = focus_player
        self.undo = UndoController()

        self.current_stats = LiveStats()
        self.team_score = 0
        self.opponent_score = 0
        self.teammate_scores: dict[PlayerId, int] = {}
        self.refresh()

    @classmethod
    def open(cls, store: StoragePort, game_id: GameId) -> LiveGameSession:
        """Open a session for a game, resolving the focus child's roster entry.

        Raises:
            NotFoundError: If the game does not exist or its focus child is
                not rostered on the game's team.
        """
        game = store.get_required(Game, game_id)
        focus_player = store.first(
            Player,
            Player.child_id == game.focus_child_id,
            Player.team_id == game.team_id,
        )
        if focus_player is None:
            raise NotFoundError(
                f"No roster entry for focus child {game.focus_child_id} on team {game.team_id}"
            )
        return cls(store, game, focus_player)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return self.undo.can_undo

    @property
    def result(self) -> GameResult:
        return GameResult.from_scores(self.team_score, self.opponent_score)

    def refresh(self) -> None:
        """Rebuild every running counter from the ledger and the stored game."""
        events = self.ledger.events_for(self.game.id)
        focus_kinds = []
        teammate_scores: dict[PlayerId, int] = {p.id: 0 for p in self._teammates()}
        for event in events:
            if event.player_id == self.focus_player.id:
                kind = event.kind
                if kind is not None:
                    focus_kinds.append(kind)
            else:
                teammate_scores[event.player_id] = (
                    teammate_scores.get(event.player_id, 0) + event.value
                )

        self.current_stats = LiveStats.from_kinds(focus_kinds)
        self.teammate_scores = teammate_scores
        self.team_score = self.ledger.team_score(self.game.id)
        self.opponent_score = self.game.opponent_score
        logger.debug(
            f"Session rebuilt for game {self.game.id}: {len(events)} active events, "
            f"{self.team_score}-{self.opponent_score}"
        )

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def record_focus_player_stat(self, kind: StatEventKind) -> EventId:
        """Record a stat for the focus player.

        ``TEAM_POINT`` credits two points to the team score without
        touching the focus player's box score.
        """
        self._warn_if_complete()
        event_id = self.ledger.append(self.game.id, self.focus_player.id, kind)
        self.current_stats.record(kind)
        self.team_score += kind.point_value
        self.undo.remember(FocusStatAction(event_id=event_id, kind=kind))
        return event_id

    def record_teammate_score(self, player_id: PlayerId, points: int) -> EventId:
        """Record a basket by a teammate.

        Args:
            player_id: Teammate's roster assignment on this game's team.
            points: 1, 2 or 3.

        Raises:
            ValueError: If points is not 1-3, or the player is the focus
                player or not on this team.
            NotFoundError: If the player does not exist.
        """
        kind = StatEventKind.for_points(points)
        player = self.store.get_required(Player, player_id)
        if player.id == self.focus_player.id:
            raise ValueError("Use record_focus_player_stat for the focus player")
        if player.team_id != self.game.team_id:
            raise ValueError(f"Player {player_id} is not on this game's team")

        self._warn_if_complete()
        event_id = self.ledger.append(self.game.id, player_id, kind, value=points)
        self.teammate_scores[player_id] = self.teammate_scores.get(player_id, 0) + points
        self.team_score += points
        self.undo.remember(
            TeammateScoreAction(event_id=event_id, player_id=player_id, points=points)
        )
        return event_id

    def record_opponent_score(self, points: int) -> None:
        """Add points to the stored opponent score."""
        if points <= 0:
            raise ValueError(f"Opponent points must be positive, got {points}")
        self._warn_if_complete()
        self._set_opponent_score(self.opponent_score + points)
        self.undo.remember(OpponentScoreAction(points=points))

    def undo_last_action(self) -> bool:
        """Reverse the most recent action, once.

        The action stays pending until its reversal is stored, so a failed
        undo can be retried.

        Returns:
            True if an action was reversed, False if there was nothing to undo.

        Raises:
            StorageError: If the reversal could not be stored.
        """
        action = self.undo.pending
        if action is None:
            return False

        if isinstance(action, FocusStatAction):
            self.ledger.soft_delete(action.event_id)
            self.current_stats.reverse(action.kind)
            self.team_score -= action.kind.point_value
        elif isinstance(action, TeammateScoreAction):
            self.ledger.soft_delete(action.event_id)
            self.teammate_scores[action.player_id] = (
                self.teammate_scores.get(action.player_id, 0) - action.points
            )
            self.team_score -= action.points
        elif isinstance(action, OpponentScoreAction):
            self._set_opponent_score(self.opponent_score - action.points)
        else:
            raise TypeError(f"Unknown undo action: {action!r}")

        self.undo.take()
        logger.debug(f"Undid {action!r}")
        return True

    def end_game(self) -> None:
        """Mark the game complete. Idempotent; clears the undo slot."""
        if not self.game.is_complete:
            self.game.is_complete = True
            self.store.save()
            logger.info(
                f"{SUCCESS} Game {self.game.id} ended {self.team_score}-{self.opponent_score} "
                f"({self.result.value})"
            )
        self.undo.take()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _teammates(self) -> list[Player]:
        return self.store.query(
            Player,
            Player.team_id == self.game.team_id,
            Player.id != self.focus_player.id,
        )

    def _set_opponent_score(self, score: int) -> None:
        # The store rolls back a failed commit, which reloads the game
        self.game.opponent_score = score
        self.store.save()
        self.opponent_score = score

    def _warn_if_complete(self) -> None:
        if self.game.is_complete:
            logger.warning(f"{WARN} Recording into completed game {self.game.id}")
