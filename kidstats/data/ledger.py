"""Append-only stat event ledger with soft deletion.

The ledger is the single source of truth for everything recorded during a
game. Events are never physically removed: undo flips ``is_soft_deleted``
and every aggregation read path filters those events out, while
:meth:`EventLedger.audit_events` still returns them.

The team's score is derived on every read by summing ``value`` over the
active events of a game, so a soft delete corrects it retroactively.

Example:
    >>> ledger = EventLedger(store)
    >>> event_id = ledger.append(game.id, player.id, StatEventKind.TWO_POINT_MADE)
    >>> ledger.team_score(game.id)
    2
    >>> ledger.soft_delete(event_id)
    True
    >>> ledger.team_score(game.id)
    0
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import func, select

from kidstats.data.models import Game, StatEvent
from kidstats.stats.accumulator import LiveStats
from kidstats.stats.kinds import GameResult, StatEventKind
from kidstats.types import EventId, GameId, PlayerId, StoragePort

logger = logging.getLogger(__name__)


class EventLedger:
    """Reads and writes stat events through an injected store.

    Every mutation is committed before the call returns; storage failures
    propagate as :class:`kidstats.types.StorageError`.
    """

    def __init__(self, store: StoragePort) -> None:
        self.store = store

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def append(
        self,
        game_id: GameId,
        player_id: PlayerId,
        kind: StatEventKind,
        timestamp: datetime | None = None,
        value: int | None = None,
    ) -> EventId:
        """Record a new active event.

        Args:
            game_id: Game the event belongs to.
            player_id: Roster assignment credited with the event.
            kind: Event kind.
            timestamp: Recording time, defaults to now.
            value: Points credited, defaults to ``kind.point_value``.

        Returns:
            Id of the new event.
        """
        event = self.store.add(
            StatEvent(
                game_id=game_id,
                player_id=player_id,
                stat_type=kind.value,
                value=kind.point_value if value is None else value,
                timestamp=timestamp or datetime.now(),
                is_soft_deleted=False,
            )
        )
        self.store.save()
        logger.debug(f"Appended {kind.value} ({event.value} pts) as event {event.id}")
        return event.id

    def soft_delete(self, event_id: EventId) -> bool:
        """Mark an event deleted without removing it.

        Idempotent: deleting an already deleted event changes nothing.

        Returns:
            True if the event exists (deleted now or before), False if no
            event has this id.
        """
        event = self.store.get(StatEvent, event_id)
        if event is None:
            logger.warning(f"Soft delete skipped, event {event_id} not found")
            return False
        if not event.is_soft_deleted:
            event.is_soft_deleted = True
            self.store.save()
            logger.debug(f"Soft deleted event {event_id}")
        return True

    # -------------------------------------------------------------------------
    # Aggregation reads (active events only)
    # -------------------------------------------------------------------------

    def events_for(
        self, game_id: GameId, player_id: PlayerId | None = None
    ) -> list[StatEvent]:
        """Active events of a game, optionally for one player, oldest first."""
        predicates = [StatEvent.game_id == game_id, StatEvent.is_soft_deleted.is_(False)]
        if player_id is not None:
            predicates.append(StatEvent.player_id == player_id)
        return self.store.query(
            StatEvent, *predicates, order_by=(StatEvent.timestamp,)
        )

    def events_for_players(self, player_ids: Iterable[PlayerId]) -> list[StatEvent]:
        """Active events credited to any of the given roster assignments."""
        ids = list(player_ids)
        if not ids:
            return []
        return self.store.query(
            StatEvent,
            StatEvent.player_id.in_(ids),
            StatEvent.is_soft_deleted.is_(False),
        )

    def live_stats(self, game_id: GameId, player_id: PlayerId) -> LiveStats:
        """Fresh box score for a player in a game, folded from the ledger."""
        return LiveStats.from_kinds(
            kind
            for kind in (e.kind for e in self.events_for(game_id, player_id))
            if kind is not None
        )

    def team_score(self, game_id: GameId) -> int:
        """Derived team score: sum of ``value`` over active events."""
        stmt = select(func.coalesce(func.sum(StatEvent.value), 0)).where(
            StatEvent.game_id == game_id,
            StatEvent.is_soft_deleted.is_(False),
        )
        return int(self.store.scalar(stmt))

    def team_scores(self, game_ids: Iterable[GameId]) -> dict[GameId, int]:
        """Derived team scores for many games in one query.

        Games without active events are reported as 0.
        """
        ids = list(game_ids)
        if not ids:
            return {}
        stmt = (
            select(StatEvent.game_id, func.sum(StatEvent.value))
            .where(StatEvent.game_id.in_(ids), StatEvent.is_soft_deleted.is_(False))
            .group_by(StatEvent.game_id)
        )
        scores = {game_id: 0 for game_id in ids}
        for game_id, total in self.store.rows(stmt):
            scores[game_id] = int(total or 0)
        return scores

    def player_points(self, game_id: GameId) -> dict[PlayerId, int]:
        """Points credited to each player in a game."""
        stmt = (
            select(StatEvent.player_id, func.sum(StatEvent.value))
            .where(StatEvent.game_id == game_id, StatEvent.is_soft_deleted.is_(False))
            .group_by(StatEvent.player_id)
        )
        return {player_id: int(total or 0) for player_id, total in self.store.rows(stmt)}

    def result(self, game: Game) -> GameResult:
        """Win, loss or tie from the derived score and stored opponent score."""
        return GameResult.from_scores(self.team_score(game.id), game.opponent_score)

    # -------------------------------------------------------------------------
    # Audit reads (all events)
    # -------------------------------------------------------------------------

    def audit_events(self, game_id: GameId) -> list[StatEvent]:
        """Every event of a game, soft-deleted ones included, oldest first."""
        return self.store.query(
            StatEvent, StatEvent.game_id == game_id, order_by=(StatEvent.timestamp,)
        )
