"""Single-slot undo memory for a live game session.

Only the most recent action can be undone: remembering a new action
replaces the previous one, and taking the action empties the slot.

Example:
    >>> undo = UndoController()
    >>> undo.remember(OpponentScoreAction(points=2))
    >>> undo.can_undo
    True
    >>> undo.take()
    OpponentScoreAction(points=2)
    >>> undo.take() is None
    True
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from kidstats.stats.kinds import StatEventKind
from kidstats.types import EventId, PlayerId


@dataclass(frozen=True)
class FocusStatAction:
    """A stat recorded for the focus player."""

    event_id: EventId
    kind: StatEventKind


@dataclass(frozen=True)
class TeammateScoreAction:
    """Points recorded for a teammate."""

    event_id: EventId
    player_id: PlayerId
    points: int


@dataclass(frozen=True)
class OpponentScoreAction:
    """Points added to the stored opponent score (no ledger event)."""

    points: int


UndoAction = Union[FocusStatAction, TeammateScoreAction, OpponentScoreAction]


class UndoController:
    """Holds at most one undoable action."""

    def __init__(self) -> None:
        self._last_action: UndoAction | None = None

    @property
    def can_undo(self) -> bool:
        return self._last_action is not None

    @property
    def pending(self) -> UndoAction | None:
        return self._last_action

    def remember(self, action: UndoAction) -> None:
        """Make ``action`` the undoable one, discarding any earlier action."""
        self._last_action = action

    def take(self) -> UndoAction | None:
        """Return the pending action and clear the slot."""
        action, self._last_action = self._last_action, None
        return action
