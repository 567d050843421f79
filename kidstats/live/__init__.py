"""Live game recording and single-step undo."""
from __future__ import annotations

from kidstats.live.session import LiveGameSession
from kidstats.live.undo import (
    FocusStatAction,
    OpponentScoreAction,
    TeammateScoreAction,
    UndoAction,
    UndoController,
)

__all__ = [
    "FocusStatAction",
    "LiveGameSession",
    "OpponentScoreAction",
    "TeammateScoreAction",
    "UndoAction",
    "UndoController",
]
