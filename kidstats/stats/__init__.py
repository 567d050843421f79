"""Stat kinds, the live box-score accumulator and career aggregation.

Submodules:
    kinds: Closed stat event kind table and game results
    accumulator: LiveStats incremental box score
    career: Career aggregation engine (import from kidstats.stats.career)
"""
from __future__ import annotations

from kidstats.stats.accumulator import LiveStats, per_game, percentage
from kidstats.stats.kinds import (
    BOX_SCORE_DELTAS,
    GameResult,
    StatCategory,
    StatEventKind,
)

__all__ = [
    "BOX_SCORE_DELTAS",
    "GameResult",
    "LiveStats",
    "StatCategory",
    "StatEventKind",
    "per_game",
    "percentage",
]
