"""Recordable stat event kinds and their box-score rules.

The kind table is closed: every consumer (the live accumulator and the
career engine) goes through :data:`BOX_SCORE_DELTAS`, so adding a kind
means extending the enum and that table together.

Example:
    >>> StatEventKind.THREE_POINT_MADE.point_value
    3
    >>> StatEventKind.parse("reb")
    <StatEventKind.REBOUND: 'REBOUND'>
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class StatCategory(Enum):
    """Classification of a stat event kind."""

    MADE_SHOT = "made_shot"
    MISSED_SHOT = "missed_shot"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    TEAM = "team"


class StatEventKind(Enum):
    """Closed set of event kinds recordable during a live game.

    Values are the stable codes persisted in ``stat_events.stat_type``.
    """

    TWO_POINT_MADE = "TWO_MADE"
    TWO_POINT_MISS = "TWO_MISS"
    THREE_POINT_MADE = "THREE_MADE"
    THREE_POINT_MISS = "THREE_MISS"
    FREE_THROW_MADE = "FT_MADE"
    FREE_THROW_MISS = "FT_MISS"
    REBOUND = "REBOUND"
    ASSIST = "ASSIST"
    STEAL = "STEAL"
    BLOCK = "BLOCK"
    TURNOVER = "TURNOVER"
    FOUL = "FOUL"
    TEAM_POINT = "TEAM_POINT"

    @property
    def point_value(self) -> int:
        """Points credited to the team score when this kind is recorded."""
        return _POINT_VALUES.get(self, 0)

    @property
    def category(self) -> StatCategory:
        return _CATEGORIES[self]

    @property
    def is_shot(self) -> bool:
        return self.category in (StatCategory.MADE_SHOT, StatCategory.MISSED_SHOT)

    @property
    def short_label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, token: str) -> StatEventKind:
        """Resolve a user-supplied token to a kind.

        Accepts the stored code (``TWO_MADE``), the member name
        (``two_point_made``) or a short alias (``2pm``, ``reb``), case
        insensitively.

        Raises:
            ValueError: If the token names no kind.
        """
        key = token.strip().upper()
        for kind in cls:
            if key in (kind.value, kind.name):
                return kind
        alias = _ALIASES.get(key.lower())
        if alias is None:
            raise ValueError(f"Unknown stat kind: {token!r}")
        return alias

    @classmethod
    def for_points(cls, points: int) -> StatEventKind:
        """Made-shot kind worth ``points`` (used for teammate scoring)."""
        try:
            return _KIND_FOR_POINTS[points]
        except KeyError:
            raise ValueError(f"Points must be 1, 2 or 3, got {points}") from None


class GameResult(Enum):
    """Outcome of a game from the tracked team's perspective."""

    WIN = "W"
    LOSS = "L"
    TIE = "T"

    @classmethod
    def from_scores(cls, team_score: int, opponent_score: int) -> GameResult:
        if team_score > opponent_score:
            return cls.WIN
        if team_score < opponent_score:
            return cls.LOSS
        return cls.TIE


_POINT_VALUES: dict[StatEventKind, int] = {
    StatEventKind.FREE_THROW_MADE: 1,
    StatEventKind.TWO_POINT_MADE: 2,
    StatEventKind.TEAM_POINT: 2,
    StatEventKind.THREE_POINT_MADE: 3,
}

_CATEGORIES: dict[StatEventKind, StatCategory] = {
    StatEventKind.TWO_POINT_MADE: StatCategory.MADE_SHOT,
    StatEventKind.THREE_POINT_MADE: StatCategory.MADE_SHOT,
    StatEventKind.FREE_THROW_MADE: StatCategory.MADE_SHOT,
    StatEventKind.TWO_POINT_MISS: StatCategory.MISSED_SHOT,
    StatEventKind.THREE_POINT_MISS: StatCategory.MISSED_SHOT,
    StatEventKind.FREE_THROW_MISS: StatCategory.MISSED_SHOT,
    StatEventKind.REBOUND: StatCategory.POSITIVE,
    StatEventKind.ASSIST: StatCategory.POSITIVE,
    StatEventKind.STEAL: StatCategory.POSITIVE,
    StatEventKind.BLOCK: StatCategory.POSITIVE,
    StatEventKind.TURNOVER: StatCategory.NEGATIVE,
    StatEventKind.FOUL: StatCategory.NEGATIVE,
    StatEventKind.TEAM_POINT: StatCategory.TEAM,
}

_LABELS: dict[StatEventKind, str] = {
    StatEventKind.TWO_POINT_MADE: "2PT made",
    StatEventKind.TWO_POINT_MISS: "2PT miss",
    StatEventKind.THREE_POINT_MADE: "3PT made",
    StatEventKind.THREE_POINT_MISS: "3PT miss",
    StatEventKind.FREE_THROW_MADE: "FT made",
    StatEventKind.FREE_THROW_MISS: "FT miss",
    StatEventKind.REBOUND: "REB",
    StatEventKind.ASSIST: "AST",
    StatEventKind.STEAL: "STL",
    StatEventKind.BLOCK: "BLK",
    StatEventKind.TURNOVER: "TO",
    StatEventKind.FOUL: "PF",
    StatEventKind.TEAM_POINT: "+PTS",
}

_ALIASES: dict[str, StatEventKind] = {
    "2pm": StatEventKind.TWO_POINT_MADE,
    "2px": StatEventKind.TWO_POINT_MISS,
    "3pm": StatEventKind.THREE_POINT_MADE,
    "3px": StatEventKind.THREE_POINT_MISS,
    "ftm": StatEventKind.FREE_THROW_MADE,
    "ftx": StatEventKind.FREE_THROW_MISS,
    "reb": StatEventKind.REBOUND,
    "ast": StatEventKind.ASSIST,
    "stl": StatEventKind.STEAL,
    "blk": StatEventKind.BLOCK,
    "to": StatEventKind.TURNOVER,
    "pf": StatEventKind.FOUL,
    "team": StatEventKind.TEAM_POINT,
}

_KIND_FOR_POINTS: dict[int, StatEventKind] = {
    1: StatEventKind.FREE_THROW_MADE,
    2: StatEventKind.TWO_POINT_MADE,
    3: StatEventKind.THREE_POINT_MADE,
}


def _deltas(**counters: int) -> Mapping[str, int]:
    return MappingProxyType(counters)


# Counter increments applied by one recorded event; reversal negates them.
# TEAM_POINT touches no player counter: it only moves the team score.
BOX_SCORE_DELTAS: Mapping[StatEventKind, Mapping[str, int]] = MappingProxyType(
    {
        StatEventKind.FREE_THROW_MADE: _deltas(ft_made=1, ft_attempted=1, points=1),
        StatEventKind.FREE_THROW_MISS: _deltas(ft_attempted=1),
        StatEventKind.TWO_POINT_MADE: _deltas(fg_made=1, fg_attempted=1, points=2),
        StatEventKind.TWO_POINT_MISS: _deltas(fg_attempted=1),
        StatEventKind.THREE_POINT_MADE: _deltas(
            three_made=1, three_attempted=1, fg_made=1, fg_attempted=1, points=3
        ),
        StatEventKind.THREE_POINT_MISS: _deltas(three_attempted=1, fg_attempted=1),
        StatEventKind.REBOUND: _deltas(rebounds=1),
        StatEventKind.ASSIST: _deltas(assists=1),
        StatEventKind.STEAL: _deltas(steals=1),
        StatEventKind.BLOCK: _deltas(blocks=1),
        StatEventKind.TURNOVER: _deltas(turnovers=1),
        StatEventKind.FOUL: _deltas(fouls=1),
        StatEventKind.TEAM_POINT: _deltas(),
    }
)

for _table in (BOX_SCORE_DELTAS, _CATEGORIES, _LABELS):
    _unmapped = set(StatEventKind) - set(_table)
    if _unmapped:
        raise RuntimeError(
            f"Stat kinds missing from kind table: {sorted(k.name for k in _unmapped)}"
        )
