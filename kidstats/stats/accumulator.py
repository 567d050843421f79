"""Incremental box-score accumulator for one player in one game.

:class:`LiveStats` is a cache over the event ledger: it can always be
rebuilt by folding the non-deleted events of a (player, game) pair, and
the ledger wins whenever the two disagree.

Example:
    >>> stats = LiveStats()
    >>> stats.record(StatEventKind.TWO_POINT_MADE)
    >>> stats.record(StatEventKind.TWO_POINT_MISS)
    >>> stats.fg_percentage
    50.0
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, fields

from kidstats.stats.kinds import BOX_SCORE_DELTAS, StatEventKind

logger = logging.getLogger(__name__)


def percentage(made: int, attempted: int) -> float:
    """Shooting percentage on a 0-100 scale, 0.0 when nothing was attempted."""
    return made / attempted * 100 if attempted > 0 else 0.0


def per_game(total: int, games: int) -> float:
    """Per-game rate, 0.0 when there are no games."""
    return total / games if games > 0 else 0.0


@dataclass
class LiveStats:
    """Running counters and shooting percentages.

    Percentages are stored fields so two accumulators compare equal
    field-by-field; they are recomputed from the counters after every
    :meth:`record` or :meth:`reverse`.
    """

    points: int = 0
    fg_made: int = 0
    fg_attempted: int = 0
    fg_percentage: float = 0.0
    three_made: int = 0
    three_attempted: int = 0
    three_percentage: float = 0.0
    ft_made: int = 0
    ft_attempted: int = 0
    ft_percentage: float = 0.0
    rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    fouls: int = 0

    @classmethod
    def from_kinds(cls, kinds: Iterable[StatEventKind]) -> LiveStats:
        """Fold a sequence of event kinds into a fresh accumulator."""
        stats = cls()
        for kind in kinds:
            stats._apply(kind, 1)
        stats._update_percentages()
        return stats

    def record(self, kind: StatEventKind) -> None:
        """Apply one recorded event."""
        self._apply(kind, 1)
        self._update_percentages()

    def reverse(self, kind: StatEventKind) -> None:
        """Undo one previously recorded event.

        Counters are not clamped, so reversing a kind that was never
        recorded leaves negative values behind (logged as a warning).
        """
        self._apply(kind, -1)
        self._update_percentages()
        negative = [name for name in BOX_SCORE_DELTAS[kind] if getattr(self, name) < 0]
        if negative:
            logger.warning(
                f"Reversing {kind.value} drove counters negative: {', '.join(negative)}"
            )

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in fields(self))

    def to_dict(self) -> dict[str, int | float]:
        """Convert stats to dictionary format."""
        return asdict(self)

    def _apply(self, kind: StatEventKind, sign: int) -> None:
        for name, delta in BOX_SCORE_DELTAS[kind].items():
            setattr(self, name, getattr(self, name) + sign * delta)

    def _update_percentages(self) -> None:
        self.fg_percentage = percentage(self.fg_made, self.fg_attempted)
        self.three_percentage = percentage(self.three_made, self.three_attempted)
        self.ft_percentage = percentage(self.ft_made, self.ft_attempted)
