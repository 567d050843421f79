"""Youth basketball stat tracking.

Records live in-game stat events for a focus child, keeps them in an
append-only soft-deletable ledger, and rebuilds per-game, per-team and
career statistics from that ledger.

Example:
    >>> from kidstats.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.db_path)
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "KidStats Team"

from kidstats.config import Settings, get_settings

__all__ = [
    "Settings",
    "__author__",
    "__version__",
    "get_settings",
]
