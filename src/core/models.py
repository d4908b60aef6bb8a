"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any scraping or transport-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Entry:
    """One participant's ranked record at capture time."""

    rank: int
    name: str
    user_id: int
    run_id: int
    score: float


@dataclass(frozen=True)
class Snapshot:
    """A full capture of the leaderboard, entries in rank order."""

    timestamp: int
    entries: Tuple[Entry, ...]


@dataclass(frozen=True)
class PbEvent:
    """A personal best detected between two snapshots.

    ``previous`` is None when the participant was not on the baseline board.
    """

    previous: Optional[Entry]
    current: Entry


@dataclass(frozen=True)
class RawEntry:
    """Unparsed row text exactly as the scraper extracted it."""

    rank: str
    name: str
    user_id: str
    run_id: str
    score: str
