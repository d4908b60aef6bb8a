"""Ports (interfaces) used by the core watcher.

Ports define the minimal contracts for scraping, cache and notification
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Protocol

from core.models import Snapshot


class ScraperPort(Protocol):
    """Leaderboard capture required by the watcher.

    Raises CaptureError when the source is unreachable and NoResultCapture
    when nothing usable could be extracted.
    """

    async def fetch(self) -> Snapshot:
        ...


class CachePort(Protocol):
    """Snapshot persistence required by the watcher."""

    def load(self) -> Snapshot:
        ...

    def save(self, snapshot: Snapshot) -> None:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the watcher."""

    async def send(self, text: str) -> None:
        ...
