"""Core leaderboard watching pipeline.

This module is integration-agnostic. It only relies on ports for scraping,
caching and notifications, enabling other leaderboards or transports without
changes here.

One cycle runs in a strict order:
1) Capture a fresh snapshot (skip the cycle on failure)
2) Diff it against the baseline
3) Format and send every personal best
4) Persist and adopt the fresh snapshot per the persist policy
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from core.config import WatchConfig
from core.differ import diff
from core.errors import CaptureError, DecodeError, NoResultCapture, PersistError
from core.formatting import format_pb_event
from core.models import PbEvent, Snapshot
from core.ports import CachePort, NotifierPort, ScraperPort

LOGGER = logging.getLogger(__name__)


class LeaderboardWatcher:
    """Owns the baseline snapshot and runs capture/diff/notify/persist cycles."""

    def __init__(
        self,
        scraper: ScraperPort,
        cache: CachePort,
        notifier: NotifierPort,
        config: WatchConfig,
    ) -> None:
        self._scraper = scraper
        self._cache = cache
        self._notifier = notifier
        self._config = config
        self._baseline: Optional[Snapshot] = None
        self._lock = asyncio.Lock()

    @property
    def baseline(self) -> Optional[Snapshot]:
        return self._baseline

    async def bootstrap(self) -> Snapshot:
        """Load the cached baseline, falling back to a fresh capture.

        CaptureError from the fallback capture propagates: without a baseline
        there is nothing to diff against.
        """

        try:
            snapshot = self._cache.load()
            LOGGER.info("Loaded cached leaderboard from %s", snapshot.timestamp)
        except DecodeError as exc:
            LOGGER.warning("Cache unusable (%s), capturing a fresh leaderboard", exc)
            snapshot = await self._scraper.fetch()
            self._persist(snapshot)

        self._baseline = snapshot
        return snapshot

    async def run_cycle(self) -> List[PbEvent]:
        """Run one polling cycle and return the events that were detected."""

        if self._baseline is None:
            raise RuntimeError("bootstrap() must run before the first cycle")

        async with self._lock:
            try:
                current = await self._scraper.fetch()
            except NoResultCapture as exc:
                LOGGER.warning("Nothing extracted from the leaderboard, skipping cycle: %s", exc)
                return []
            except CaptureError as exc:
                LOGGER.warning("Leaderboard capture failed, skipping cycle: %s", exc)
                return []

            events = diff(self._baseline, current)
            if events:
                LOGGER.info("%s personal bests detected", len(events))
                await self._notify_all(events)
            else:
                LOGGER.info("nothing to do")

            if events or self._config.persist_policy == "always":
                # The baseline advances even if the write fails; a restart
                # will then re-report from the older cache.
                self._persist(current)
                self._baseline = current

            return events

    async def _notify_all(self, events: List[PbEvent]) -> None:
        texts = [format_pb_event(event) for event in events]
        results = await asyncio.gather(
            *(self._notifier.send(text) for text in texts),
            return_exceptions=True,
        )
        for event, result in zip(events, results):
            if isinstance(result, BaseException):
                LOGGER.error(
                    "Notification failed for %s (run %s)",
                    event.current.name,
                    event.current.run_id,
                    exc_info=result,
                )
            else:
                LOGGER.info("Notified %s (run %s)", event.current.name, event.current.run_id)

    def _persist(self, snapshot: Snapshot) -> None:
        try:
            self._cache.save(snapshot)
        except PersistError:
            LOGGER.exception("Failed to persist leaderboard cache")
