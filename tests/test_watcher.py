from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest

from core.config import WatchConfig
from core.errors import CaptureError, DecodeError, NoResultCapture, NotificationError, PersistError
from core.models import Entry, Snapshot
from core.watcher import LeaderboardWatcher


def _snapshot(*runs: tuple[int, int], timestamp: int = 0) -> Snapshot:
    """Build a snapshot from (user_id, run_id) pairs in rank order."""

    entries = tuple(
        Entry(rank=index + 1, name=f"user{user_id}", user_id=user_id, run_id=run_id, score=400.0 - index)
        for index, (user_id, run_id) in enumerate(runs)
    )
    return Snapshot(timestamp=timestamp, entries=entries)


class FakeScraper:
    def __init__(self, results: list) -> None:
        self._results = list(results)
        self.calls = 0

    async def fetch(self) -> Snapshot:
        self.calls += 1
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeCache:
    def __init__(self, stored: Optional[Snapshot] = None, fail_save: bool = False) -> None:
        self.stored = stored
        self.saved: List[Snapshot] = []
        self._fail_save = fail_save

    def load(self) -> Snapshot:
        if self.stored is None:
            raise DecodeError("no cache")
        return self.stored

    def save(self, snapshot: Snapshot) -> None:
        if self._fail_save:
            raise PersistError("disk full")
        self.saved.append(snapshot)
        self.stored = snapshot


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.sent: List[str] = []
        self._fail = fail

    async def send(self, text: str) -> None:
        if self._fail:
            raise NotificationError("webhook down")
        self.sent.append(text)


def _watcher(
    scraper: FakeScraper,
    cache: FakeCache,
    notifier: FakeNotifier,
    persist_policy: str = "always",
) -> LeaderboardWatcher:
    return LeaderboardWatcher(
        scraper=scraper,
        cache=cache,
        notifier=notifier,
        config=WatchConfig(interval_seconds=600, persist_policy=persist_policy),
    )


def test_bootstrap_prefers_cache() -> None:
    cached = _snapshot((1, 1))
    scraper = FakeScraper([])
    watcher = _watcher(scraper, FakeCache(stored=cached), FakeNotifier())

    assert asyncio.run(watcher.bootstrap()) == cached
    assert watcher.baseline == cached
    assert scraper.calls == 0


def test_bootstrap_falls_back_to_capture_and_caches_it() -> None:
    fresh = _snapshot((1, 1))
    cache = FakeCache()
    watcher = _watcher(FakeScraper([fresh]), cache, FakeNotifier())

    asyncio.run(watcher.bootstrap())

    assert watcher.baseline == fresh
    assert cache.saved == [fresh]


def test_bootstrap_capture_failure_is_fatal() -> None:
    watcher = _watcher(FakeScraper([NoResultCapture("markup changed")]), FakeCache(), FakeNotifier())
    with pytest.raises(CaptureError):
        asyncio.run(watcher.bootstrap())


def test_cycle_before_bootstrap_is_an_error() -> None:
    watcher = _watcher(FakeScraper([]), FakeCache(), FakeNotifier())
    with pytest.raises(RuntimeError):
        asyncio.run(watcher.run_cycle())


def test_cycle_notifies_and_persists() -> None:
    baseline = _snapshot((1, 1), (2, 2))
    current = _snapshot((2, 3), (1, 1), timestamp=600)
    cache = FakeCache(stored=baseline)
    notifier = FakeNotifier()
    watcher = _watcher(FakeScraper([current]), cache, notifier)

    async def scenario() -> list:
        await watcher.bootstrap()
        return await watcher.run_cycle()

    events = asyncio.run(scenario())

    assert [event.current.user_id for event in events] == [2]
    assert len(notifier.sent) == 1
    assert notifier.sent[0].startswith("---  NEW WORLD RECORD  ---")
    assert cache.saved == [current]
    assert watcher.baseline == current


@pytest.mark.parametrize(
    "error",
    [CaptureError("timeout"), NoResultCapture("no rows")],
)
def test_capture_failure_skips_cycle(error: Exception) -> None:
    baseline = _snapshot((1, 1))
    cache = FakeCache(stored=baseline)
    notifier = FakeNotifier()
    watcher = _watcher(FakeScraper([error]), cache, notifier)

    async def scenario() -> list:
        await watcher.bootstrap()
        return await watcher.run_cycle()

    assert asyncio.run(scenario()) == []
    assert watcher.baseline == baseline
    assert cache.saved == []
    assert notifier.sent == []


def test_always_policy_persists_quiet_cycles() -> None:
    baseline = _snapshot((1, 1))
    current = _snapshot((1, 1), timestamp=600)
    cache = FakeCache(stored=baseline)
    watcher = _watcher(FakeScraper([current]), cache, FakeNotifier(), persist_policy="always")

    async def scenario() -> None:
        await watcher.bootstrap()
        await watcher.run_cycle()

    asyncio.run(scenario())

    assert cache.saved == [current]
    assert watcher.baseline.timestamp == 600


def test_on_change_policy_keeps_baseline_on_quiet_cycles() -> None:
    baseline = _snapshot((1, 1))
    current = _snapshot((1, 1), timestamp=600)
    cache = FakeCache(stored=baseline)
    watcher = _watcher(FakeScraper([current]), cache, FakeNotifier(), persist_policy="on_change")

    async def scenario() -> None:
        await watcher.bootstrap()
        await watcher.run_cycle()

    asyncio.run(scenario())

    assert cache.saved == []
    assert watcher.baseline == baseline


def test_notification_failure_does_not_block_persist() -> None:
    baseline = _snapshot((1, 1))
    current = _snapshot((1, 2), timestamp=600)
    cache = FakeCache(stored=baseline)
    watcher = _watcher(FakeScraper([current]), cache, FakeNotifier(fail=True))

    async def scenario() -> list:
        await watcher.bootstrap()
        return await watcher.run_cycle()

    events = asyncio.run(scenario())

    assert len(events) == 1
    assert cache.saved == [current]


def test_persist_failure_still_advances_baseline() -> None:
    baseline = _snapshot((1, 1))
    current = _snapshot((1, 2), timestamp=600)
    cache = FakeCache(stored=baseline, fail_save=True)
    watcher = _watcher(FakeScraper([current]), cache, FakeNotifier())

    async def scenario() -> None:
        await watcher.bootstrap()
        await watcher.run_cycle()

    asyncio.run(scenario())

    assert watcher.baseline == current


def test_unknown_persist_policy_is_rejected() -> None:
    with pytest.raises(ValueError):
        WatchConfig(interval_seconds=600, persist_policy="sometimes")
