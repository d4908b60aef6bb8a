"""Turn scraped row text into a Snapshot (core domain).

Capture is all-or-nothing: one bad row means the page is not what we expect,
and a partial snapshot would be reported as a flood of bogus personal bests
on the next diff.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Set

from core.codec import MAX_NAME_BYTES, SNAPSHOT_ENTRY_COUNT, to_f32
from core.errors import NoResultCapture
from core.models import Entry, RawEntry, Snapshot

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


def _parse_uint(text: str, limit: int, field: str) -> int:
    value = int(text.strip())
    if not 0 <= value <= limit:
        raise ValueError(f"{field} {value} out of range")
    return value


def _parse_score(text: str) -> float:
    value = float(text.strip())
    if not math.isfinite(value):
        raise ValueError(f"score {text.strip()!r} is not a finite number")
    try:
        return to_f32(value)
    except OverflowError as exc:
        raise ValueError(f"score {value} does not fit single precision") from exc


def _clip_name(name: str) -> str:
    """Clip a name to MAX_NAME_BYTES of UTF-8 without splitting a character."""

    encoded = name.encode("utf-8")
    if len(encoded) <= MAX_NAME_BYTES:
        return name
    return encoded[:MAX_NAME_BYTES].decode("utf-8", errors="ignore")


def parse_raw_entry(raw: RawEntry) -> Entry:
    """Convert one RawEntry; raises ValueError on any malformed field."""

    return Entry(
        rank=_parse_uint(raw.rank, _U16_MAX, "rank"),
        name=_clip_name(raw.name),
        user_id=_parse_uint(raw.user_id, _U32_MAX, "user_id"),
        run_id=_parse_uint(raw.run_id, _U32_MAX, "run_id"),
        score=_parse_score(raw.score),
    )


def build_snapshot(
    rows: Iterable[RawEntry],
    timestamp: int,
    expected_entries: int = SNAPSHOT_ENTRY_COUNT,
) -> Snapshot:
    """Build a Snapshot of exactly ``expected_entries`` entries.

    Raises NoResultCapture when nothing was extracted, a row is malformed, a
    user appears twice, or the page held fewer rows than expected. Rows past
    ``expected_entries`` are dropped.
    """

    entries: List[Entry] = []
    seen_users: Set[int] = set()
    for index, raw in enumerate(rows):
        if len(entries) == expected_entries:
            break
        try:
            entry = parse_raw_entry(raw)
        except ValueError as exc:
            raise NoResultCapture(f"Malformed leaderboard row {index}: {exc}") from exc
        if entry.user_id in seen_users:
            raise NoResultCapture(f"User {entry.user_id} appears twice on the leaderboard")
        seen_users.add(entry.user_id)
        entries.append(entry)

    if not entries:
        raise NoResultCapture("No leaderboard rows extracted")
    if len(entries) < expected_entries:
        raise NoResultCapture(f"Only {len(entries)} of {expected_entries} leaderboard rows extracted")

    return Snapshot(timestamp=timestamp, entries=tuple(entries))
