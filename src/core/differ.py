"""Personal best detection between two snapshots (core domain)."""

from __future__ import annotations

from typing import Dict, List

from core.models import Entry, PbEvent, Snapshot


def diff(baseline: Snapshot, current: Snapshot) -> List[PbEvent]:
    """Return personal best events in the rank order of ``current``.

    Matching logic:
    - A user missing from the baseline is a first appearance.
    - A user whose run_id is unchanged has the same achievement, even if the
      site re-ranked ties or reformatted the score.
    - A user whose run_id changed got a new personal best.
    Users that dropped off the board are not reported.
    """

    remaining: Dict[int, Entry] = {entry.user_id: entry for entry in baseline.entries}
    events: List[PbEvent] = []

    for entry in current.entries:
        previous = remaining.pop(entry.user_id, None)
        if previous is None:
            events.append(PbEvent(previous=None, current=entry))
            continue
        if previous.run_id == entry.run_id:
            continue
        events.append(PbEvent(previous=previous, current=entry))

    return events
