"""Notification text for personal best events.

Keeping formatting here prevents drift between notifier adapters and keeps
messages identical regardless of delivery channel.
"""

from __future__ import annotations

from typing import List, Optional

from core.codec import format_f32, to_f32
from core.models import PbEvent

WORLD_RECORD_BANNER = "---  NEW WORLD RECORD  ---"
MILESTONE_BANNER = "---  NEW 400  ---"
MILESTONE_SCORE = 400.0
RUN_LINK_TEMPLATE = "Watch in-game: hyperdemon://run/{run_id}"


def _banner(event: PbEvent) -> Optional[str]:
    previous = event.previous
    current = event.current
    if previous is None:
        return None
    # Only one banner is shown; a world record outranks the milestone.
    if current.rank == 1:
        return WORLD_RECORD_BANNER
    if current.score > MILESTONE_SCORE and previous.score <= MILESTONE_SCORE:
        return MILESTONE_BANNER
    return None


def format_pb_event(event: PbEvent) -> str:
    """Render one event as plain multi-line text."""

    previous = event.previous
    current = event.current
    lines: List[str] = []

    if previous is None:
        lines.append(f"{current.name} just got a new high score! Score: {format_f32(current.score)}")
        lines.append(f"They are now rank #{current.rank}")
    else:
        banner = _banner(event)
        if banner:
            lines.append(banner)

        delta = to_f32(current.score - previous.score)
        lines.append(
            f"{current.name} just got a new high score! "
            f"Score: {format_f32(current.score)} (+{format_f32(delta)})"
        )
        if previous.rank >= current.rank:
            lines.append(
                f"They are now rank #{current.rank}, gaining {previous.rank - current.rank} ranks."
            )
        else:
            lines.append(f"They are now rank #{current.rank}.")

    lines.append(RUN_LINK_TEMPLATE.format(run_id=current.run_id))
    return "\n".join(lines)
