from __future__ import annotations

from core.formatting import MILESTONE_BANNER, WORLD_RECORD_BANNER, format_pb_event
from core.models import Entry, PbEvent


def _entry(rank: int, score: float, run_id: int = 1, name: str = "fennekal") -> Entry:
    return Entry(rank=rank, name=name, user_id=2, run_id=run_id, score=score)


def test_world_record_banner_wins_over_milestone() -> None:
    event = PbEvent(previous=_entry(2, 399.0, run_id=2), current=_entry(1, 410.0, run_id=3))
    text = format_pb_event(event)
    assert text.splitlines() == [
        WORLD_RECORD_BANNER,
        "fennekal just got a new high score! Score: 410 (+11)",
        "They are now rank #1, gaining 1 ranks.",
        "Watch in-game: hyperdemon://run/3",
    ]
    assert MILESTONE_BANNER not in text


def test_milestone_banner_when_crossing_400() -> None:
    event = PbEvent(previous=_entry(9, 400.0), current=_entry(4, 400.5, run_id=2))
    lines = format_pb_event(event).splitlines()
    assert lines[0] == MILESTONE_BANNER
    assert lines[1] == "fennekal just got a new high score! Score: 400.5 (+0.5)"
    assert lines[2] == "They are now rank #4, gaining 5 ranks."


def test_no_banner_when_already_above_400() -> None:
    event = PbEvent(previous=_entry(5, 401.0), current=_entry(3, 405.0, run_id=2))
    text = format_pb_event(event)
    assert MILESTONE_BANNER not in text
    assert WORLD_RECORD_BANNER not in text
    assert text.startswith("fennekal just got a new high score!")


def test_rank_drop_omits_gain() -> None:
    event = PbEvent(previous=_entry(10, 300.0), current=_entry(12, 301.0, run_id=2))
    lines = format_pb_event(event).splitlines()
    assert lines[1] == "They are now rank #12."


def test_unchanged_rank_gains_zero() -> None:
    event = PbEvent(previous=_entry(10, 300.0), current=_entry(10, 301.0, run_id=2))
    assert "They are now rank #10, gaining 0 ranks." in format_pb_event(event)


def test_first_appearance() -> None:
    event = PbEvent(previous=None, current=_entry(1, 420.0, run_id=77, name="possm"))
    assert format_pb_event(event).splitlines() == [
        "possm just got a new high score! Score: 420",
        "They are now rank #1",
        "Watch in-game: hyperdemon://run/77",
    ]
