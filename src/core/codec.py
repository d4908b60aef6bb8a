"""Binary codec for entries and snapshots (core domain).

Layout is little-endian with no header, checksum or version:

- snapshot: ``timestamp`` u64, then exactly SNAPSHOT_ENTRY_COUNT entries
- entry: ``rank`` u16, ``name_len`` u8 + UTF-8 name, ``user_id`` u32,
  ``run_id`` u32, ``score`` f32

Changing any of this invalidates existing cache files.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

from core.errors import DecodeError
from core.models import Entry, Snapshot

# The persisted snapshot is not length-prefixed; both directions rely on this.
SNAPSHOT_ENTRY_COUNT = 1000

MAX_NAME_BYTES = 255

_TIMESTAMP = struct.Struct("<Q")
_RANK = struct.Struct("<H")
_NAME_LEN = struct.Struct("<B")
_TAIL = struct.Struct("<IIf")
_F32 = struct.Struct("<f")


def to_f32(value: float) -> float:
    """Round a Python float to the nearest single-precision value."""

    return _F32.unpack(_F32.pack(value))[0]


def format_f32(value: float) -> str:
    """Return the shortest decimal text that reads back as the same f32."""

    packed = _F32.pack(value)
    for decimals in range(0, 13):
        text = f"{value:.{decimals}f}"
        if _F32.pack(float(text)) == packed:
            return text
    return repr(to_f32(value))


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise DecodeError(f"Unexpected end of cache: wanted {size} bytes, got {len(data or b'')}")
    return data


def decode_entry(stream: BinaryIO) -> Entry:
    """Read one Entry from a binary stream."""

    (rank,) = _RANK.unpack(_read_exact(stream, _RANK.size))
    (name_len,) = _NAME_LEN.unpack(_read_exact(stream, _NAME_LEN.size))
    raw_name = _read_exact(stream, name_len)
    try:
        name = raw_name.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Invalid UTF-8 in entry name: {raw_name!r}") from exc
    user_id, run_id, score = _TAIL.unpack(_read_exact(stream, _TAIL.size))
    return Entry(rank=rank, name=name, user_id=user_id, run_id=run_id, score=score)


def encode_entry(entry: Entry, stream: BinaryIO) -> None:
    """Write one Entry to a binary stream.

    Raises ValueError when the name is longer than MAX_NAME_BYTES or a
    numeric field does not fit its wire width.
    """

    name = entry.name.encode("utf-8")
    if len(name) > MAX_NAME_BYTES:
        raise ValueError(f"Entry name is {len(name)} bytes, limit is {MAX_NAME_BYTES}")
    try:
        stream.write(_RANK.pack(entry.rank))
        stream.write(_NAME_LEN.pack(len(name)))
        stream.write(name)
        stream.write(_TAIL.pack(entry.user_id, entry.run_id, entry.score))
    except struct.error as exc:
        raise ValueError(f"Entry for user {entry.user_id} does not fit the cache layout: {exc}") from exc


def decode_snapshot(stream: BinaryIO) -> Snapshot:
    """Read a full Snapshot; anything short of SNAPSHOT_ENTRY_COUNT entries is an error."""

    (timestamp,) = _TIMESTAMP.unpack(_read_exact(stream, _TIMESTAMP.size))
    entries = tuple(decode_entry(stream) for _ in range(SNAPSHOT_ENTRY_COUNT))
    return Snapshot(timestamp=timestamp, entries=entries)


def encode_snapshot(snapshot: Snapshot, stream: BinaryIO) -> None:
    """Write a full Snapshot to a binary stream."""

    if len(snapshot.entries) != SNAPSHOT_ENTRY_COUNT:
        raise ValueError(
            f"Snapshot has {len(snapshot.entries)} entries, cache layout needs {SNAPSHOT_ENTRY_COUNT}"
        )
    try:
        stream.write(_TIMESTAMP.pack(snapshot.timestamp))
    except struct.error as exc:
        raise ValueError(f"Snapshot timestamp {snapshot.timestamp} does not fit u64") from exc
    for entry in snapshot.entries:
        encode_entry(entry, stream)
