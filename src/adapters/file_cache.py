"""File cache adapter.

Implements the core CachePort using the binary snapshot layout in a single
file.
"""

from __future__ import annotations

import logging
import os
import tempfile

from core.codec import decode_snapshot, encode_snapshot
from core.errors import DecodeError, PersistError
from core.models import Snapshot

LOGGER = logging.getLogger(__name__)


class FileSnapshotCache:
    """Thin file wrapper that satisfies the CachePort contract."""

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> Snapshot:
        """Decode the cached snapshot; any failure means no usable cache."""

        try:
            with open(self._path, "rb") as handle:
                return decode_snapshot(handle)
        except OSError as exc:
            raise DecodeError(f"Cannot read cache {self._path}: {exc}") from exc

    def save(self, snapshot: Snapshot) -> None:
        """Write the snapshot next to the target, then swap it into place.

        A crash mid-write leaves the previous cache file untouched.
        """

        directory = os.path.dirname(os.path.abspath(self._path))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".cache-", dir=directory)
        except OSError as exc:
            raise PersistError(f"Cannot write cache {self._path}: {exc}") from exc

        try:
            with os.fdopen(fd, "wb") as handle:
                encode_snapshot(snapshot, handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        except (OSError, ValueError) as exc:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise PersistError(f"Cannot write cache {self._path}: {exc}") from exc

        LOGGER.info("Cached leaderboard from %s to %s", snapshot.timestamp, self._path)
