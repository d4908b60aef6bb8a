"""Error taxonomy shared by the core and adapters."""

from __future__ import annotations


class PbWatchError(Exception):
    """Base class for all pbwatch errors."""


class DecodeError(PbWatchError):
    """The cache is missing, truncated or holds invalid data."""


class CaptureError(PbWatchError):
    """The leaderboard could not be fetched or parsed."""


class NoResultCapture(CaptureError):
    """The page was fetched but no usable rows could be extracted."""


class PersistError(PbWatchError):
    """Writing the snapshot cache failed."""


class NotificationError(PbWatchError):
    """A notification could not be delivered."""
