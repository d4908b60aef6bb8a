"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

PERSIST_POLICIES = ("always", "on_change")


@dataclass(frozen=True)
class WatchConfig:
    """Polling and persistence settings for the watcher."""

    interval_seconds: int
    persist_policy: str = "always"

    def __post_init__(self) -> None:
        if self.persist_policy not in PERSIST_POLICIES:
            raise ValueError(f"Unsupported persist policy: {self.persist_policy}")
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
