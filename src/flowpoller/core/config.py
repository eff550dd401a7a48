from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from flowpoller.constants import (
    DEFAULT_MAX_HEIGHT_RANGE,
    DEFAULT_POLLING_INTERVAL_S,
    MAINNET_ACCESS_URL,
)


class ErrorBehavior(str, Enum):
    """What the poller does when fetching events for a window fails."""

    CONTINUE = "continue"  # log, skip advancing, backfill on the next tick
    STOP = "stop"  # log and abort the run


@dataclass(frozen=True)
class PollerConfig:
    """Configuration for the event poller."""

    # None means "start from the latest sealed block"; 0 is a valid explicit height
    start_height: int | None = None
    max_height_range: int = DEFAULT_MAX_HEIGHT_RANGE
    error_behavior: ErrorBehavior = ErrorBehavior.CONTINUE
    # bound of each subscription channel; 0 means unbounded
    channel_size: int = 1

    def __post_init__(self) -> None:
        if self.start_height is not None and self.start_height < 0:
            raise ValueError("start_height must be >= 0")
        if self.max_height_range < 1:
            raise ValueError("max_height_range must be >= 1")
        if self.channel_size < 0:
            raise ValueError("channel_size must be >= 0")
        # accept plain strings ("stop") coming from CLI or env
        object.__setattr__(self, "error_behavior", ErrorBehavior(self.error_behavior))


@dataclass(frozen=True)
class WatchConfig:
    """Configuration for the `watch` command."""

    events: list[str]
    access_url: str = MAINNET_ACCESS_URL
    interval_s: float = DEFAULT_POLLING_INTERVAL_S
    timeout_s: int = 20
    poller: PollerConfig = field(default_factory=PollerConfig)

    def __post_init__(self) -> None:
        if not self.events:
            raise ValueError("at least one event type is required")
        if self.interval_s <= 0:
            raise ValueError("interval_s must be > 0")
