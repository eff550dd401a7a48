from __future__ import annotations

from .constants import DEFAULT_MAX_HEIGHT_RANGE, FLOW_TOKEN_EVENTS, MAINNET_ACCESS_URL
from .core.config import ErrorBehavior, PollerConfig
from .core.errors import PollerError, PollingAborted, StartupError
from .core.models import BlockEvent, BlockEvents, BlockHeader, Event, Subscription
from .polling.chunker import iter_windows
from .polling.poller import EventPoller, PollerState
from .subscriptions.registry import SubscriptionRegistry

__all__ = [
    "EventPoller",
    "PollerState",
    "PollerConfig",
    "ErrorBehavior",
    "SubscriptionRegistry",
    "iter_windows",
    "BlockEvent",
    "BlockEvents",
    "BlockHeader",
    "Event",
    "Subscription",
    "PollerError",
    "PollingAborted",
    "StartupError",
    "DEFAULT_MAX_HEIGHT_RANGE",
    "FLOW_TOKEN_EVENTS",
    "MAINNET_ACCESS_URL",
]
