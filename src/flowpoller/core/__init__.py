"""Core data models, configuration, errors and interfaces.

This package provides:
- Data models (BlockHeader, Event, BlockEvents, BlockEvent, Subscription)
- Configuration classes (PollerConfig, WatchConfig, ErrorBehavior)
- Error hierarchy (PollerError, StartupError, PollingAborted, LedgerQueryError)
- The ledger client protocol (ILedgerClient)
"""

from flowpoller.core.config import ErrorBehavior, PollerConfig, WatchConfig
from flowpoller.core.errors import LedgerQueryError, PollerError, PollingAborted, StartupError
from flowpoller.core.interfaces import ILedgerClient
from flowpoller.core.models import BlockEvent, BlockEvents, BlockHeader, Event, Subscription

__all__ = [
    "ErrorBehavior",
    "PollerConfig",
    "WatchConfig",
    "LedgerQueryError",
    "PollerError",
    "PollingAborted",
    "StartupError",
    "ILedgerClient",
    "BlockEvent",
    "BlockEvents",
    "BlockHeader",
    "Event",
    "Subscription",
]
