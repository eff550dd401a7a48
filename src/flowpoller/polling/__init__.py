"""Polling scheduler, height-range chunking and event dispatch.

This package provides:
- EventPoller: the fixed-interval scheduler
- iter_windows / plan_windows: bounded height-range chunking
- fetch_and_dispatch: one (window, event type) fetch plus fan-out
- until_stopped / StopRequested: cooperative shutdown helpers
"""

from flowpoller.polling.chunker import iter_windows, plan_windows
from flowpoller.polling.dispatch import fetch_and_dispatch
from flowpoller.polling.lifecycle import StopRequested, sleep_until_stopped, until_stopped
from flowpoller.polling.poller import EventPoller, PollerState

__all__ = [
    "EventPoller",
    "PollerState",
    "iter_windows",
    "plan_windows",
    "fetch_and_dispatch",
    "StopRequested",
    "sleep_until_stopped",
    "until_stopped",
]
