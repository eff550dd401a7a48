"""Subscription registry: event type -> subscribers index.

This module exposes:
- `SubscriptionRegistry.subscribe(types)` → new `Subscription` with its own channel
- `SubscriptionRegistry.unsubscribe(id, types)` → drop it from those types
- `event_types()` / `subscribers(type)` → copy-on-read snapshots

The index is guarded by a `threading.Lock` so callers on other threads may
(un)subscribe while the poller is dispatching. Snapshots are plain lists, so
the dispatcher never iterates a structure that is being mutated.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from collections.abc import Iterable

from flowpoller.core.models import Subscription


def new_subscription_id() -> str:
    """Return a fresh collision-resistant subscription id."""
    return uuid.uuid4().hex


def _unique(event_types: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate while keeping first-seen order."""
    return tuple(dict.fromkeys(event_types))


class SubscriptionRegistry:
    """Thread-safe mapping of event types to subscriptions (insertion order)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._index: dict[str, list[Subscription]] = {}

    def subscribe(self, event_types: Iterable[str], *, channel_size: int = 1) -> Subscription:
        """Create a subscription for `event_types` and index it under each type."""
        types = _unique(event_types)
        sub = Subscription(
            id=new_subscription_id(),
            channel=asyncio.Queue(maxsize=channel_size),
            event_types=types,
        )
        with self._lock:
            for event_type in types:
                self._index.setdefault(event_type, []).append(sub)
        return sub

    def unsubscribe(self, sub_id: str, event_types: Iterable[str]) -> None:
        """Remove subscription `sub_id` from each listed type.

        Unknown ids or types are ignored. The subscription's channel is left
        untouched.
        """
        with self._lock:
            for event_type in _unique(event_types):
                subs = self._index.get(event_type)
                if subs is None:
                    continue
                for i, sub in enumerate(subs):
                    if sub.id == sub_id:
                        del subs[i]
                        break
                if not subs:
                    del self._index[event_type]

    def event_types(self) -> list[str]:
        """Snapshot of the currently subscribed event types."""
        with self._lock:
            return list(self._index)

    def subscribers(self, event_type: str) -> list[Subscription]:
        """Snapshot of the subscriptions registered for `event_type`."""
        with self._lock:
            return list(self._index.get(event_type, ()))

    def get(self, sub_id: str) -> Subscription | None:
        """Look up a live subscription by id."""
        with self._lock:
            for subs in self._index.values():
                for sub in subs:
                    if sub.id == sub_id:
                        return sub
        return None

    def __contains__(self, sub_id: object) -> bool:
        return isinstance(sub_id, str) and self.get(sub_id) is not None

    def __len__(self) -> int:
        """Number of distinct live subscriptions."""
        with self._lock:
            return len({sub.id for subs in self._index.values() for sub in subs})
