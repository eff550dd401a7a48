"""Core data models for polled ledger events.

This module defines:
- `BlockHeader`: minimal sealed block header used to track heights.
- `Event`: a single emitted ledger event (type + opaque payload).
- `BlockEvents`: one block's events as returned by a range query.
- `BlockEvent`: the item delivered to subscribers.
- `Subscription`: a subscriber handle owning its delivery channel.

Design notes
------------
- Headers and events are frozen; they are fanned out by reference.
- Payloads are kept as raw JSON-CDC bytes; decoding is up to consumers.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


# === Ledger records ===


@dataclass(slots=True, frozen=True)
class BlockHeader:
    """Sealed block header, never mutated once fetched."""

    id: str
    height: int
    parent_id: str = ""
    timestamp: datetime | None = None


@dataclass(slots=True, frozen=True)
class Event:
    """Event emitted by a transaction."""

    type: str  # fully qualified, e.g. A.<address>.<Contract>.<Event>
    transaction_id: str
    transaction_index: int
    event_index: int
    payload: bytes  # JSON-CDC

    @property
    def key(self) -> str:
        """Stable identifier of the event within the chain."""
        return f"{self.transaction_id}.{self.event_index}"

    def decode(self) -> Any:
        """Parse the JSON-CDC payload."""
        return json.loads(self.payload)


@dataclass(slots=True, frozen=True)
class BlockEvents:
    """Events of one type emitted in one block."""

    block_id: str
    block_height: int
    events: tuple[Event, ...] = ()
    block_timestamp: datetime | None = None


@dataclass(slots=True, frozen=True)
class BlockEvent:
    """Event delivered on a subscription channel."""

    event: Event
    block_id: str
    block_height: int


# === Subscriptions ===


@dataclass(eq=False)
class Subscription:
    """Handle returned by `subscribe`.

    The subscriber owns `channel`: the poller only ever puts into it and never
    closes or drains it.
    """

    id: str
    channel: asyncio.Queue[BlockEvent]
    event_types: tuple[str, ...] = field(default_factory=tuple)

    async def receive(self) -> BlockEvent:
        """Wait for the next delivered event."""
        return await self.channel.get()

    async def __aiter__(self) -> AsyncIterator[BlockEvent]:
        while True:
            yield await self.channel.get()
