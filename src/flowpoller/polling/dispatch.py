"""Fetch one (window, event type) pair and fan the events out to subscribers."""

from __future__ import annotations

import asyncio
import logging

from flowpoller.core.interfaces import ILedgerClient
from flowpoller.core.models import BlockEvent
from flowpoller.polling.lifecycle import until_stopped
from flowpoller.subscriptions.registry import SubscriptionRegistry

logger = logging.getLogger(__name__)


async def fetch_and_dispatch(
    client: ILedgerClient,
    registry: SubscriptionRegistry,
    event_type: str,
    window: tuple[int, int],
    stop: asyncio.Event,
) -> int:
    """
    Query `event_type` over the inclusive `window` and deliver every event.

    Events are delivered in the order returned by the client, each one to
    every subscription registered for the event's type at send time. Sends
    block while a subscriber's channel is full.

    Returns
    -------
    int
        Number of channel deliveries made.

    Raises
    ------
    StopRequested
        `stop` fired during the query or a blocked send; remaining sends
        are abandoned.
    Exception
        Whatever the client raised; fetch failures are not retried here.
    """
    start_height, end_height = window
    block_events = await until_stopped(
        client.get_events_for_height_range(event_type, start_height, end_height),
        stop,
    )

    delivered = 0
    for be in block_events:
        for event in be.events:
            item = BlockEvent(event=event, block_id=be.block_id, block_height=be.block_height)
            for sub in registry.subscribers(event.type):
                await until_stopped(sub.channel.put(item), stop)
                delivered += 1

    logger.debug(
        "dispatched %s for %d - %d: %d blocks, %d deliveries",
        event_type,
        start_height,
        end_height,
        len(block_events),
        delivered,
    )
    return delivered
