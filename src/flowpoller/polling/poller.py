"""
Event poller: fixed-interval scheduler over sealed block heights.

State machine:
    [IDLE] --tick--> [TICKING] --done--> [IDLE]
                         |
                         +--stop signal--> [STOPPED]
                         +--fetch error, ErrorBehavior.STOP--> [ABORTED]

Both terminal states are permanent; a poller runs at most once.

Usage:
    poller = EventPoller(client, interval=30.0)
    sub = poller.subscribe(["A.1654653399040a61.FlowToken.TokensDeposited"])
    stop = asyncio.Event()
    await poller.run(stop)  # consumers read sub.channel concurrently
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from enum import Enum
from typing import Optional

from flowpoller.core.config import ErrorBehavior, PollerConfig
from flowpoller.core.errors import PollerError, PollingAborted, StartupError
from flowpoller.core.interfaces import ILedgerClient
from flowpoller.core.models import BlockHeader, Subscription
from flowpoller.polling.chunker import plan_windows
from flowpoller.polling.dispatch import fetch_and_dispatch
from flowpoller.polling.lifecycle import StopRequested, sleep_until_stopped, until_stopped
from flowpoller.subscriptions.registry import SubscriptionRegistry

logger = logging.getLogger(__name__)


class PollerState(str, Enum):
    IDLE = "idle"
    TICKING = "ticking"
    STOPPED = "stopped"
    ABORTED = "aborted"


class EventPoller:
    """
    Polls the ledger for new sealed blocks and fans matching events out to
    subscribers.

    Parameters
    ----------
    client : ILedgerClient
        Ledger query capability.
    interval : float
        Seconds between tick starts.
    config : PollerConfig, optional
        Start height, chunking bound, error behavior and channel size.
    """

    def __init__(
        self,
        client: ILedgerClient,
        interval: float,
        config: Optional[PollerConfig] = None,
        *,
        registry: Optional[SubscriptionRegistry] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._client = client
        self._interval = interval
        self._config = config or PollerConfig()
        self._registry = registry or SubscriptionRegistry()
        self._state = PollerState.IDLE
        self._last_height: Optional[int] = None
        self._started = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def last_height(self) -> Optional[int]:
        """Reference height: last height fully processed for all subscribed types."""
        return self._last_height

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def config(self) -> PollerConfig:
        return self._config

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, event_types: Iterable[str]) -> Subscription:
        """Subscribe to a list of event types; events arrive on `sub.channel`."""
        return self._registry.subscribe(event_types, channel_size=self._config.channel_size)

    def unsubscribe(self, sub_id: str, event_types: Iterable[str]) -> None:
        """Remove subscription `sub_id` for all provided event types."""
        self._registry.unsubscribe(sub_id, event_types)

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    async def run(self, stop: Optional[asyncio.Event] = None) -> None:
        """
        Run the poller until `stop` is set or polling is aborted.

        Returns None on a clean stop.

        Raises
        ------
        StartupError
            The start header could not be fetched.
        PollingAborted
            A fetch failed while configured with ErrorBehavior.STOP.
        PollerError
            The poller already ran.
        """
        if self._started:
            raise PollerError("event poller cannot be restarted", component="scheduler")
        self._started = True
        if stop is None:
            stop = asyncio.Event()

        try:
            start = await until_stopped(self._start_header(), stop)
        except StopRequested:
            self._state = PollerState.STOPPED
            return None
        except Exception as exc:
            self._state = PollerState.STOPPED
            raise StartupError(f"error getting start header: {exc}") from exc

        self._last_height = start.height
        logger.info("event poller starting at height %d", start.height)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._interval
        try:
            while True:
                self._state = PollerState.IDLE
                await sleep_until_stopped(deadline - loop.time(), stop)

                # re-arm before processing so ticks start roughly every interval
                # instead of every interval plus processing time
                deadline = loop.time() + self._interval

                self._state = PollerState.TICKING
                self._last_height = await self._check_subscriptions(self._last_height, stop)
        except StopRequested:
            self._state = PollerState.STOPPED
            logger.info("event poller stopped at height %d", self._last_height)
            return None
        except PollingAborted:
            self._state = PollerState.ABORTED
            raise

    async def _start_header(self) -> BlockHeader:
        if self._config.start_height is not None:
            return await self._client.get_header_by_height(self._config.start_height)
        return await self._client.get_latest_header(sealed=True)

    async def _check_subscriptions(self, last_height: int, stop: asyncio.Event) -> int:
        """Process one tick and return the new reference height."""
        try:
            latest = await until_stopped(self._client.get_latest_header(sealed=True), stop)
        except StopRequested:
            raise
        except Exception as exc:
            if stop.is_set():
                raise StopRequested from exc
            # keep last_height so the next tick backfills the gap
            logger.warning("error getting latest header: %s", exc)
            return last_height

        if latest.height < last_height:
            logger.warning(
                "latest sealed height %d is behind reference height %d, skipping tick",
                latest.height,
                last_height,
            )
            return last_height

        windows = plan_windows(last_height, latest.height, self._config.max_height_range)
        if not windows:
            return last_height

        event_types = self._registry.event_types()
        logger.debug(
            "polling %d - %d in %d window(s) for %d event type(s)",
            last_height + 1,
            latest.height,
            len(windows),
            len(event_types),
        )

        complete = True
        for window in windows:
            for event_type in event_types:
                try:
                    await fetch_and_dispatch(self._client, self._registry, event_type, window, stop)
                except StopRequested:
                    raise
                except Exception as exc:
                    if stop.is_set():
                        raise StopRequested from exc
                    if self._config.error_behavior is ErrorBehavior.STOP:
                        logger.error(
                            "error polling events %s for %d - %d: %s",
                            event_type,
                            window[0],
                            window[1],
                            exc,
                        )
                        raise PollingAborted(
                            details={"event_type": event_type, "window": window},
                        ) from exc
                    logger.warning(
                        "error polling events %s for %d - %d: %s",
                        event_type,
                        window[0],
                        window[1],
                        exc,
                    )
                    complete = False

        if not complete:
            return last_height
        return windows[-1][1]
