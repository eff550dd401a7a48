"""Cooperative shutdown shared by every blocking operation of the poller."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class StopRequested(Exception):
    """The shared stop signal fired while an operation was waiting."""


async def _cancel(task: asyncio.Future) -> None:
    """Cancel `task` and wait until it has unwound."""
    task.cancel()
    await asyncio.wait({task})
    if not task.cancelled():
        task.exception()  # finished anyway; stop still takes precedence


async def until_stopped(aw: Awaitable[T], stop: asyncio.Event) -> T:
    """Await `aw` unless `stop` fires first.

    When `stop` wins, `aw` is cancelled and `StopRequested` is raised. If `aw`
    completes first its result (or exception) is returned as usual.
    """
    task = asyncio.ensure_future(aw)
    if stop.is_set():
        await _cancel(task)
        raise StopRequested
    waiter = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
    if task.done():
        return task.result()
    # let the cancelled operation unwind before the caller tears down its resources
    await _cancel(task)
    raise StopRequested


async def sleep_until_stopped(delay: float, stop: asyncio.Event) -> None:
    """Sleep for `delay` seconds, raising `StopRequested` if `stop` fires."""
    await until_stopped(asyncio.sleep(max(0.0, delay)), stop)
