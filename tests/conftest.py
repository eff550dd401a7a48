import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from flowpoller.core.models import BlockEvents, BlockHeader, Event


def make_event(event_type: str, tx: str = "tx", index: int = 0, payload: bytes = b"{}") -> Event:
    return Event(
        type=event_type,
        transaction_id=tx,
        transaction_index=0,
        event_index=index,
        payload=payload,
    )


def make_block(height: int, *events: Event) -> BlockEvents:
    return BlockEvents(block_id=f"block-{height}", block_height=height, events=tuple(events))


class FakeLedger:
    """In-memory ledger client.

    `heads` is consumed one value per `get_latest_header` call and the last
    value repeats; an Exception in it is raised instead of returned.
    """

    def __init__(
        self,
        heads: list,
        events: dict[str, list[BlockEvents]] | None = None,
    ) -> None:
        self.heads = list(heads)
        self.events = events or {}
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple[str, int, int]] = []
        self.header_by_height_calls: list[int] = []

    async def get_latest_header(self, sealed: bool = True) -> BlockHeader:
        value = self.heads.pop(0) if len(self.heads) > 1 else self.heads[0]
        if isinstance(value, Exception):
            raise value
        return BlockHeader(id=f"block-{value}", height=value)

    async def get_header_by_height(self, height: int) -> BlockHeader:
        self.header_by_height_calls.append(height)
        return BlockHeader(id=f"block-{height}", height=height)

    async def get_events_for_height_range(
        self, event_type: str, start_height: int, end_height: int
    ) -> list[BlockEvents]:
        self.calls.append((event_type, start_height, end_height))
        if event_type in self.failures:
            raise self.failures[event_type]
        return [b for b in self.events.get(event_type, []) if start_height <= b.block_height <= end_height]


async def wait_for_condition(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


@pytest.fixture
def mock_client():
    client = AsyncMock()
    client.get_latest_header = AsyncMock(return_value=BlockHeader(id="block-100", height=100))
    client.get_header_by_height = AsyncMock(side_effect=lambda h: BlockHeader(id=f"block-{h}", height=h))
    client.get_events_for_height_range = AsyncMock(return_value=[])
    return client
