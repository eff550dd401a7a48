"""Lightweight client for the Flow Access REST API.

This module provides:
- `AccessAPI`: an async client with sane timeouts/connection limits
- Pydantic response models for the `/v1/blocks` and `/v1/events` endpoints

It returns `BlockHeader` / `BlockEvents` records ready for dispatch.
"""

from __future__ import annotations

import base64
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel

from flowpoller.core.errors import LedgerQueryError
from flowpoller.core.models import BlockEvents, BlockHeader, Event


# === Response models ===


class HeaderPayload(BaseModel):
    id: str
    parent_id: str = ""
    height: int  # sent as a decimal string
    timestamp: datetime | None = None


class BlockPayload(BaseModel):
    header: HeaderPayload


class EventPayload(BaseModel):
    type: str
    transaction_id: str
    transaction_index: int
    event_index: int
    payload: str  # base64 JSON-CDC


class BlockEventsPayload(BaseModel):
    block_id: str
    block_height: int
    block_timestamp: datetime | None = None
    events: Sequence[EventPayload] = ()


def to_header(p: HeaderPayload) -> BlockHeader:
    return BlockHeader(id=p.id, height=p.height, parent_id=p.parent_id, timestamp=p.timestamp)


def to_event(p: EventPayload) -> Event:
    return Event(
        type=p.type,
        transaction_id=p.transaction_id,
        transaction_index=p.transaction_index,
        event_index=p.event_index,
        payload=base64.b64decode(p.payload) if p.payload else b"",
    )


def to_block_events(p: BlockEventsPayload) -> BlockEvents:
    return BlockEvents(
        block_id=p.block_id,
        block_height=p.block_height,
        block_timestamp=p.block_timestamp,
        events=tuple(to_event(e) for e in p.events),
    )


class AccessAPI:
    """Minimal async Access API client.

    Parameters
    ----------
    url : str
        REST endpoint base URL, e.g. https://rest-mainnet.onflow.org
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    transport : httpx.AsyncBaseTransport, optional
        Custom transport (tests use `httpx.MockTransport`).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 8,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.url,
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=True,
            transport=transport,
        )

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        r = await self.client.get(path, params=params)
        r.raise_for_status()
        try:
            return r.json()
        except ValueError as e:
            raise LedgerQueryError(f"non-JSON response from {path}: {e}") from e

    async def _block_header(self, height: str) -> BlockHeader:
        data = await self._get("/v1/blocks", {"height": height})
        try:
            blocks = [BlockPayload.model_validate(b) for b in data]
        except (TypeError, ValueError) as e:
            raise LedgerQueryError(f"malformed block response for height={height}: {e}") from e
        if not blocks:
            raise LedgerQueryError(f"no block returned for height={height}")
        return to_header(blocks[0].header)

    async def get_latest_header(self, sealed: bool = True) -> BlockHeader:
        """Return the latest sealed (or finalized) block header."""
        return await self._block_header("sealed" if sealed else "final")

    async def get_header_by_height(self, height: int) -> BlockHeader:
        """Return the block header at `height`."""
        return await self._block_header(str(height))

    async def get_events_for_height_range(
        self,
        event_type: str,
        start_height: int,
        end_height: int,
    ) -> list[BlockEvents]:
        """Fetch events of one type within an inclusive height range."""
        data = await self._get(
            "/v1/events",
            {"type": event_type, "start_height": start_height, "end_height": end_height},
        )
        try:
            out = [to_block_events(BlockEventsPayload.model_validate(b)) for b in data]
        except (TypeError, ValueError) as e:
            raise LedgerQueryError(
                f"malformed events response for {event_type} {start_height} - {end_height}: {e}"
            ) from e
        out.sort(key=lambda be: be.block_height)
        return out

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> AccessAPI:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
