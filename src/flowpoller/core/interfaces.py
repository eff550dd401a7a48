from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from flowpoller.core.models import BlockEvents, BlockHeader


# ---------------------------------------------------------------------------
# ILedgerClient
# ---------------------------------------------------------------------------

@runtime_checkable
class ILedgerClient(Protocol):
    """
    Abstract query capability of the ledger's access API.

    Domain expectations:
    - It returns BlockHeader / BlockEvents objects already mapped into internal
      domain models.
    - It hides the underlying transport (REST, gRPC, archive, in-memory).
    - Failures surface as exceptions; the poller decides whether to retry.
    """

    async def get_latest_header(self, sealed: bool = True) -> BlockHeader:
        """
        Return the latest block header.

        When `sealed` is True only sealed (finalized and executed) blocks are
        considered.
        """
        ...

    async def get_header_by_height(self, height: int) -> BlockHeader:
        """Return the header of the block at `height`."""
        ...

    async def get_events_for_height_range(
        self,
        event_type: str,
        start_height: int,
        end_height: int,
    ) -> List[BlockEvents]:
        """
        Return all events of `event_type` over the inclusive height range.

        Results are ordered by block height, and events within a block keep
        their emission order.

        Implementations:
        - REST-based (`AccessAPI`)
        - In-memory or synthetic provider for testing
        """
        ...
