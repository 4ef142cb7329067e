from __future__ import annotations

from collections.abc import Sequence
from typing import List, Protocol, runtime_checkable

from monitorism.core.models import BlockHeader, ObservedLog


# ---------------------------------------------------------------------------
# IChainClient
# ---------------------------------------------------------------------------

@runtime_checkable
class IChainClient(Protocol):
    """
    Abstract read-only view of a chain node.

    Domain expectations:
    - It returns BlockHeader / ObservedLog objects already mapped into
      internal domain models.
    - Every failure surfaces as `RpcError`, whatever the transport.
    """

    async def chain_id(self) -> int:
        """Return the chain id reported by the node."""
        ...

    async def block_number(self) -> int:
        """Return the current chain head height."""
        ...

    async def latest_header(self) -> BlockHeader:
        """Return the header of the latest block."""
        ...

    async def get_logs(
        self,
        *,
        from_block: int,
        to_block: int,
        addresses: Sequence[str] | None = None,
    ) -> List[ObservedLog]:
        """
        Return all logs over the inclusive block range.

        `addresses=None` means every emitter; a sequence restricts the query.
        """
        ...

    async def call(self, to: str, data: str) -> bytes:
        """Execute a read-only contract call against the latest block."""
        ...

    async def aclose(self) -> None:
        """Release the underlying connection."""
        ...
