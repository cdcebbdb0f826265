"""Read-only view of the destination-chain light client contract."""

from __future__ import annotations

from typing import Protocol

from tendermintx_operator.types import Bytes32, Uint64


class BridgeContract(Protocol):
    """
    Protocol for reading the light client contract.

    Every method is a view call. Implementations raise `ContractCallError`
    on failure and never cache, so each cycle sees the contract's current state.
    """

    async def synced_height(self) -> Uint64:
        """Return the latest height the light client has accepted."""
        ...

    async def header_hash_at(self, height: Uint64) -> Bytes32:
        """Return the header hash the light client stores for `height`."""
        ...

    async def max_skip(self) -> Uint64:
        """Return the largest height difference a single skip may cover."""
        ...
