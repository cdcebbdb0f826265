"""
Trusted header hash resolution.

The builder always receives an already-resolved hash. Where that hash comes
from depends on the operating mode:

- Loop mode reads it from the contract, the only source the light client
  itself trusts.
- Manual mode takes it from the caller, who may be proving against a contract
  state the operator cannot read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from tendermintx_operator.contract import BridgeContract
from tendermintx_operator.types import Bytes32, Uint64


class TrustedHashResolver(Protocol):
    """Strategy for producing the header hash at the trusted height."""

    async def resolve(self, trusted_height: Uint64) -> Bytes32:
        """Return the header hash to prove from."""
        ...


@dataclass(frozen=True, slots=True)
class ContractHashResolver:
    """Reads the trusted hash from the light client contract."""

    contract: BridgeContract

    async def resolve(self, trusted_height: Uint64) -> Bytes32:
        """Return the contract's stored hash at `trusted_height`."""
        return await self.contract.header_hash_at(trusted_height)


@dataclass(frozen=True, slots=True)
class FixedHashResolver:
    """Returns a caller-supplied hash regardless of height."""

    header_hash: Bytes32

    async def resolve(self, trusted_height: Uint64) -> Bytes32:
        """Return the supplied hash."""
        return self.header_hash
