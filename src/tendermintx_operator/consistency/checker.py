"""
Header consistency check.

Before scheduling anything, the operator confirms the light client's view of
its own head matches the source chain. The contract only ever advances from
what it already stores, so a wrong hash at the synced height poisons every
later proof. This should only happen if an invalid header (typically the
genesis header) was pushed to the contract.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tendermintx_operator.contract import BridgeContract
from tendermintx_operator.exceptions import HeaderMismatchError
from tendermintx_operator.tendermint import HeaderSource
from tendermintx_operator.types import Uint64

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConsistencyChecker:
    """Compares contract and source chain header hashes at one height."""

    header_source: HeaderSource
    """Source chain reader."""

    contract: BridgeContract
    """Light client contract reader."""

    async def check(self, height: Uint64) -> None:
        """
        Verify the contract stores the chain's header hash at `height`.

        Raises:
            HeaderMismatchError: If the hashes differ. Fatal; callers must not retry.
        """
        chain_hash = await self.header_source.signed_header_at(height)
        contract_hash = await self.contract.header_hash_at(height)

        if chain_hash != contract_hash:
            logger.critical(
                "Header mismatch at block %d: chain=0x%s contract=0x%s. "
                "Check the genesis header stored in the contract.",
                height,
                chain_hash.hex(),
                contract_hash.hex(),
            )
            raise HeaderMismatchError(height, chain_hash, contract_hash)

        logger.debug("Header at block %d is consistent: 0x%s", height, chain_hash.hex())
