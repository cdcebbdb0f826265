"""
Source chain header access.

The operator never verifies Tendermint headers itself. It only needs to know
which header hash the chain committed at a height, how far the chain has
progressed, and (for skip selection) which validators signed a commit.
"""

from __future__ import annotations

from typing import Protocol

from tendermintx_operator.types import Bytes32, StrictBaseModel, Uint64


class SignedHeaderInfo(StrictBaseModel):
    """The parts of a signed header the operator acts on."""

    height: Uint64
    """Height of the header."""

    header_hash: Bytes32
    """Hash of the header, as committed by the block id."""


class Validator(StrictBaseModel):
    """A validator entry from the source chain's validator set."""

    address: str
    """Upper-case hex address of the validator."""

    voting_power: int
    """Voting power of the validator at the queried height."""


class HeaderSource(Protocol):
    """
    Protocol for reading the source chain.

    Implementations raise `HeaderSourceError` on transport failure.
    Errors are not retried internally; the operator's cycle is the retry unit.
    """

    async def latest_signed_header(self) -> SignedHeaderInfo:
        """Return the height and hash of the chain head."""
        ...

    async def signed_header_at(self, height: Uint64) -> Bytes32:
        """Return the header hash committed at `height`."""
        ...

    async def validators_at(self, height: Uint64) -> list[Validator]:
        """Return the full validator set at `height`."""
        ...

    async def commit_signers_at(self, height: Uint64) -> set[str]:
        """Return the addresses of validators whose commit signature for `height` counts."""
        ...
