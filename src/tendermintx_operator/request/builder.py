"""
Proof request construction.

Every light client update is one of two shapes:

- Step: advance exactly one block. The circuit proves the header at
  `trusted_height + 1` from the trusted header.
- Skip: advance by more than one block, up to the contract's skip limit. The
  circuit additionally proves the trusted validator set signed the target.

Each request produces two payloads:

1. The public input, packed exactly as the on-chain verifier re-packs it:

       step: uint64 trusted_height | bytes32 trusted_header_hash                       (40 bytes)
       skip: uint64 trusted_height | bytes32 trusted_header_hash | uint64 target_height  (48 bytes)

2. The call data the network sends to the contract once the proof is ready:

       step(uint64 trusted_height)
       skip(uint64 trusted_height, uint64 target_height)

Building is pure. No I/O happens here, so the same inputs always yield
byte-identical payloads.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from eth_abi.packed import encode_packed

from tendermintx_operator.contract import SKIP_SIGNATURE, STEP_SIGNATURE, encode_update_call
from tendermintx_operator.exceptions import InvalidRequestError
from tendermintx_operator.types import Bytes32, StrictBaseModel, Uint64

STEP_INPUT_LENGTH = 8 + 32
"""Byte length of a packed step public input."""

SKIP_INPUT_LENGTH = 8 + 32 + 8
"""Byte length of a packed skip public input."""


class RequestKind(str, Enum):
    """The two proof request shapes."""

    STEP = "step"
    SKIP = "skip"


class StepRequest(StrictBaseModel):
    """A request to advance the light client by exactly one block."""

    kind: Literal[RequestKind.STEP] = RequestKind.STEP

    trusted_height: Uint64
    """Height the light client already trusts."""

    trusted_header_hash: Bytes32
    """Header hash at `trusted_height`."""

    @property
    def target_height(self) -> Uint64:
        """The height this proof certifies."""
        return self.trusted_height + Uint64(1)

    @property
    def public_input(self) -> bytes:
        """Packed `(trusted_height, trusted_header_hash)`."""
        return encode_packed(
            ["uint64", "bytes32"], [int(self.trusted_height), bytes(self.trusted_header_hash)]
        )

    @property
    def call_data(self) -> bytes:
        """ABI-encoded `step(trusted_height)`."""
        return encode_update_call(STEP_SIGNATURE, self.trusted_height)


class SkipRequest(StrictBaseModel):
    """A request to advance the light client by more than one block."""

    kind: Literal[RequestKind.SKIP] = RequestKind.SKIP

    trusted_height: Uint64
    """Height the light client already trusts."""

    trusted_header_hash: Bytes32
    """Header hash at `trusted_height`."""

    target_height: Uint64
    """The height this proof certifies."""

    @property
    def public_input(self) -> bytes:
        """Packed `(trusted_height, trusted_header_hash, target_height)`."""
        return encode_packed(
            ["uint64", "bytes32", "uint64"],
            [int(self.trusted_height), bytes(self.trusted_header_hash), int(self.target_height)],
        )

    @property
    def call_data(self) -> bytes:
        """ABI-encoded `skip(trusted_height, target_height)`."""
        return encode_update_call(SKIP_SIGNATURE, self.trusted_height, self.target_height)


ProofRequest = StepRequest | SkipRequest
"""Either request shape."""


def build_request(
    trusted_height: Uint64,
    trusted_header_hash: Bytes32,
    target_height: Uint64,
) -> ProofRequest:
    """
    Build the proof request that moves the light client to `target_height`.

    A difference of exactly one selects a step. Anything larger selects a skip.

    Args:
        trusted_height: Height the light client already trusts.
        trusted_header_hash: Header hash at `trusted_height`, already resolved.
        target_height: Height to certify.

    Returns:
        A StepRequest or SkipRequest.

    Raises:
        InvalidRequestError: If `trusted_height >= target_height`.
    """
    if trusted_height >= target_height:
        raise InvalidRequestError(trusted_height, target_height)

    if target_height - trusted_height == Uint64(1):
        return StepRequest(trusted_height=trusted_height, trusted_header_hash=trusted_header_hash)

    return SkipRequest(
        trusted_height=trusted_height,
        trusted_header_hash=trusted_header_hash,
        target_height=target_height,
    )


def decode_public_input(kind: RequestKind, data: bytes) -> tuple[Uint64, Bytes32, Uint64]:
    """
    Unpack a public input back into `(trusted_height, trusted_header_hash, target_height)`.

    For a step the target is implied as `trusted_height + 1`.

    Raises:
        ValueError: If `data` has the wrong length for `kind`.
    """
    expected = STEP_INPUT_LENGTH if kind is RequestKind.STEP else SKIP_INPUT_LENGTH
    if len(data) != expected:
        raise ValueError(f"{kind.value} public input must be {expected} bytes, got {len(data)}")

    trusted_height = Uint64(int.from_bytes(data[:8], "big"))
    trusted_header_hash = Bytes32(data[8:40])
    if kind is RequestKind.STEP:
        return trusted_height, trusted_header_hash, trusted_height + Uint64(1)
    return trusted_height, trusted_header_hash, Uint64(int.from_bytes(data[40:48], "big"))
