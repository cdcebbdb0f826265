"""Tests for proof request construction and trusted hash resolution."""

from __future__ import annotations

import pytest
from hypothesis import given
from eth_abi import encode
from eth_abi.packed import encode_packed
from hypothesis import strategies as st

from tendermintx_operator.contract import function_selector
from tendermintx_operator.exceptions import InvalidRequestError
from tendermintx_operator.request import (
    SKIP_INPUT_LENGTH,
    STEP_INPUT_LENGTH,
    ContractHashResolver,
    FixedHashResolver,
    RequestKind,
    SkipRequest,
    StepRequest,
    build_request,
    decode_public_input,
)
from tendermintx_operator.types import Bytes32, Uint64
from tests.tendermintx_operator.helpers import MockBridgeContract

HASH = Bytes32(b"\x3c" * 32)

uint64s = st.integers(min_value=0, max_value=2**64 - 2)
hash_bytes = st.binary(min_size=32, max_size=32)


def word(value: int) -> bytes:
    """A uint64 argument as a left-padded 32-byte ABI word."""
    return value.to_bytes(32, "big")


class TestKindSelection:
    """Step versus skip is decided by the height difference alone."""

    def test_difference_of_one_is_step(self) -> None:
        """Advancing one block is a step."""
        request = build_request(Uint64(100), HASH, Uint64(101))

        assert isinstance(request, StepRequest)
        assert request.kind is RequestKind.STEP
        assert request.target_height == Uint64(101)

    def test_difference_of_two_is_skip(self) -> None:
        """Advancing two blocks is already a skip."""
        request = build_request(Uint64(100), HASH, Uint64(102))

        assert isinstance(request, SkipRequest)
        assert request.kind is RequestKind.SKIP
        assert request.target_height == Uint64(102)

    @pytest.mark.parametrize(("trusted", "target"), [(100, 100), (100, 99), (0, 0)])
    def test_non_increasing_heights_are_rejected(self, trusted: int, target: int) -> None:
        """The trusted height must be strictly below the target."""
        with pytest.raises(InvalidRequestError) as exc_info:
            build_request(Uint64(trusted), HASH, Uint64(target))

        assert exc_info.value.trusted_height == Uint64(trusted)
        assert exc_info.value.target_height == Uint64(target)


class TestPayloads:
    """Public input and call data layouts."""

    def test_step_public_input_layout(self) -> None:
        """Step input is uint64 height followed by the 32-byte hash."""
        request = build_request(Uint64(100), HASH, Uint64(101))

        assert len(request.public_input) == STEP_INPUT_LENGTH
        assert request.public_input == (100).to_bytes(8, "big") + bytes(HASH)

    def test_skip_public_input_layout(self) -> None:
        """Skip input appends the uint64 target height."""
        request = build_request(Uint64(100), HASH, Uint64(5100))

        assert len(request.public_input) == SKIP_INPUT_LENGTH
        assert request.public_input == (
            (100).to_bytes(8, "big") + bytes(HASH) + (5100).to_bytes(8, "big")
        )

    def test_step_call_data(self) -> None:
        """Step call data encodes only the trusted height."""
        request = build_request(Uint64(7), HASH, Uint64(8))
        assert request.call_data == bytes(function_selector("step(uint64)")) + word(7)

    def test_skip_call_data(self) -> None:
        """Skip call data encodes trusted and target heights."""
        request = build_request(Uint64(7), HASH, Uint64(9))
        assert request.call_data == (
            bytes(function_selector("skip(uint64,uint64)")) + word(7) + word(9)
        )

    def test_building_is_deterministic(self) -> None:
        """Identical inputs give byte-identical payloads."""
        first = build_request(Uint64(100), HASH, Uint64(4242))
        second = build_request(Uint64(100), HASH, Uint64(4242))

        assert first.public_input == second.public_input
        assert first.call_data == second.call_data

    @given(trusted=uint64s, gap=st.integers(min_value=1, max_value=10_000), seed=hash_bytes)
    def test_public_input_decodes_to_inputs(self, trusted: int, gap: int, seed: bytes) -> None:
        """Decoding the packed input recovers the heights and hash."""
        target = min(trusted + gap, 2**64 - 1)
        request = build_request(Uint64(trusted), Bytes32(seed), Uint64(target))

        decoded = decode_public_input(request.kind, request.public_input)

        assert decoded == (Uint64(trusted), Bytes32(seed), Uint64(target))

    def test_decode_rejects_wrong_length(self) -> None:
        """A step-sized input is not a valid skip input."""
        request = build_request(Uint64(1), HASH, Uint64(2))
        with pytest.raises(ValueError, match="48 bytes"):
            decode_public_input(RequestKind.SKIP, request.public_input)


class TestSolidityEncoding:
    """Payloads agree with the encodings Solidity verifiers apply."""

    @given(trusted=uint64s, gap=st.integers(min_value=2, max_value=10_000), seed=hash_bytes)
    def test_skip_matches_abi_encoders(self, trusted: int, gap: int, seed: bytes) -> None:
        """Skip input is abi.encodePacked and call data is selector plus abi.encode."""
        target = trusted + gap
        if target >= 2**64:
            target = 2**64 - 1
        if target - trusted < 2:
            return
        request = build_request(Uint64(trusted), Bytes32(seed), Uint64(target))

        assert request.public_input == encode_packed(
            ["uint64", "bytes32", "uint64"], [trusted, seed, target]
        )
        assert request.call_data == bytes(function_selector("skip(uint64,uint64)")) + encode(
            ["uint64", "uint64"], [trusted, target]
        )

    @given(trusted=uint64s, seed=hash_bytes)
    def test_step_matches_abi_encoders(self, trusted: int, seed: bytes) -> None:
        """Step input packs height and hash, and call data carries one uint64."""
        request = build_request(Uint64(trusted), Bytes32(seed), Uint64(trusted + 1))

        assert request.public_input == encode_packed(["uint64", "bytes32"], [trusted, seed])
        assert request.call_data == bytes(function_selector("step(uint64)")) + encode(
            ["uint64"], [trusted]
        )

    def test_known_selector(self) -> None:
        """Selectors are keccak-256 prefixes, matching the ERC-20 transfer selector."""
        assert function_selector("transfer(address,uint256)").hex() == "a9059cbb"


class TestResolvers:
    """Trusted hash resolution strategies."""

    @pytest.mark.asyncio
    async def test_contract_resolver_reads_contract(self) -> None:
        """Loop mode takes the hash the contract stores at the trusted height."""
        contract = MockBridgeContract(hashes={100: HASH})

        resolved = await ContractHashResolver(contract).resolve(Uint64(100))

        assert resolved == HASH
        assert contract.calls == [("header_hash_at", 100)]

    @pytest.mark.asyncio
    async def test_fixed_resolver_ignores_height(self) -> None:
        """Manual mode returns the caller's hash for any height."""
        resolver = FixedHashResolver(HASH)

        assert await resolver.resolve(Uint64(1)) == HASH
        assert await resolver.resolve(Uint64(999)) == HASH
