"""Tests for the Tendermint RPC client."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from tendermintx_operator.exceptions import HeaderSourceError
from tendermintx_operator.tendermint import BLOCK_ID_FLAG_COMMIT, TendermintRpcClient
from tendermintx_operator.types import Bytes32, Uint64

BASE_URL = "http://tendermint.test"
BLOCK_HASH = "A1" * 32


def commit_body(height: int, signatures: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """A /commit response with the fields the client reads."""
    return {
        "jsonrpc": "2.0",
        "id": -1,
        "result": {
            "signed_header": {
                "header": {"height": str(height), "chain_id": "mocha-4"},
                "commit": {
                    "height": str(height),
                    "block_id": {"hash": BLOCK_HASH},
                    "signatures": signatures or [],
                },
            },
            "canonical": True,
        },
    }


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> TendermintRpcClient:
    """Client whose HTTP traffic goes to `handler`."""
    transport = httpx.MockTransport(handler)
    return TendermintRpcClient(
        BASE_URL, client=httpx.AsyncClient(base_url=BASE_URL, transport=transport)
    )


class TestCommit:
    """Header reads from /commit."""

    @pytest.mark.asyncio
    async def test_latest_signed_header(self) -> None:
        """Without a height the head is fetched."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=commit_body(1234))

        async with make_client(handler) as client:
            info = await client.latest_signed_header()

        assert info.height == Uint64(1234)
        assert info.header_hash == Bytes32(BLOCK_HASH)
        assert seen[0].url.path == "/commit"
        assert "height" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_signed_header_at_passes_height(self) -> None:
        """The height is sent as a query parameter."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["height"] == "50"
            return httpx.Response(200, json=commit_body(50))

        async with make_client(handler) as client:
            assert await client.signed_header_at(Uint64(50)) == Bytes32(BLOCK_HASH)

    @pytest.mark.asyncio
    async def test_commit_signers_filter_by_flag(self) -> None:
        """Only signatures for the block id count as signers."""
        signatures = [
            {"block_id_flag": BLOCK_ID_FLAG_COMMIT, "validator_address": "aa01"},
            {"block_id_flag": 1, "validator_address": ""},
            {"block_id_flag": 3, "validator_address": "AA02"},
            {"block_id_flag": BLOCK_ID_FLAG_COMMIT, "validator_address": "AA03"},
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=commit_body(7, signatures))

        async with make_client(handler) as client:
            assert await client.commit_signers_at(Uint64(7)) == {"AA01", "AA03"}


class TestValidators:
    """Validator set reads from /validators."""

    @pytest.mark.asyncio
    async def test_follows_pagination(self) -> None:
        """Pages are fetched until `total` validators are collected."""
        pages = {
            "1": [{"address": f"a{i}", "voting_power": "10"} for i in range(100)],
            "2": [{"address": "b0", "voting_power": "5"}],
        }

        def handler(request: httpx.Request) -> httpx.Response:
            page = request.url.params["page"]
            assert request.url.params["per_page"] == "100"
            return httpx.Response(
                200,
                json={"result": {"validators": pages[page], "count": "1", "total": "101"}},
            )

        async with make_client(handler) as client:
            validators = await client.validators_at(Uint64(9))

        assert len(validators) == 101
        assert validators[0].address == "A0"
        assert validators[-1].voting_power == 5

    @pytest.mark.asyncio
    async def test_malformed_set_raises(self) -> None:
        """Missing fields become HeaderSourceError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"result": {"validators": [{"address": "a"}]}})

        async with make_client(handler) as client:
            with pytest.raises(HeaderSourceError, match="Malformed validator set"):
                await client.validators_at(Uint64(9))


class TestErrors:
    """Transport and protocol failures."""

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        """Non-2xx responses raise HeaderSourceError with the status."""
        async with make_client(lambda r: httpx.Response(502)) as client:
            with pytest.raises(HeaderSourceError, match="HTTP 502"):
                await client.latest_signed_header()

    @pytest.mark.asyncio
    async def test_rpc_error_body(self) -> None:
        """A JSON-RPC error object raises HeaderSourceError."""
        body = {"jsonrpc": "2.0", "id": -1, "error": {"code": -32603, "message": "height too high"}}
        async with make_client(lambda r: httpx.Response(200, json=body)) as client:
            with pytest.raises(HeaderSourceError, match="height too high"):
                await client.signed_header_at(Uint64(10**9))

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Network failures are wrapped and chained."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(HeaderSourceError) as exc_info:
                await client.latest_signed_header()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_missing_block_hash(self) -> None:
        """A commit without a block id hash is malformed."""
        body = commit_body(5)
        del body["result"]["signed_header"]["commit"]["block_id"]
        async with make_client(lambda r: httpx.Response(200, json=body)) as client:
            with pytest.raises(HeaderSourceError, match="block id hash"):
                await client.latest_signed_header()
