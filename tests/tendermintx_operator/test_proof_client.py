"""Tests for the proving network client."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from tendermintx_operator.exceptions import ProofSubmissionError
from tendermintx_operator.proofs import ProofNetworkClient
from tendermintx_operator.types import Bytes20, Bytes32, Uint32

BASE_URL = "http://succinct.test/api"


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> ProofNetworkClient:
    """Client whose HTTP traffic goes to `handler`."""
    return ProofNetworkClient(
        BASE_URL, "api-key", client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


async def submit(client: ProofNetworkClient) -> str:
    """Submit a fixed request."""
    return await client.submit(
        chain_id=Uint32(5),
        contract_address=Bytes20(b"\xab" * 20),
        call_data=b"\x01\x02",
        function_id=Bytes32(b"\x03" * 32),
        public_input=b"\x04\x05",
    )


class TestSubmit:
    """POST /request/new."""

    @pytest.mark.asyncio
    async def test_posts_camel_cased_body_with_bearer_key(self) -> None:
        """The body uses camel-cased keys and 0x hex values."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"request_id": "abc-123"})

        async with make_client(handler) as client:
            assert await submit(client) == "abc-123"

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/request/new"
        assert request.headers["Authorization"] == "Bearer api-key"
        assert json.loads(request.content) == {
            "chainId": 5,
            "to": "0x" + "ab" * 20,
            "data": "0x0102",
            "functionId": "0x" + "03" * 32,
            "input": "0x0405",
        }

    @pytest.mark.asyncio
    async def test_rejection_carries_status_code(self) -> None:
        """Non-2xx responses raise with the HTTP status attached."""
        async with make_client(lambda r: httpx.Response(401, text="bad key")) as client:
            with pytest.raises(ProofSubmissionError) as exc_info:
                await submit(client)

        assert exc_info.value.status_code == 401
        assert "bad key" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_request_id(self) -> None:
        """A success response without an id is still a failure."""
        async with make_client(lambda r: httpx.Response(200, json={"status": "ok"})) as client:
            with pytest.raises(ProofSubmissionError, match="no request_id"):
                await submit(client)

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self) -> None:
        """Transport timeouts are transient submission failures."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(ProofSubmissionError, match="request failed"):
                await submit(client)

    def test_api_key_hidden_from_repr(self) -> None:
        """The key never appears in the client's repr."""
        assert "api-key" not in repr(ProofNetworkClient(BASE_URL, "api-key"))
