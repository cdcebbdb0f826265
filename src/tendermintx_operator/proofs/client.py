"""
Proving network client.

Submits platform requests to the succinct proving API:

    POST {base_url}/request/new
    Authorization: Bearer {api_key}

    {"chainId": 5, "to": "0x...", "data": "0x...", "functionId": "0x...", "input": "0x..."}

The response carries the request id used to track the proof downstream.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import TracebackType

import httpx

from tendermintx_operator.exceptions import ProofSubmissionError
from tendermintx_operator.types import Bytes20, Bytes32, CamelModel, Uint32

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
"""HTTP request timeout in seconds. Request intake can be slow under load."""

NEW_REQUEST_ENDPOINT = "/request/new"
"""API endpoint for submitting a platform request."""


class PlatformRequest(CamelModel):
    """JSON body of a platform request, serialized with camel-cased keys."""

    chain_id: int
    to: str
    data: str
    function_id: str
    input: str


@dataclass(slots=True)
class ProofNetworkClient:
    """ProofNetwork backed by the succinct platform HTTP API."""

    base_url: str
    """Base URL of the proving API."""

    api_key: str = field(repr=False)
    """Bearer token for the proving API."""

    timeout: float = DEFAULT_TIMEOUT
    """Per-request timeout in seconds."""

    client: httpx.AsyncClient | None = field(default=None, repr=False)
    """HTTP client. Created on first use when not supplied."""

    def _http(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout)
        return self.client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> ProofNetworkClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def submit(
        self,
        chain_id: Uint32,
        contract_address: Bytes20,
        call_data: bytes,
        function_id: Bytes32,
        public_input: bytes,
    ) -> str:
        """
        Submit a platform request and return its id.

        Raises:
            ProofSubmissionError: On transport errors, non-2xx responses,
                or a response without a request id.
        """
        request = PlatformRequest(
            chain_id=int(chain_id),
            to=contract_address.to_0x_hex(),
            data="0x" + call_data.hex(),
            function_id=function_id.to_0x_hex(),
            input="0x" + public_input.hex(),
        )
        url = f"{self.base_url.rstrip('/')}{NEW_REQUEST_ENDPOINT}"
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = await self._http().post(
                url, json=request.model_dump(by_alias=True), headers=headers
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProofSubmissionError(
                f"Proof network returned HTTP {exc.response.status_code}: "
                f"{exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProofSubmissionError(f"Proof network request failed: {exc}") from exc
        except ValueError as exc:
            raise ProofSubmissionError("Proof network returned invalid JSON") from exc

        request_id = body.get("request_id") if isinstance(body, dict) else None
        if not isinstance(request_id, str) or not request_id:
            raise ProofSubmissionError(f"Proof network response has no request_id: {body!r}")

        logger.debug("Proof network accepted request %s", request_id)
        return request_id
