"""
Tendermint RPC client.

Talks to a CometBFT/Tendermint node over its JSON-over-HTTP interface:

- /commit?height=H       signed header and commit signatures at H (head if omitted)
- /validators?height=H   paginated validator set at H

The header hash is taken from the commit's block id. The block id hash is the
Merkle root of the header fields, the same value the light client contract stores.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import httpx

from tendermintx_operator.exceptions import HeaderSourceError
from tendermintx_operator.types import Bytes32, Uint64

from .source import SignedHeaderInfo, Validator
from .validators import BLOCK_ID_FLAG_COMMIT

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
"""HTTP request timeout in seconds."""

VALIDATORS_PER_PAGE = 100
"""Page size for /validators. Tendermint caps this at 100."""


@dataclass(slots=True)
class TendermintRpcClient:
    """
    HeaderSource backed by a Tendermint RPC endpoint.

    The underlying `httpx.AsyncClient` is created lazily, or can be injected
    (tests pass one built on `httpx.MockTransport`).
    """

    base_url: str
    """Base URL of the RPC node, e.g. "https://rpc.celestia.example"."""

    timeout: float = DEFAULT_TIMEOUT
    """Per-request timeout in seconds."""

    client: httpx.AsyncClient | None = field(default=None, repr=False)
    """HTTP client. Created on first use when not supplied."""

    def _http(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url.rstrip("/"), timeout=self.timeout
            )
        return self.client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> TendermintRpcClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Issue a GET and unwrap the JSON-RPC `result` object.

        Raises:
            HeaderSourceError: On transport errors, HTTP errors, RPC errors,
                or responses without a `result`.
        """
        try:
            response = await self._http().get(path, params=params)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise HeaderSourceError(
                f"Tendermint RPC {path} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise HeaderSourceError(f"Tendermint RPC {path} failed: {exc}") from exc
        except ValueError as exc:
            raise HeaderSourceError(f"Tendermint RPC {path} returned invalid JSON") from exc

        if "error" in body:
            raise HeaderSourceError(f"Tendermint RPC {path} error: {body['error']}")
        result = body.get("result")
        if not isinstance(result, dict):
            raise HeaderSourceError(f"Tendermint RPC {path} response has no result")
        return result

    async def _commit(self, height: Uint64 | None) -> dict[str, Any]:
        params = None if height is None else {"height": str(height)}
        result = await self._get("/commit", params)
        try:
            return result["signed_header"]
        except KeyError as exc:
            raise HeaderSourceError("Commit response missing signed_header") from exc

    @staticmethod
    def _header_hash(signed_header: dict[str, Any]) -> Bytes32:
        try:
            return Bytes32(signed_header["commit"]["block_id"]["hash"])
        except (KeyError, TypeError, ValueError) as exc:
            raise HeaderSourceError("Commit response has no valid block id hash") from exc

    async def latest_signed_header(self) -> SignedHeaderInfo:
        """Return the height and header hash of the latest committed block."""
        signed_header = await self._commit(None)
        try:
            height = Uint64(int(signed_header["header"]["height"]))
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise HeaderSourceError("Commit response has no valid header height") from exc
        return SignedHeaderInfo(height=height, header_hash=self._header_hash(signed_header))

    async def signed_header_at(self, height: Uint64) -> Bytes32:
        """Return the header hash committed at `height`."""
        return self._header_hash(await self._commit(height))

    async def commit_signers_at(self, height: Uint64) -> set[str]:
        """Return validator addresses whose signatures commit to the block at `height`."""
        signed_header = await self._commit(height)
        try:
            signatures = signed_header["commit"]["signatures"]
        except (KeyError, TypeError) as exc:
            raise HeaderSourceError("Commit response has no signatures") from exc
        return {
            str(sig["validator_address"]).upper()
            for sig in signatures
            if sig.get("block_id_flag") == BLOCK_ID_FLAG_COMMIT and sig.get("validator_address")
        }

    async def validators_at(self, height: Uint64) -> list[Validator]:
        """
        Return the complete validator set at `height`.

        Follows pagination until `total` validators have been collected.
        """
        validators: list[Validator] = []
        page = 1
        while True:
            result = await self._get(
                "/validators",
                {"height": str(height), "page": str(page), "per_page": str(VALIDATORS_PER_PAGE)},
            )
            try:
                entries = result["validators"]
                total = int(result["total"])
                validators.extend(
                    Validator(
                        address=str(v["address"]).upper(),
                        voting_power=int(v["voting_power"]),
                    )
                    for v in entries
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise HeaderSourceError(f"Malformed validator set at height {height}") from exc

            if len(validators) >= total or not entries:
                break
            page += 1

        logger.debug("Fetched %d validators at height %d", len(validators), height)
        return validators
