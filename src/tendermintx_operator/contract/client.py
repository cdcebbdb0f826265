"""
Bridge contract client over web3.

Reads the TendermintX contract with view calls against the latest block:

- latestBlock()                     -> uint64
- blockHeightToHeaderHash(uint64)   -> bytes32
- SKIP_MAX()                        -> uint64
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from types import TracebackType
from typing import TypeVar

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.contract import AsyncContract
from web3.exceptions import Web3Exception

from tendermintx_operator.exceptions import ContractCallError
from tendermintx_operator.types import Bytes20, Bytes32, Uint64

from .abi import LIGHT_CLIENT_ABI

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
"""Request timeout in seconds."""

T = TypeVar("T")


@dataclass(slots=True)
class BridgeContractClient:
    """BridgeContract backed by an Ethereum JSON-RPC endpoint."""

    rpc_url: str
    """Ethereum JSON-RPC URL."""

    address: Bytes20
    """Address of the deployed light client contract."""

    timeout: float = DEFAULT_TIMEOUT
    """Per-request timeout in seconds."""

    session: aiohttp.ClientSession | None = field(default=None, repr=False)
    """HTTP session handed to the web3 provider. Created on first use when not supplied."""

    _contract: AsyncContract | None = field(default=None, init=False, repr=False)

    async def _light_client(self) -> AsyncContract:
        if self._contract is None:
            if self.session is None:
                self.session = aiohttp.ClientSession()
            provider = AsyncHTTPProvider(
                self.rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=self.timeout)},
                exception_retry_configuration=None,
            )
            await provider.cache_async_session(self.session)
            w3 = AsyncWeb3(provider)
            self._contract = w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(self.address.to_0x_hex()),
                abi=LIGHT_CLIENT_ABI,
            )
        return self._contract

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session is not None:
            await self.session.close()
            self.session = None
        self._contract = None

    async def __aenter__(self) -> BridgeContractClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _view(self, context: str, call: Awaitable[T]) -> T:
        """
        Await a view call, mapping every failure to ContractCallError.

        Raises:
            ContractCallError: On transport errors, reverts, RPC errors or undecodable results.
        """
        try:
            return await call
        except (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise ContractCallError(f"{context}: {exc}") from exc

    async def synced_height(self) -> Uint64:
        """Return the contract's `latestBlock`."""
        contract = await self._light_client()
        value = await self._view("latestBlock", contract.functions.latestBlock().call())
        return Uint64(value)

    async def header_hash_at(self, height: Uint64) -> Bytes32:
        """Return `blockHeightToHeaderHash(height)`."""
        contract = await self._light_client()
        call = contract.functions.blockHeightToHeaderHash(int(height)).call()
        return Bytes32(await self._view(f"blockHeightToHeaderHash({height})", call))

    async def max_skip(self) -> Uint64:
        """Return the contract's `SKIP_MAX`."""
        contract = await self._light_client()
        value = await self._view("SKIP_MAX", contract.functions.SKIP_MAX().call())
        logger.debug("Contract SKIP_MAX is %d", value)
        return Uint64(value)
