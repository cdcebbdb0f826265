"""Submission interface of the proving network."""

from __future__ import annotations

from typing import Protocol

from tendermintx_operator.types import Bytes20, Bytes32, Uint32


class ProofNetwork(Protocol):
    """
    Protocol for submitting proof requests.

    A request names the circuit (`function_id`), its public input, and the
    contract call the network should make once the proof is ready.
    """

    async def submit(
        self,
        chain_id: Uint32,
        contract_address: Bytes20,
        call_data: bytes,
        function_id: Bytes32,
        public_input: bytes,
    ) -> str:
        """
        Submit a proof request.

        Returns:
            The request identifier assigned by the network.

        Raises:
            ProofSubmissionError: If the network did not accept the request.
        """
        ...
