"""
Exception hierarchy for the operator.

Errors fall into four families, and the family decides what the loop does:

- Fatal: the bridge state is provably wrong. The loop stops and the process exits.
- Configuration: settings are missing or malformed. Startup fails before any cycle.
- Caller: a request was asked for with impossible heights. Nothing is submitted.
- Transient: a network read or submission failed. The cycle is abandoned and
  the next one starts from fresh contract state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tendermintx_operator.types import Bytes32, Uint64


class OperatorError(Exception):
    """
    Base exception for all operator errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class OperatorFatalError(OperatorError):
    """Base class for errors that must stop the operator."""


class HeaderMismatchError(OperatorFatalError):
    """
    Raised when the contract's stored header hash disagrees with the source chain.

    A previously accepted proof encoded the wrong header (most plausibly a bad
    genesis entry). Extending the light client from this base would build on
    an invalid chain, so this is never retried.

    Attributes:
        height: The height at which the hashes were compared.
        chain_hash: Header hash reported by the source chain.
        contract_hash: Header hash stored in the bridge contract.
    """

    def __init__(self, height: Uint64, chain_hash: Bytes32, contract_hash: Bytes32) -> None:
        self.height = height
        self.chain_hash = chain_hash
        self.contract_hash = contract_hash
        super().__init__(
            f"Contract header hash does not match the chain at block {height}: "
            f"chain=0x{chain_hash.hex()} contract=0x{contract_hash.hex()}"
        )


class ConfigError(OperatorError):
    """
    Raised when required settings are missing or malformed.

    Attributes:
        field: The offending setting, if a single one is to blame.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message if field is None else f"{field}: {message}")


class InvalidRequestError(OperatorError):
    """
    Raised when a proof request is built with `trusted_height >= target_height`.

    This is a usage error, not a network fault.

    Attributes:
        trusted_height: The height the proof starts from.
        target_height: The height the proof would certify.
    """

    def __init__(self, trusted_height: Uint64, target_height: Uint64) -> None:
        self.trusted_height = trusted_height
        self.target_height = target_height
        super().__init__(
            f"Trusted height {trusted_height} must be below target height {target_height}"
        )


class TransientError(OperatorError):
    """Base class for failures the next cycle is expected to recover from."""


class HeaderSourceError(TransientError):
    """Raised when the source chain RPC fails or returns a malformed response."""


class ContractCallError(TransientError):
    """Raised when a read against the bridge contract fails."""


class ProofSubmissionError(TransientError):
    """
    Raised when the proof network rejects or fails to accept a request.

    Attributes:
        status_code: HTTP status returned by the proof network, if any.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
