"""Proof request construction and trusted hash resolution."""

from .builder import (
    SKIP_INPUT_LENGTH,
    STEP_INPUT_LENGTH,
    ProofRequest,
    RequestKind,
    SkipRequest,
    StepRequest,
    build_request,
    decode_public_input,
)
from .resolvers import ContractHashResolver, FixedHashResolver, TrustedHashResolver

__all__ = [
    "SKIP_INPUT_LENGTH",
    "STEP_INPUT_LENGTH",
    "ContractHashResolver",
    "FixedHashResolver",
    "ProofRequest",
    "RequestKind",
    "SkipRequest",
    "StepRequest",
    "TrustedHashResolver",
    "build_request",
    "decode_public_input",
]
