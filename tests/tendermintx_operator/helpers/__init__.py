"""Test helpers for operator tests."""

from .mocks import (
    MockBridgeContract,
    MockHeaderSource,
    MockProofNetwork,
    header_hash_for,
    make_validators,
)

__all__ = [
    "MockBridgeContract",
    "MockHeaderSource",
    "MockProofNetwork",
    "header_hash_for",
    "make_validators",
]
