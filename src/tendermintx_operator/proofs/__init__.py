"""Proving network submission."""

from .client import ProofNetworkClient
from .interface import ProofNetwork

__all__ = [
    "ProofNetwork",
    "ProofNetworkClient",
]
