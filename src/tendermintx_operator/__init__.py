"""
TendermintX operator.

Keeps a Tendermint light client contract on an EVM chain in sync by
requesting step and skip proofs from a proving network.
"""

from .config import OperatorConfig
from .operator import CycleOutcome, CycleStatus, Operator

__all__ = [
    "CycleOutcome",
    "CycleStatus",
    "Operator",
    "OperatorConfig",
]
