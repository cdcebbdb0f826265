"""
Operator loop and manual submission.

Ties the header source, the contract and the proving network together.
"""

from .service import (
    REQUEST_ID_END,
    REQUEST_ID_START,
    CycleOutcome,
    CycleStatus,
    Operator,
    frame_request_id,
)

__all__ = [
    "REQUEST_ID_END",
    "REQUEST_ID_START",
    "CycleOutcome",
    "CycleStatus",
    "Operator",
    "frame_request_id",
]
