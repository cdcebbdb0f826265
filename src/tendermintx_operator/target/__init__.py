"""Next target block selection."""

from .selector import (
    SkipVerifier,
    TargetBlockSelector,
    ValidatorSetVerifier,
    candidate_targets,
    target_upper_bound,
)

__all__ = [
    "SkipVerifier",
    "TargetBlockSelector",
    "ValidatorSetVerifier",
    "candidate_targets",
    "target_upper_bound",
]
