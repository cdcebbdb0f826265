"""
Skip verifiability under the Tendermint light client rules.

A light client can jump from a trusted header straight to a later one only if
enough of the validators it already trusts also signed the later commit. The
circuits enforce the same two thresholds, so requesting a skip that fails them
would only produce a proof request that can never be fulfilled.
"""

from __future__ import annotations

from collections.abc import Iterable

from .source import Validator

BLOCK_ID_FLAG_COMMIT = 2
"""Commit signature flag meaning the validator voted for the block id."""


def _signed_power(validators: Iterable[Validator], signers: set[str]) -> int:
    return sum(v.voting_power for v in validators if v.address in signers)


def _total_power(validators: Iterable[Validator]) -> int:
    return sum(v.voting_power for v in validators)


def is_valid_skip(
    trusted_validators: list[Validator],
    target_validators: list[Validator],
    signers: set[str],
) -> bool:
    """
    Check whether a commit can be skipped to from a trusted validator set.

    Two conditions must hold:

    - Trust: validators from the trusted set that signed the target commit
      hold more than 1/3 of the trusted set's total voting power.
    - Quorum: the target commit carries more than 2/3 of the target set's
      own voting power.

    Args:
        trusted_validators: Validator set at the trusted height.
        target_validators: Validator set at the target height.
        signers: Addresses that signed the target commit.

    Returns:
        True if the skip is verifiable.
    """
    trusted_total = _total_power(trusted_validators)
    target_total = _total_power(target_validators)
    if trusted_total == 0 or target_total == 0:
        return False

    # Integer comparisons avoid rounding at the threshold.
    trusted_signed = _signed_power(trusted_validators, signers)
    if trusted_signed * 3 <= trusted_total:
        return False

    target_signed = _signed_power(target_validators, signers)
    return target_signed * 3 > target_total * 2
