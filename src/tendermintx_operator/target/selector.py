"""
Target block selection.

Given the light client's synced height, the chain head and the contract's
skip limit, pick the next height to prove. Any target in

    (current, min(head, current + max_skip)]

is acceptable to the contract. Within that window the operator prefers the
highest block a skip proof can actually be generated for: the further each
proof reaches, the fewer proofs the bridge pays for.

Search order
------------
Start at the upper bound. If the trusted validator set can no longer vouch
for that block, halve the distance toward the trusted height and try again.
The one-block step at `current + 1` needs no validator overlap, so the search
always terminates there at the latest.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol

from tendermintx_operator.tendermint import HeaderSource, Validator, is_valid_skip
from tendermintx_operator.types import Uint64

logger = logging.getLogger(__name__)


class SkipVerifier(Protocol):
    """Decides whether a skip from `trusted` to `target` can be proven."""

    async def is_verifiable(self, trusted: Uint64, target: Uint64) -> bool:
        """Return True if a skip proof from `trusted` to `target` is possible."""
        ...


@dataclass(slots=True)
class ValidatorSetVerifier:
    """
    SkipVerifier that applies the Tendermint trust rules to live validator sets.

    Every candidate in one search shares the trusted height, so the trusted set
    is fetched once and kept until a different trusted height is asked for.
    A set at a committed height never changes.
    """

    header_source: HeaderSource

    _trusted: tuple[Uint64, list[Validator]] | None = field(default=None, init=False, repr=False)

    async def _trusted_validators(self, trusted: Uint64) -> list[Validator]:
        if self._trusted is None or self._trusted[0] != trusted:
            self._trusted = (trusted, await self.header_source.validators_at(trusted))
        return self._trusted[1]

    async def is_verifiable(self, trusted: Uint64, target: Uint64) -> bool:
        """Check thresholds against the trusted set and the target set and commit."""
        trusted_validators = await self._trusted_validators(trusted)
        target_validators = await self.header_source.validators_at(target)
        signers = await self.header_source.commit_signers_at(target)
        return is_valid_skip(trusted_validators, target_validators, signers)


def target_upper_bound(current: Uint64, head: Uint64, max_skip: Uint64) -> Uint64 | None:
    """
    Return the highest height the next proof may target, or None if there is none.

    The sum `current + max_skip` is taken in unbounded integers. The chain head
    caps it, so the result always fits in a uint64.
    """
    if current >= head:
        return None
    upper = Uint64(min(int(head), int(current) + int(max_skip)))
    if upper <= current:
        return None
    return upper


def candidate_targets(current: Uint64, upper: Uint64) -> Iterator[Uint64]:
    """
    Yield candidate targets from `upper` down to `current + 1` by halving the gap.

    Every yielded value lies in `(current, upper]` and the last one is always
    `current + 1`.
    """
    candidate = upper
    while candidate > current:
        yield candidate
        # Midpoint in unbounded integers; the sum can exceed the uint64 range.
        candidate = Uint64((int(candidate) + int(current)) // 2)


@dataclass(frozen=True, slots=True)
class TargetBlockSelector:
    """
    Picks the next height to request a proof for.

    Without a verifier the selector returns the upper bound directly. This is
    useful when the proof network accepts any skip within `max_skip`.
    """

    verifier: SkipVerifier | None = None
    """Verifiability check applied to skip candidates."""

    async def select(self, current: Uint64, head: Uint64, max_skip: Uint64) -> Uint64 | None:
        """
        Return the target height for the next proof, or None if nothing is due.

        Args:
            current: Height the light client has synced to.
            head: Latest height of the source chain.
            max_skip: Largest allowed distance for a single skip.
        """
        upper = target_upper_bound(current, head, max_skip)
        if upper is None:
            return None

        step_target = current + Uint64(1)
        for candidate in candidate_targets(current, upper):
            if candidate == step_target or self.verifier is None:
                return candidate
            if await self.verifier.is_verifiable(current, candidate):
                return candidate
            logger.debug("Skip %d -> %d is not verifiable, narrowing", current, candidate)

        # candidate_targets always ends at the step target.
        return step_target
