"""
Operator service that keeps the light client in sync.

The Operator Problem
--------------------
The light client contract only advances when someone hands it a proof. The
operator is that someone: it watches the source chain, decides what to prove
next, and asks the proving network for it.

How It Works
------------
Each cycle runs strictly in sequence:

1. Read the contract's synced height and check its stored header hash
   against the source chain (fatal on mismatch)
2. Read the chain head and the contract's skip limit, pick a target
3. Resolve the trusted header hash from the contract and build the request
4. Submit the request to the proving network
5. Sleep, then start over

Nothing is carried between cycles. A failed read or submission abandons the
cycle, and the next one re-derives everything from contract state. That makes
a failed submission retry itself implicitly, and lets a restarted operator
resume from the contract alone.

Manual mode skips steps 1 and 2: the caller supplies the trusted hash and both
heights, and only build and submit run.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tendermintx_operator import metrics
from tendermintx_operator.config import OperatorConfig
from tendermintx_operator.consistency import ConsistencyChecker
from tendermintx_operator.contract import BridgeContract
from tendermintx_operator.exceptions import OperatorFatalError, TransientError
from tendermintx_operator.proofs import ProofNetwork
from tendermintx_operator.request import (
    ContractHashResolver,
    FixedHashResolver,
    ProofRequest,
    RequestKind,
    TrustedHashResolver,
    build_request,
)
from tendermintx_operator.target import TargetBlockSelector
from tendermintx_operator.tendermint import HeaderSource
from tendermintx_operator.types import Bytes32, Uint64

logger = logging.getLogger(__name__)

REQUEST_ID_START = "request____start"
"""Marker written immediately before a submitted request id."""

REQUEST_ID_END = "request____end"
"""Marker written immediately after a submitted request id."""


def frame_request_id(request_id: str) -> str:
    """
    Wrap a request id in the sentinel markers.

    External tooling greps log output for this exact framing, so the format
    must not change.
    """
    return f"{REQUEST_ID_START}{request_id}{REQUEST_ID_END}"


class CycleStatus(str, Enum):
    """How a loop cycle ended."""

    SUBMITTED = "submitted"
    NOOP = "noop"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CycleOutcome:
    """Summary of one loop cycle, kept for status reporting."""

    status: CycleStatus
    current_height: Uint64 | None = None
    target_height: Uint64 | None = None
    kind: RequestKind | None = None
    request_id: str | None = None
    error: str | None = None
    finished_at: float = field(default_factory=time.time)

    def to_json(self) -> dict[str, Any]:
        """Render the outcome as a JSON-compatible dict."""
        return {
            "status": self.status.value,
            "currentHeight": None if self.current_height is None else int(self.current_height),
            "targetHeight": None if self.target_height is None else int(self.target_height),
            "kind": None if self.kind is None else self.kind.value,
            "requestId": self.request_id,
            "error": self.error,
            "finishedAt": self.finished_at,
        }


@dataclass(slots=True)
class Operator:
    """
    Drives proof requests for one bridge contract.

    One instance serves one contract and chain id. Loop mode (`run`) and
    manual mode (`submit_manual`) are alternative entry points and are never
    used concurrently.
    """

    config: OperatorConfig
    """Bridge identity and endpoints."""

    header_source: HeaderSource
    """Source chain reader."""

    contract: BridgeContract
    """Light client contract reader."""

    proof_network: ProofNetwork
    """Proving network submitter."""

    selector: TargetBlockSelector = field(default_factory=TargetBlockSelector)
    """Target height policy."""

    loop_interval: float | None = None
    """Seconds between cycles. Defaults to the configured interval."""

    last_outcome: CycleOutcome | None = field(default=None, init=False)
    """Outcome of the most recent loop cycle."""

    _shutdown: asyncio.Event = field(default_factory=asyncio.Event, init=False, repr=False)
    """Event signaling shutdown request."""

    _running: bool = field(default=False, init=False, repr=False)
    """Whether the loop is running."""

    @property
    def interval_seconds(self) -> float:
        """Effective sleep between cycles in seconds."""
        if self.loop_interval is not None:
            return self.loop_interval
        return self.config.loop_interval_seconds

    @property
    def consistency(self) -> ConsistencyChecker:
        """Checker bound to this operator's collaborators."""
        return ConsistencyChecker(header_source=self.header_source, contract=self.contract)

    # -------------------------------------------------------------------------
    # Loop mode
    # -------------------------------------------------------------------------

    async def run(
        self,
        *,
        max_cycles: int | None = None,
        install_signal_handlers: bool = False,
    ) -> None:
        """
        Run cycles until stopped.

        Returns when `stop()` is called, a signal arrives, or `max_cycles`
        cycles have completed.

        Raises:
            OperatorFatalError: On a header mismatch. The loop does not continue.
        """
        if install_signal_handlers:
            self._install_signal_handlers()

        self._running = True
        completed = 0
        logger.info(
            "Operator started for contract %s on chain %d (interval %.0fs)",
            self.config.contract_address.to_0x_hex(),
            self.config.chain_id,
            self.interval_seconds,
        )
        try:
            while not self._shutdown.is_set():
                await self.run_once()
                completed += 1
                if max_cycles is not None and completed >= max_cycles:
                    break
                await self._sleep()
        finally:
            self._running = False
            logger.info("Operator stopped after %d cycles", completed)

    async def run_once(self) -> CycleOutcome:
        """
        Perform one check, select, build, submit cycle.

        Transient failures are logged and reported as a FAILED outcome.

        Raises:
            OperatorFatalError: On a header mismatch.
        """
        with metrics.cycle_duration.time():
            outcome = await self._cycle()

        metrics.cycles.labels(status=outcome.status.value).inc()
        self.last_outcome = outcome
        return outcome

    async def _cycle(self) -> CycleOutcome:
        stage = "consistency"
        current: Uint64 | None = None
        target: Uint64 | None = None
        kind: RequestKind | None = None
        try:
            current = await self.contract.synced_height()
            metrics.synced_height.set(int(current))

            # Consistency check for the headers. This should only trigger if an
            # invalid header, typically the genesis header, was pushed to the contract.
            await self.consistency.check(current)

            stage = "select"
            head = (await self.header_source.latest_signed_header()).height
            metrics.chain_head_height.set(int(head))
            max_skip = await self.contract.max_skip()

            target = await self.selector.select(current, head, max_skip)
            logger.info("Current block: %d", current)
            if target is None:
                logger.info("Light client is at the chain head (%d), nothing to request", head)
                return CycleOutcome(status=CycleStatus.NOOP, current_height=current)
            logger.info("Target block: %d", target)

            stage = "build"
            request = await self._build(current, target, ContractHashResolver(self.contract))
            kind = request.kind

            stage = "submit"
            request_id = await self._submit(request)
            logger.info("%s request submitted: %s", kind.value.capitalize(), request_id)
            return CycleOutcome(
                status=CycleStatus.SUBMITTED,
                current_height=current,
                target_height=target,
                kind=kind,
                request_id=request_id,
            )

        except OperatorFatalError:
            raise
        except TransientError as e:
            label = f"{kind.value.capitalize()} request" if kind is not None else "Cycle"
            logger.error("%s failed during %s: %s", label, stage, e)
            error = f"{type(e).__name__}: {e}"
        except Exception as e:
            # Unknown failures do not end the loop either. The next cycle
            # starts from fresh contract state.
            logger.exception("Unexpected error during %s", stage)
            error = f"{type(e).__name__}: {e}"

        metrics.request_failures.labels(stage=stage).inc()
        return CycleOutcome(
            status=CycleStatus.FAILED,
            current_height=current,
            target_height=target,
            kind=kind,
            error=error,
        )

    # -------------------------------------------------------------------------
    # Manual mode
    # -------------------------------------------------------------------------

    async def submit_manual(
        self,
        trusted_header_hash: Bytes32,
        trusted_height: Uint64,
        target_height: Uint64,
    ) -> str | None:
        """
        Submit a single request from caller-supplied inputs.

        No contract or chain reads happen: the consistency check and target
        selection are skipped entirely. Invalid heights and submission
        failures are logged; nothing is raised and nothing is retried.

        Returns:
            The request id on success, otherwise None.
        """
        if trusted_height >= target_height:
            logger.error("Invalid block input")
            logger.error("Trusted block: %d", trusted_height)
            logger.error("Target block: %d", target_height)
            logger.error("Trusted hash: 0x%s", trusted_header_hash.hex())
            return None

        logger.info("Trusted block: %d", trusted_height)
        logger.info("Target block: %d", target_height)

        resolver = FixedHashResolver(trusted_header_hash)
        request = await self._build(trusted_height, target_height, resolver)
        label = request.kind.value.capitalize()
        try:
            request_id = await self._submit(request)
        except TransientError as e:
            logger.error("%s request failed: %s", label, e)
            return None

        logger.info("%s request submitted: %s", label, request_id)
        return request_id

    # -------------------------------------------------------------------------
    # Shared steps
    # -------------------------------------------------------------------------

    async def _build(
        self,
        trusted_height: Uint64,
        target_height: Uint64,
        resolver: TrustedHashResolver,
    ) -> ProofRequest:
        """Resolve the trusted hash and build the request for `target_height`."""
        trusted_header_hash = await resolver.resolve(trusted_height)
        return build_request(trusted_height, trusted_header_hash, target_height)

    async def _submit(self, request: ProofRequest) -> str:
        """
        Send a built request to the proving network.

        Raises:
            ProofSubmissionError: If the network rejects the request.
        """
        request_id = await self.proof_network.submit(
            chain_id=self.config.chain_id,
            contract_address=self.config.contract_address,
            call_data=request.call_data,
            function_id=self.config.function_id_for(request.kind),
            public_input=request.public_input,
        )
        metrics.requests_submitted.labels(kind=request.kind.value).inc()
        logger.info(frame_request_id(request_id))
        return request_id

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def _sleep(self) -> None:
        """
        Wait out the loop interval, waking early if shutdown is requested.

        The sleep is a wait on the shutdown event, so `stop()` interrupts it
        instead of waiting for the full interval.
        """
        try:
            await asyncio.wait_for(self._shutdown.wait(), timeout=self.interval_seconds)
        except TimeoutError:
            pass

    def _install_signal_handlers(self) -> None:
        """
        Install signal handlers for graceful shutdown.

        Handles SIGINT (Ctrl+C) and SIGTERM (process termination).

        Silently ignores errors if handlers cannot be installed.
        This happens in non-main threads or embedded contexts.
        """
        try:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self._shutdown.set)
        except (ValueError, RuntimeError, NotImplementedError):
            # Cannot add handlers outside main thread or on this platform.
            pass

    def stop(self) -> None:
        """
        Request graceful shutdown.

        The loop exits at the next cycle boundary; a pending sleep ends immediately.
        """
        self._shutdown.set()

    @property
    def is_running(self) -> bool:
        """Check if the loop is currently running."""
        return self._running
