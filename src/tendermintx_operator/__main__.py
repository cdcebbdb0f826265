"""
TendermintX operator CLI entry point.

Keeps a TendermintX light client contract in sync by requesting step and skip
proofs from the proving network.

Usage::

    python -m tendermintx_operator run
    python -m tendermintx_operator run --config operator.yaml --api-port 9464
    python -m tendermintx_operator manual 0x3c6a...e1 100 5100

Commands:
    run        Poll the contract and the source chain, submitting proof requests
    manual     Submit a single request from a trusted hash and two heights

Exit codes:
    0   Clean shutdown
    1   Invalid configuration, or a manual request that was not submitted
    2   Contract holds a header hash that disagrees with the source chain
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path

from tendermintx_operator.api import ApiServer, ApiServerConfig, serve_until_cancelled
from tendermintx_operator.config import OperatorConfig
from tendermintx_operator.contract import BridgeContractClient
from tendermintx_operator.exceptions import ConfigError, HeaderMismatchError
from tendermintx_operator.operator import Operator
from tendermintx_operator.proofs import ProofNetworkClient
from tendermintx_operator.target import TargetBlockSelector, ValidatorSetVerifier
from tendermintx_operator.tendermint import TendermintRpcClient
from tendermintx_operator.types import Bytes32, Uint64

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_NOT_SUBMITTED = 1
EXIT_HEADER_MISMATCH = 2

LOG_HANDLER_NAME = "tendermintx-operator"
"""Name of the root handler installed by `setup_logging`, replaced on each call."""


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        line = f"{timestamp} {levelname} {name}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure root logging for the operator with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.set_name(LOG_HANDLER_NAME)
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == LOG_HANDLER_NAME]:
        root.removeHandler(existing)
        existing.close()
    root.setLevel(level)
    root.addHandler(handler)

    # httpx logs every request at INFO; keep it out of the cycle log.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def load_config(config_path: Path | None) -> OperatorConfig:
    """Load configuration from a YAML file if given, otherwise from the environment."""
    if config_path is not None:
        return OperatorConfig.from_yaml_file(config_path)
    return OperatorConfig.from_env()


def build_operator(
    config: OperatorConfig,
    header_source: TendermintRpcClient,
    contract: BridgeContractClient,
    proof_network: ProofNetworkClient,
    *,
    interval_minutes: float | None = None,
) -> Operator:
    """Wire the concrete clients into an Operator."""
    return Operator(
        config=config,
        header_source=header_source,
        contract=contract,
        proof_network=proof_network,
        selector=TargetBlockSelector(verifier=ValidatorSetVerifier(header_source)),
        loop_interval=None if interval_minutes is None else interval_minutes * 60,
    )


def _clients(
    config: OperatorConfig,
) -> tuple[TendermintRpcClient, BridgeContractClient, ProofNetworkClient]:
    return (
        TendermintRpcClient(config.tendermint_rpc_url, timeout=config.request_timeout),
        BridgeContractClient(
            config.ethereum_rpc_url, config.contract_address, timeout=config.request_timeout
        ),
        ProofNetworkClient(config.succinct_rpc_url, config.succinct_api_key),
    )


async def run_loop(
    config: OperatorConfig,
    *,
    interval_minutes: float | None = None,
    api_port: int | None = None,
) -> None:
    """
    Run the operator loop until a signal arrives.

    When `api_port` is given, the status API runs alongside the loop and is
    shut down when the loop exits.
    """
    tendermint, contract, proof_network = _clients(config)
    async with tendermint, contract, proof_network:
        operator = build_operator(
            config, tendermint, contract, proof_network, interval_minutes=interval_minutes
        )

        if api_port is None:
            await operator.run(install_signal_handlers=True)
            return

        server = ApiServer(
            config=ApiServerConfig(port=api_port),
            outcome_getter=lambda: operator.last_outcome,
        )
        api_task = asyncio.create_task(serve_until_cancelled(server))
        try:
            await operator.run(install_signal_handlers=True)
        finally:
            api_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await api_task


async def run_manual(
    config: OperatorConfig,
    trusted_header_hash: Bytes32,
    trusted_height: Uint64,
    target_height: Uint64,
) -> str | None:
    """Submit one request from caller-supplied inputs and return its id."""
    tendermint, contract, proof_network = _clients(config)
    async with tendermint, contract, proof_network:
        operator = build_operator(config, tendermint, contract, proof_network)
        return await operator.submit_manual(trusted_header_hash, trusted_height, target_height)


def _parse_hash(value: str) -> Bytes32:
    try:
        return Bytes32(value)
    except (ValueError, TypeError) as e:
        raise argparse.ArgumentTypeError(f"invalid header hash {value!r}: {e}") from e


def _parse_height(value: str) -> Uint64:
    try:
        return Uint64(int(value, 10))
    except (ValueError, OverflowError) as e:
        raise argparse.ArgumentTypeError(f"invalid block height {value!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML config file (default: read the environment)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    parser = argparse.ArgumentParser(
        prog="tendermintx-operator",
        description="TendermintX light client operator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", parents=[common], help="Run the operator loop")
    run.add_argument(
        "--interval-minutes",
        type=float,
        default=None,
        help="Minutes between cycles (overrides LOOP_INTERVAL_MINUTES)",
    )
    run.add_argument(
        "--api-port",
        type=int,
        default=None,
        help="Serve health, status and metrics on this port (default: disabled)",
    )

    manual = commands.add_parser(
        "manual",
        parents=[common],
        help="Submit a single request",
        description=(
            "Submit one step or skip request. The trusted hash comes first, then the "
            "trusted and target heights. The older `tendermintx <trusted> <target> <hash>` "
            "invocation took the hash last."
        ),
    )
    manual.add_argument("trusted_hash", type=_parse_hash, help="Trusted header hash (hex)")
    manual.add_argument("trusted_height", type=_parse_height, help="Trusted block height")
    manual.add_argument("target_height", type=_parse_height, help="Target block height")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_CONFIG

    try:
        if args.command == "run":
            asyncio.run(
                run_loop(config, interval_minutes=args.interval_minutes, api_port=args.api_port)
            )
        else:
            request_id = asyncio.run(
                run_manual(config, args.trusted_hash, args.trusted_height, args.target_height)
            )
            if request_id is None:
                return EXIT_NOT_SUBMITTED
    except HeaderMismatchError:
        # Already logged at CRITICAL by the consistency checker.
        return EXIT_HEADER_MISMATCH
    except KeyboardInterrupt:
        logger.info("Shutting down...")

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
