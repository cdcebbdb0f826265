"""
Shared pytest fixtures for operator tests.

Provides a valid configuration and fresh mock collaborators per test.
"""

from __future__ import annotations

import pytest

from tendermintx_operator.config import OperatorConfig
from tendermintx_operator.operator import Operator
from tests.tendermintx_operator.helpers import (
    MockBridgeContract,
    MockHeaderSource,
    MockProofNetwork,
)

CONTRACT_ADDRESS = "0x" + "ab" * 20
STEP_FUNCTION_ID = "0x" + "01" * 32
SKIP_FUNCTION_ID = "0x" + "02" * 32


@pytest.fixture
def env() -> dict[str, str]:
    """Complete, valid environment for OperatorConfig."""
    return {
        "CONTRACT_ADDRESS": CONTRACT_ADDRESS,
        "CHAIN_ID": "5",
        "STEP_FUNCTION_ID": STEP_FUNCTION_ID,
        "SKIP_FUNCTION_ID": SKIP_FUNCTION_ID,
        "ETHEREUM_RPC_URL": "http://eth.test",
        "TENDERMINT_RPC_URL": "http://tendermint.test",
        "SUCCINCT_RPC_URL": "http://succinct.test/api",
        "SUCCINCT_API_KEY": "secret-key",
    }


@pytest.fixture
def config(env: dict[str, str]) -> OperatorConfig:
    """Operator configuration built from the test environment."""
    return OperatorConfig.from_env(env)


@pytest.fixture
def header_source() -> MockHeaderSource:
    """Source chain mock with its head at 101."""
    return MockHeaderSource(head=101)


@pytest.fixture
def contract() -> MockBridgeContract:
    """Contract mock synced to 100 with a skip limit of 5000."""
    return MockBridgeContract(synced=100, max_skip_value=5000)


@pytest.fixture
def proof_network() -> MockProofNetwork:
    """Proof network mock that accepts every request."""
    return MockProofNetwork()


@pytest.fixture
def operator(
    config: OperatorConfig,
    header_source: MockHeaderSource,
    contract: MockBridgeContract,
    proof_network: MockProofNetwork,
) -> Operator:
    """Operator wired to the mocks with no sleep between cycles."""
    return Operator(
        config=config,
        header_source=header_source,
        contract=contract,
        proof_network=proof_network,
        loop_interval=0,
    )
