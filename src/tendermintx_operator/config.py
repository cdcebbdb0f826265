"""
Operator configuration.

Settings come from the environment (optionally seeded from a `.env` file) or
from a YAML file using the same upper-case keys:

    CONTRACT_ADDRESS: "0x..."
    CHAIN_ID: 5
    STEP_FUNCTION_ID: "0x..."
    SKIP_FUNCTION_ID: "0x..."
    ETHEREUM_RPC_URL: "https://..."
    TENDERMINT_RPC_URL: "https://..."
    SUCCINCT_RPC_URL: "https://..."
    SUCCINCT_API_KEY: "..."

The result is a frozen model handed to the operator at construction. Nothing
downstream reads the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

import yaml
from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator

from tendermintx_operator.exceptions import ConfigError
from tendermintx_operator.request import RequestKind
from tendermintx_operator.types import Bytes20, Bytes32, StrictBaseModel, Uint32

_SUPPORTED_OPERATOR_ENVS: list[str] = ["prod", "test"]

OPERATOR_ENV = os.environ.get("OPERATOR_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). In 'test', `.env` files are never loaded."""

if OPERATOR_ENV not in _SUPPORTED_OPERATOR_ENVS:
    raise ValueError(
        f"Invalid OPERATOR_ENV environment variable: '{OPERATOR_ENV}'. "
        f"Supported values: {_SUPPORTED_OPERATOR_ENVS}"
    )

DEFAULT_LOOP_INTERVAL_MINUTES: Final = 240.0
"""Minutes between loop cycles."""

DEFAULT_REQUEST_TIMEOUT: Final = 30.0
"""Default HTTP timeout in seconds for chain and contract reads."""

ENV_VARS: Final[dict[str, str]] = {
    "contract_address": "CONTRACT_ADDRESS",
    "chain_id": "CHAIN_ID",
    "step_function_id": "STEP_FUNCTION_ID",
    "skip_function_id": "SKIP_FUNCTION_ID",
    "ethereum_rpc_url": "ETHEREUM_RPC_URL",
    "tendermint_rpc_url": "TENDERMINT_RPC_URL",
    "succinct_rpc_url": "SUCCINCT_RPC_URL",
    "succinct_api_key": "SUCCINCT_API_KEY",
    "loop_interval_minutes": "LOOP_INTERVAL_MINUTES",
    "request_timeout": "REQUEST_TIMEOUT",
}
"""Mapping from model field to environment variable (and YAML key)."""


class OperatorConfig(StrictBaseModel):
    """
    Immutable operator configuration.

    The first four fields identify the bridge: which contract on which chain,
    and which proving circuits serve step and skip requests.
    """

    contract_address: Bytes20
    """Address of the light client contract on the destination chain."""

    chain_id: Uint32
    """Numeric id of the destination chain."""

    step_function_id: Bytes32
    """Proving network function id of the step circuit."""

    skip_function_id: Bytes32
    """Proving network function id of the skip circuit."""

    ethereum_rpc_url: str
    """JSON-RPC endpoint of the destination chain."""

    tendermint_rpc_url: str
    """RPC endpoint of the source Tendermint chain."""

    succinct_rpc_url: str
    """Base URL of the proving network API."""

    succinct_api_key: str = Field(repr=False)
    """API key for the proving network."""

    loop_interval_minutes: float = Field(default=DEFAULT_LOOP_INTERVAL_MINUTES, ge=0)
    """Minutes to sleep between loop cycles."""

    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    """HTTP timeout in seconds for outbound requests."""

    @field_validator(
        "ethereum_rpc_url", "tendermint_rpc_url", "succinct_rpc_url", "succinct_api_key"
    )
    @classmethod
    def require_non_empty(cls, v: str) -> str:
        """Reject empty endpoints and credentials."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @property
    def loop_interval_seconds(self) -> float:
        """Loop interval converted to seconds."""
        return self.loop_interval_minutes * 60

    def function_id_for(self, kind: RequestKind) -> Bytes32:
        """Return the function id of the circuit serving `kind`."""
        return self.step_function_id if kind is RequestKind.STEP else self.skip_function_id

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> OperatorConfig:
        """
        Build a config from upper-case keys, as found in the environment or YAML.

        Raises:
            ConfigError: If a required key is missing or a value is malformed.
        """
        data: dict[str, Any] = {}
        for field_name, key in ENV_VARS.items():
            value = values.get(key)
            if value is None or value == "":
                if cls.model_fields[field_name].is_required():
                    raise ConfigError(f"{key} must be set", field=key)
                continue
            data[field_name] = value

        try:
            # Environment values are strings; lax mode lets "240" become 240.0.
            return cls.model_validate(data, strict=False)
        except ValidationError as exc:
            first = exc.errors()[0]
            loc = str(first["loc"][0]) if first["loc"] else None
            key = next(
                (
                    env
                    for name, env in ENV_VARS.items()
                    if loc in (name, cls.model_fields[name].alias)
                ),
                None,
            )
            raise ConfigError(first["msg"], field=key) from exc

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        dotenv_path: Path | None = None,
    ) -> OperatorConfig:
        """
        Build a config from environment variables.

        When reading the process environment outside the test environment, a
        `.env` file is loaded first. Variables already set are not overridden.

        Args:
            environ: Mapping to read instead of `os.environ`.
            dotenv_path: Explicit `.env` path. Defaults to searching from the CWD.
        """
        if environ is None:
            if OPERATOR_ENV != "test":
                load_dotenv(dotenv_path=dotenv_path, override=False)
            environ = os.environ
        return cls.from_mapping(environ)

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> OperatorConfig:
        """
        Load a config from a YAML file with the same keys as the environment.

        Raises:
            ConfigError: If the file cannot be read or its contents are invalid.
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        # YAML parses 0x-prefixed values as integers. Restore fixed-width hex.
        for key, width in (
            ("CONTRACT_ADDRESS", Bytes20.LENGTH),
            ("STEP_FUNCTION_ID", Bytes32.LENGTH),
            ("SKIP_FUNCTION_ID", Bytes32.LENGTH),
        ):
            if isinstance(data.get(key), int):
                data[key] = f"0x{data[key]:0{width * 2}x}"
        return cls.from_mapping(data)
