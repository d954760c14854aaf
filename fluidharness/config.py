"""
Harness configuration.

Resolves connection parameters and secrets from the process environment
into a validated, typed structure.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from fluidharness.exceptions import ConfigurationError, ValidationError
from fluidharness.types.agents import AgentId

DEFAULT_CHAIN_ID = 11155111  # Sepolia
DEFAULT_RPC_URL = "https://ethereum-sepolia-rpc.publicnode.com"
DEFAULT_MCP_SERVER_URL = "https://fluidmcpserver.vercel.app/"
DEFAULT_MCP_PROTOCOL_VERSION = "2024-11-05"
DEFAULT_TIMEOUT = 30.0

# Field name -> environment variable
ENV_VARS = {
    "rpc_url": "RPC_URL",
    "chain_id": "CHAIN_ID",
    "private_key": "PRIVATE_KEY",
    "feedback_private_key": "FEEDBACK_PRIVATE_KEY",
    "pinata_jwt": "PINATA_JWT",
    "test_agent_id": "TEST_AGENT_ID",
    "mcp_server_url": "MCP_SERVER_URL",
    "mcp_protocol_version": "MCP_PROTOCOL_VERSION",
    "ipfs_gateway_url": "IPFS_GATEWAY_URL",
    "min_balance_wei": "MIN_BALANCE_WEI",
    "timeout": "HARNESS_TIMEOUT",
}

_SECRET_FIELDS = {"private_key", "feedback_private_key", "pinata_jwt"}


@dataclass(frozen=True)
class HarnessConfig:
    """
    Validated harness configuration.

    Write-mode fields (private_key, feedback_private_key, pinata_jwt) are
    optional: their absence puts the harness in read-only mode rather
    than failing.

    Example:
        ```python
        from fluidharness.config import HarnessConfig

        config = HarnessConfig.from_env()
        rpc_url = config.require("rpc_url")
        ```
    """

    rpc_url: str | None = None
    chain_id: int = DEFAULT_CHAIN_ID
    private_key: str | None = None
    feedback_private_key: str | None = None
    pinata_jwt: str | None = None
    test_agent_id: AgentId | None = None
    mcp_server_url: str = DEFAULT_MCP_SERVER_URL
    mcp_protocol_version: str = DEFAULT_MCP_PROTOCOL_VERSION
    ipfs_gateway_url: str | None = None
    min_balance_wei: int = 1
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.chain_id <= 0:
            raise ConfigurationError(f"CHAIN_ID must be positive, got {self.chain_id}")
        if self.min_balance_wei < 0:
            raise ConfigurationError(
                f"MIN_BALANCE_WEI must be non-negative, got {self.min_balance_wei}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"HARNESS_TIMEOUT must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "HarnessConfig":
        """
        Build a configuration from environment variables.

        Environment variables:
            RPC_URL: JSON-RPC endpoint of the chain
            CHAIN_ID: Chain id (optional, default: 11155111)
            PRIVATE_KEY: Agent owner key (optional, enables writes)
            FEEDBACK_PRIVATE_KEY: Reviewer key (optional, enables feedback)
            PINATA_JWT: IPFS pinning credential (optional, enables registration)
            TEST_AGENT_ID: Existing agent for read-only checks (optional)
            MCP_SERVER_URL: MCP server to probe (optional)
            MCP_PROTOCOL_VERSION: MCP protocol version to advertise (optional)
            IPFS_GATEWAY_URL: Gateway used to read back pinned files (optional)
            MIN_BALANCE_WEI: Minimum wallet balance before writes (optional, default: 1)
            HARNESS_TIMEOUT: HTTP timeout in seconds (optional, default: 30)

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Validated HarnessConfig

        Raises:
            ConfigurationError: If a value is malformed
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_VARS[name])
            if value is None or not value.strip():
                return None
            return value.strip()

        kwargs: dict[str, object] = {}
        for name in ("rpc_url", "private_key", "feedback_private_key", "pinata_jwt", "ipfs_gateway_url"):
            kwargs[name] = get(name)

        for name in ("mcp_server_url", "mcp_protocol_version"):
            value = get(name)
            if value is not None:
                kwargs[name] = value

        chain_id = get("chain_id")
        if chain_id is not None:
            kwargs["chain_id"] = _parse_int("CHAIN_ID", chain_id)

        min_balance = get("min_balance_wei")
        if min_balance is not None:
            kwargs["min_balance_wei"] = _parse_int("MIN_BALANCE_WEI", min_balance)

        timeout = get("timeout")
        if timeout is not None:
            try:
                kwargs["timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(f"HARNESS_TIMEOUT must be a number, got {timeout!r}") from e

        agent_id = get("test_agent_id")
        if agent_id is not None:
            try:
                kwargs["test_agent_id"] = AgentId.parse(agent_id)
            except ValidationError as e:
                raise ConfigurationError(f"TEST_AGENT_ID is invalid: {e}") from e

        return cls(**kwargs)  # type: ignore[arg-type]

    @property
    def write_enabled(self) -> bool:
        """True when an owner key is configured."""
        return self.private_key is not None

    @property
    def ipfs_enabled(self) -> bool:
        return self.pinata_jwt is not None

    def require(self, name: str) -> Any:
        """
        Return a configuration value, failing fast when it is absent.

        Args:
            name: Field name (e.g. "rpc_url", "pinata_jwt")

        Raises:
            ConfigurationError: Naming the missing environment variable
        """
        value = getattr(self, name)
        if value is None:
            raise ConfigurationError(f"{ENV_VARS.get(name, name)} not set")
        return value

    def __repr__(self) -> str:
        parts = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in _SECRET_FIELDS and value is not None:
                value = "[REDACTED]"
            parts.append(f"{f.name}={value!r}")
        return f"HarnessConfig({', '.join(parts)})"


def _parse_int(env_name: str, value: str) -> int:
    try:
        if value.lower().startswith("0x"):
            return int(value, 16)
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{env_name} must be an integer, got {value!r}") from e
