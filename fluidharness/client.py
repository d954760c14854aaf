"""
FluidSDK harness main client.

Wraps an SDK facade together with the harness configuration and signing
identities, and exposes guarded resource clients.
"""

from typing import Any

from fluidharness.clients import AgentsClient, DiscoveryClient, FeedbackClient
from fluidharness.config import HarnessConfig
from fluidharness.logging import get_logger
from fluidharness.sdk import AgentSDK, SdkFactory
from fluidharness.signers import SignerSet, build_signers

logger = get_logger("client")


class FluidClient:
    """
    Main client used by the lifecycle and the read-only checks.

    Aggregates the resource clients. Write operations check their
    preconditions (signer, IPFS credential, distinct reviewer) before the
    SDK is touched.

    Example:
        ```python
        from fluidharness import FluidClient, HarnessConfig

        config = HarnessConfig.from_env()
        client = FluidClient.from_config(config, my_sdk_factory)

        page = client.agents.search(page_size=10)
        summary = client.feedback.reputation_summary("11155111:1555")
        ```
    """

    def __init__(self, sdk: AgentSDK, config: HarnessConfig, signers: SignerSet) -> None:
        """
        Initialize the client.

        Args:
            sdk: SDK facade implementation
            config: Harness configuration
            signers: Signing identities derived from the configuration
        """
        self.sdk = sdk
        self.config = config
        self.signers = signers

        self.agents = AgentsClient(sdk, signers, config)
        self.feedback = FeedbackClient(sdk, signers)
        self.discovery = DiscoveryClient(sdk)

    @classmethod
    def from_config(
        cls,
        config: HarnessConfig,
        sdk_factory: SdkFactory,
        signers: SignerSet | None = None,
    ) -> "FluidClient":
        """
        Build signers from the configuration and construct the SDK.

        Args:
            config: Harness configuration
            sdk_factory: Callable building an AgentSDK from (config, signers)
            signers: Pre-built signers (default: derived from config)

        Returns:
            Configured FluidClient

        Raises:
            ConfigurationError: If a configured key is malformed
        """
        signers = signers if signers is not None else build_signers(config)
        sdk = sdk_factory(config, signers)
        client = cls(sdk, config, signers)
        if client.is_read_only:
            logger.info("No PRIVATE_KEY configured - running in read-only mode")
        return client

    @classmethod
    def from_env(cls, sdk_factory: SdkFactory) -> "FluidClient":
        """Create a client from environment variables (see HarnessConfig.from_env)."""
        return cls.from_config(HarnessConfig.from_env(), sdk_factory)

    @property
    def is_read_only(self) -> bool:
        return self.signers.is_read_only or self.sdk.is_read_only

    @property
    def owner_address(self) -> str | None:
        return self.signers.owner.address if self.signers.owner else None

    @property
    def reviewer_address(self) -> str | None:
        return self.signers.reviewer.address if self.signers.reviewer else None

    def chain_id(self) -> int:
        return self.sdk.chain_id()

    def registries(self) -> dict[str, str]:
        return self.sdk.registries()

    def close(self) -> None:
        """Close the underlying SDK if it holds resources."""
        close = getattr(self.sdk, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "FluidClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
