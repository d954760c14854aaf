"""Agents resource client."""

from typing import TYPE_CHECKING, Any

from fluidharness.exceptions import ConfigurationError
from fluidharness.logging import get_logger, log_signing_operation
from fluidharness.types.agents import AgentSummary, RegistrationResult, SearchPage
from fluidharness.types.mcp import McpCapabilities

if TYPE_CHECKING:
    from fluidharness.config import HarnessConfig
    from fluidharness.sdk import AgentHandle, AgentSDK
    from fluidharness.signers import SignerSet

logger = get_logger("agents")


class AgentsClient:
    """Client for agent creation, registration and lookup."""

    def __init__(
        self,
        sdk: "AgentSDK",
        signers: "SignerSet",
        config: "HarnessConfig",
    ) -> None:
        """
        Initialize the agents client.

        Args:
            sdk: SDK facade
            signers: Configured signing identities
            config: Harness configuration
        """
        self.sdk = sdk
        self.signers = signers
        self.config = config

    def create(self, name: str, description: str, image_uri: str) -> "AgentHandle":
        """
        Create an agent draft (off-chain).

        Args:
            name: Agent display name
            description: Agent description
            image_uri: Image URI (e.g. "ipfs://Qm...")

        Returns:
            AgentHandle to configure before registration
        """
        handle = self.sdk.create_agent(name, description, image_uri)
        logger.info("Agent object created: %s", name)
        return handle

    def configure_mcp(
        self,
        handle: "AgentHandle",
        url: str,
        version: str,
        capabilities: McpCapabilities | None = None,
    ) -> None:
        """
        Attach an MCP endpoint and any discovered capabilities.

        Capabilities are only recorded when at least one name was discovered.
        """
        handle.set_mcp(url, version, auto_fetch=False)
        logger.info("MCP endpoint configured: %s (version %s)", url, version)

        if capabilities is not None and not capabilities.is_empty:
            handle.set_mcp_capabilities(
                list(capabilities.tools),
                list(capabilities.prompts),
                list(capabilities.resources),
            )
            logger.info(
                "MCP capabilities added: %d tool(s), %d prompt(s), %d resource(s)",
                len(capabilities.tools),
                len(capabilities.prompts),
                len(capabilities.resources),
            )

    def register(self, handle: "AgentHandle") -> RegistrationResult:
        """
        Pin the agent's registration file and register it on-chain.

        Preconditions are checked before anything is sent.

        Returns:
            RegistrationResult with agent_id and agent_uri

        Raises:
            ConfigurationError: If no signer or no IPFS credential is configured
        """
        owner = self.signers.require_owner()
        if not self.config.ipfs_enabled:
            raise ConfigurationError(
                "PINATA_JWT not set - registration requires IPFS pinning"
            )
        if not self.sdk.has_ipfs:
            raise ConfigurationError("IPFS client not configured on the SDK - cannot register agent")

        log_signing_operation("register_ipfs", owner.address, handle.profile.name)
        result = handle.register_ipfs()
        logger.info("Agent registered: id=%s uri=%s", result.agent_id, result.agent_uri)
        return result

    def get(self, agent_id: str) -> AgentSummary | None:
        """Look up an agent in the indexed store (None if not indexed yet)."""
        return self.sdk.get_agent(agent_id)

    def load(self, agent_id: str) -> "AgentHandle":
        """Load a registered agent from chain and IPFS."""
        return self.sdk.load_agent(agent_id)

    def search(
        self,
        filters: dict[str, Any] | None = None,
        sort: list[str] | None = None,
        page_size: int = 10,
    ) -> SearchPage:
        """Search indexed agents."""
        return self.sdk.search_agents(filters or {}, sort, page_size)
