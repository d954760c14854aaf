"""
FluidSDK facade.

The harness never talks to contracts, IPFS or the subgraph directly. It
drives an SDK through this abstract surface, so any implementation (a real
FluidSDK binding or the in-memory one in fluidharness.testing) can be
plugged in through an SdkFactory.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from fluidharness.types.agents import AgentProfile, AgentSummary, RegistrationResult, SearchPage
from fluidharness.types.feedback import Feedback, FeedbackDraft, ReputationSummary

if TYPE_CHECKING:
    from fluidharness.config import HarnessConfig
    from fluidharness.signers import Signer, SignerSet


class AgentHandle(ABC):
    """An agent draft (before registration) or a loaded agent (after)."""

    @property
    @abstractmethod
    def profile(self) -> AgentProfile:
        """Current profile snapshot."""

    @property
    @abstractmethod
    def agent_id(self) -> str | None:
        """Agent id once registered, else None."""

    @abstractmethod
    def set_mcp(self, url: str, version: str, auto_fetch: bool = False) -> None:
        """Attach an MCP endpoint."""

    @abstractmethod
    def set_a2a(self, url: str, version: str, auto_fetch: bool = False) -> None:
        """Attach an A2A endpoint."""

    @abstractmethod
    def set_active(self, active: bool) -> None:
        """Mark the agent active or inactive."""

    @abstractmethod
    def set_mcp_capabilities(
        self,
        tools: list[str],
        prompts: list[str],
        resources: list[str],
    ) -> None:
        """Record discovered MCP capability names on the MCP endpoint."""

    @abstractmethod
    def register_ipfs(self) -> RegistrationResult:
        """Pin the registration file to IPFS and register it on-chain."""


class AgentSDK(ABC):
    """Abstract FluidSDK surface consumed by the harness."""

    @property
    @abstractmethod
    def is_read_only(self) -> bool:
        """True when the SDK has no signer."""

    @property
    @abstractmethod
    def has_ipfs(self) -> bool:
        """True when an IPFS pinning client is configured."""

    @abstractmethod
    def chain_id(self) -> int:
        """Resolve the chain id of the connected network."""

    @abstractmethod
    def registries(self) -> dict[str, str]:
        """Registry contract addresses keyed by kind (IDENTITY, REPUTATION, ...)."""

    # Agents

    @abstractmethod
    def create_agent(self, name: str, description: str, image_uri: str) -> AgentHandle:
        """Create an agent draft in memory."""

    @abstractmethod
    def load_agent(self, agent_id: str) -> AgentHandle:
        """Load a registered agent from chain and IPFS."""

    @abstractmethod
    def get_agent(self, agent_id: str) -> AgentSummary | None:
        """Look up an agent in the indexed store. None when not (yet) indexed."""

    @abstractmethod
    def search_agents(
        self,
        filters: dict[str, Any] | None = None,
        sort: list[str] | None = None,
        page_size: int = 10,
    ) -> SearchPage:
        """Search indexed agents."""

    @abstractmethod
    def search_agents_by_reputation(
        self,
        agents: list[str] | None = None,
        tags: list[str] | None = None,
        reviewers: list[str] | None = None,
        capabilities: list[str] | None = None,
        skills: list[str] | None = None,
        tasks: list[str] | None = None,
        names: list[str] | None = None,
        min_average_score: float | None = None,
        include_revoked: bool = False,
        page_size: int = 10,
    ) -> SearchPage:
        """Search agents by aggregated feedback."""

    # Feedback

    @abstractmethod
    def prepare_feedback(
        self,
        agent_id: str,
        score: int,
        tags: list[str] | None = None,
        text: str | None = None,
        capability: str | None = None,
        name: str | None = None,
        skill: str | None = None,
        task: str | None = None,
        context: dict[str, Any] | None = None,
        proof_of_payment: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> FeedbackDraft:
        """
        Build an unsigned feedback draft.

        Scores outside 1-5 and more than three tags are rejected, never
        clamped. Adapters translate the underlying SDK's rejection into
        ValidationError. The lifecycle treats ValidationError as a
        recoverable rejection and any other HarnessError as a failed step.

        Raises:
            ValidationError: If the score or tags are rejected
        """

    @abstractmethod
    def give_feedback(
        self,
        agent_id: str,
        draft: FeedbackDraft,
        auth_token: str | None = None,
        signer: "Signer | None" = None,
    ) -> Feedback:
        """Submit feedback on-chain, optionally with a signer other than the SDK's own."""

    @abstractmethod
    def get_feedback(self, agent_id: str, reviewer: str, index: int) -> Feedback:
        """Fetch a single feedback record."""

    @abstractmethod
    def search_feedback(
        self,
        agent_id: str,
        tags: list[str] | None = None,
        capabilities: list[str] | None = None,
        skills: list[str] | None = None,
        min_score: int | None = None,
        max_score: int | None = None,
    ) -> list[Feedback]:
        """Search indexed feedback for an agent."""

    @abstractmethod
    def get_reputation_summary(self, agent_id: str, tag: str | None = None) -> ReputationSummary:
        """Aggregate feedback count and average score."""

    # MCP discovery

    @abstractmethod
    def get_all_mcp_tools(self) -> list[str]:
        """All distinct MCP tool names advertised by indexed agents."""

    @abstractmethod
    def get_all_mcp_prompts(self) -> list[str]:
        """All distinct MCP prompt names advertised by indexed agents."""

    @abstractmethod
    def get_all_mcp_resources(self) -> list[str]:
        """All distinct MCP resource URIs advertised by indexed agents."""

    @abstractmethod
    def search_agents_by_mcp_capabilities(self, filter: dict[str, Any]) -> list[AgentSummary]:
        """Search indexed agents by MCP tools/prompts/resources."""


SdkFactory = Callable[["HarnessConfig", "SignerSet"], AgentSDK]
