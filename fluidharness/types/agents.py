"""Agent-related data models."""

from dataclasses import dataclass, field
from typing import Any

from fluidharness.exceptions import ValidationError


@dataclass(frozen=True, order=True)
class AgentId:
    """On-chain agent identity, rendered as "chainId:tokenId"."""

    chain_id: int
    token_id: int

    def __str__(self) -> str:
        return f"{self.chain_id}:{self.token_id}"

    @classmethod
    def parse(cls, text: str) -> "AgentId":
        """
        Parse an agent id string.

        Args:
            text: Identifier in the form "11155111:1555"

        Returns:
            AgentId instance

        Raises:
            ValidationError: If the identifier is malformed
        """
        chain_part, sep, token_part = text.strip().partition(":")
        if not sep:
            raise ValidationError(f"Agent id must look like 'chainId:tokenId', got {text!r}")
        try:
            chain_id = int(chain_part)
            token_id = int(token_part)
        except ValueError as e:
            raise ValidationError(f"Agent id parts must be integers, got {text!r}") from e
        if chain_id < 0 or token_id < 0:
            raise ValidationError(f"Agent id parts must be non-negative, got {text!r}")
        return cls(chain_id=chain_id, token_id=token_id)


@dataclass
class Endpoint:
    """A named protocol endpoint advertised by an agent."""

    name: str  # "MCP" or "A2A"
    url: str
    version: str
    mcp_tools: list[str] = field(default_factory=list)
    mcp_prompts: list[str] = field(default_factory=list)
    mcp_resources: list[str] = field(default_factory=list)


@dataclass
class AgentProfile:
    """Mutable pre-registration agent draft."""

    name: str
    description: str
    image: str
    active: bool = False
    endpoints: dict[str, Endpoint] = field(default_factory=dict)

    @property
    def mcp_endpoint(self) -> Endpoint | None:
        return self.endpoints.get("MCP")

    def to_registration_file(self) -> dict[str, Any]:
        """Serialize to the JSON document pinned to IPFS."""
        endpoints = []
        for endpoint in self.endpoints.values():
            entry: dict[str, Any] = {
                "name": endpoint.name,
                "endpoint": endpoint.url,
                "version": endpoint.version,
            }
            if endpoint.name == "MCP":
                entry["mcpTools"] = list(endpoint.mcp_tools)
                entry["mcpPrompts"] = list(endpoint.mcp_prompts)
                entry["mcpResources"] = list(endpoint.mcp_resources)
            endpoints.append(entry)
        return {
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "active": self.active,
            "endpoints": endpoints,
        }


@dataclass
class RegistrationResult:
    """Result of registering an agent on-chain."""

    agent_id: str | None
    agent_uri: str | None

    @property
    def cid(self) -> str | None:
        """IPFS content identifier extracted from the agent URI."""
        if not self.agent_uri:
            return None
        return self.agent_uri.removeprefix("ipfs://")


@dataclass
class AgentSummary:
    """Indexed (subgraph) view of a registered agent."""

    agent_id: str
    name: str
    description: str
    active: bool
    owners: list[str] = field(default_factory=list)
    operators: list[str] = field(default_factory=list)
    mcp: bool = False
    a2a: bool = False
    mcp_tools: list[str] = field(default_factory=list)
    mcp_prompts: list[str] = field(default_factory=list)
    mcp_resources: list[str] = field(default_factory=list)


@dataclass
class SearchPage:
    """One page of agent search results."""

    items: list[AgentSummary]
    meta: dict[str, Any] = field(default_factory=dict)

    def find(self, agent_id: str) -> AgentSummary | None:
        for item in self.items:
            if item.agent_id == agent_id:
                return item
        return None
