"""Discovery client: capability and reputation search over the indexed store."""

from typing import TYPE_CHECKING, Any

from fluidharness.types.agents import AgentSummary, SearchPage

if TYPE_CHECKING:
    from fluidharness.sdk import AgentSDK


class DiscoveryClient:
    """Read-only queries across all indexed agents."""

    def __init__(self, sdk: "AgentSDK") -> None:
        self.sdk = sdk

    def mcp_tools(self) -> list[str]:
        return self.sdk.get_all_mcp_tools()

    def mcp_prompts(self) -> list[str]:
        return self.sdk.get_all_mcp_prompts()

    def mcp_resources(self) -> list[str]:
        return self.sdk.get_all_mcp_resources()

    def search_by_mcp_capabilities(
        self,
        tools: list[str] | None = None,
        prompts: list[str] | None = None,
        resources: list[str] | None = None,
        first: int = 10,
    ) -> list[AgentSummary]:
        """
        Find agents advertising the given MCP capabilities.

        Args:
            tools: Tool names the agent must advertise
            prompts: Prompt names the agent must advertise
            resources: Resource URIs the agent must advertise
            first: Maximum number of results

        Returns:
            Matching agent summaries
        """
        query: dict[str, Any] = {"first": first}
        if tools:
            query["tools"] = tools
        if prompts:
            query["prompts"] = prompts
        if resources:
            query["resources"] = resources
        return self.sdk.search_agents_by_mcp_capabilities(query)

    def search_by_reputation(
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
        return self.sdk.search_agents_by_reputation(
            agents=agents,
            tags=tags,
            reviewers=reviewers,
            capabilities=capabilities,
            skills=skills,
            tasks=tasks,
            names=names,
            min_average_score=min_average_score,
            include_revoked=include_revoked,
            page_size=page_size,
        )
