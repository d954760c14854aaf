"""
Read-only SDK checks.

Exercise the query surface of the SDK without sending any transaction:
chain and registry info, agent search, lookup of a known test agent,
reputation and feedback reads, and MCP capability discovery across the
indexed store. Every check is advisory.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fluidharness.logging import get_logger
from fluidharness.verification import CheckResult, run_check

if TYPE_CHECKING:
    from fluidharness.client import FluidClient

logger = get_logger("checks")


@dataclass
class ChecksReport:
    """Ordered results of a check suite."""

    results: list[CheckResult[Any]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    def add(self, result: CheckResult[Any]) -> CheckResult[Any]:
        self.results.append(result)
        return result

    def skip(self, name: str, reason: str) -> None:
        logger.info("Skipping %s: %s", name, reason)
        self.skipped.append(name)

    def get(self, name: str) -> CheckResult[Any] | None:
        for result in self.results:
            if result.name == name:
                return result
        return None

    @property
    def passed(self) -> list[CheckResult[Any]]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[CheckResult[Any]]:
        return [r for r in self.results if not r.ok]

    @property
    def all_ok(self) -> bool:
        return not self.failed

    def merge(self, other: "ChecksReport") -> "ChecksReport":
        return ChecksReport(
            results=self.results + other.results,
            skipped=self.skipped + other.skipped,
        )


class ReadOnlyChecks:
    """
    Query-only checks against a configured SDK.

    Example:
        ```python
        report = ReadOnlyChecks(client).run()
        for result in report.failed:
            print(result.name, result.error)
        ```
    """

    def __init__(self, client: "FluidClient", page_size: int = 10) -> None:
        self.client = client
        self.page_size = page_size

    def run(self) -> ChecksReport:
        """Run every read-only check in order."""
        client = self.client
        report = ChecksReport()

        chain_id = report.add(run_check("chain id", client.chain_id))
        if chain_id.ok:
            logger.info("Chain ID: %s", chain_id.value)

        report.add(CheckResult(name="read-only flag", ok=True, value=client.is_read_only))
        logger.info("Read-only mode: %s", client.is_read_only)

        registries = report.add(run_check("registries", client.registries))
        if registries.ok:
            for kind, address in registries.value.items():
                logger.info("  %s registry: %s", kind, address)

        search = report.add(
            run_check("search agents", lambda: client.agents.search({}, None, self.page_size))
        )
        if search.ok:
            logger.info("Found %d agent(s)", len(search.value.items))
            for item in search.value.items:
                logger.info("  %s: %s", item.agent_id, item.name)

        reputation = report.add(
            run_check(
                "search by reputation",
                lambda: client.discovery.search_by_reputation(page_size=self.page_size),
            )
        )
        if reputation.ok:
            logger.info("Found %d agent(s) with feedback", len(reputation.value.items))

        test_agent = client.config.test_agent_id
        if test_agent is None:
            for name in ("get agent", "load agent", "search feedback", "reputation summary"):
                report.skip(name, "TEST_AGENT_ID not set")
        else:
            agent_id = str(test_agent)
            agent = report.add(run_check("get agent", lambda: client.agents.get(agent_id)))
            if agent.ok:
                if agent.value is None:
                    logger.info("Agent %s is not indexed", agent_id)
                else:
                    logger.info("Agent %s: %s", agent_id, agent.value.name)

            loaded = report.add(run_check("load agent", lambda: client.agents.load(agent_id)))
            if loaded.ok:
                logger.info("Loaded agent %s: %s", agent_id, loaded.value.profile.name)

            feedback = report.add(run_check("search feedback", lambda: client.feedback.search(agent_id)))
            if feedback.ok:
                for entry in feedback.value:
                    logger.info("  score=%d tags=%s reviewer=%s", entry.score, entry.tags, entry.reviewer)

            summary = report.add(
                run_check("reputation summary", lambda: client.feedback.reputation_summary(agent_id))
            )
            if summary.ok:
                logger.info(
                    "Reputation: count=%d average=%.2f",
                    summary.value.count,
                    summary.value.average_score,
                )

        if client.is_read_only or test_agent is None:
            report.skip("prepare feedback", "requires a signer and TEST_AGENT_ID")
        else:
            # Prepare only; nothing is submitted
            report.add(
                run_check(
                    "prepare feedback",
                    lambda: client.feedback.prepare(
                        str(test_agent), 5, tags=["test", "automated"], text="Read-only check"
                    ),
                )
            )

        return report


class McpDiscoveryChecks:
    """MCP capability queries across all indexed agents."""

    def __init__(self, client: "FluidClient", first: int = 10) -> None:
        self.client = client
        self.first = first

    def run(self) -> ChecksReport:
        discovery = self.client.discovery
        report = ChecksReport()

        tools = report.add(run_check("mcp tools", discovery.mcp_tools))
        if tools.ok:
            logger.info("Found %d MCP tool(s): %s", len(tools.value), ", ".join(tools.value))

        prompts = report.add(run_check("mcp prompts", discovery.mcp_prompts))
        if prompts.ok:
            logger.info("Found %d MCP prompt(s): %s", len(prompts.value), ", ".join(prompts.value))

        resources = report.add(run_check("mcp resources", discovery.mcp_resources))
        if resources.ok:
            logger.info("Found %d MCP resource(s): %s", len(resources.value), ", ".join(resources.value))

        agents = report.add(
            run_check(
                "search by mcp capabilities",
                lambda: discovery.search_by_mcp_capabilities(first=self.first),
            )
        )
        if agents.ok:
            logger.info("Found %d agent(s) with MCP capabilities", len(agents.value))

        if tools.ok and tools.value:
            tool = tools.value[0]
            by_tool = report.add(
                run_check(
                    "search by mcp tool",
                    lambda: discovery.search_by_mcp_capabilities(tools=[tool], first=self.first),
                )
            )
            if by_tool.ok:
                logger.info("Found %d agent(s) with tool %s", len(by_tool.value), tool)
        else:
            report.skip("search by mcp tool", "no MCP tools indexed")

        return report
