"""
Agent lifecycle orchestrator.

Drives an agent through connect, build, register, index, feedback and
verification as an explicit state machine:

    IDLE -> CONNECTED -> PROFILE_BUILT -> REGISTERED -> INDEXED
         -> FEEDBACK_PREPARED -> FEEDBACK_SUBMITTED -> FEEDBACK_INDEXED -> DONE

Any fatal error moves the run to FAILED. Advisory problems (MCP server
unreachable, agent not yet indexed, a single verification read failing)
are logged, collected as warnings and the run proceeds.
"""

import dataclasses
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from fluidharness.exceptions import (
    ConfigurationError,
    HarnessError,
    InsufficientBalanceError,
    RegistrationError,
    SelfFeedbackError,
    StepFailedError,
    ValidationError,
)
from fluidharness.ipfs import IpfsGateway, find_mcp_endpoint
from fluidharness.logging import get_logger
from fluidharness.mcp.prober import McpProber
from fluidharness.polling import RetryPolicy, poll
from fluidharness.rpc import format_ether
from fluidharness.types.agents import AgentSummary, RegistrationResult, SearchPage
from fluidharness.types.feedback import Feedback, FeedbackDraft, ReputationSummary
from fluidharness.types.mcp import McpCapabilities, ServerInfo
from fluidharness.verification import ReputationVerifier, VerificationReport

if TYPE_CHECKING:
    from fluidharness.client import FluidClient
    from fluidharness.mcp.process import LocalMCPServer
    from fluidharness.sdk import AgentHandle

logger = get_logger("lifecycle")


class BalanceSource(Protocol):
    """Anything that can report an account balance in wei (ChainClient, InMemoryChain)."""

    def get_balance(self, address: str, block: str = "latest") -> int: ...


class LifecycleState(str, Enum):
    IDLE = "IDLE"
    CONNECTED = "CONNECTED"
    PROFILE_BUILT = "PROFILE_BUILT"
    REGISTERED = "REGISTERED"
    INDEXED = "INDEXED"
    FEEDBACK_PREPARED = "FEEDBACK_PREPARED"
    FEEDBACK_SUBMITTED = "FEEDBACK_SUBMITTED"
    FEEDBACK_INDEXED = "FEEDBACK_INDEXED"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class FeedbackOptions:
    """Values used to prepare the test feedback."""

    score: int = 5
    tags: list[str] = field(default_factory=lambda: ["mcp", "integration", "test"])
    text: str | None = "Excellent MCP integration and response time!"
    capability: str | None = "mcp-communication"
    skill: str | None = "protocol-integration"
    task: str | None = "full-flow-mcp-test"
    context: dict[str, Any] = field(default_factory=lambda: {"testType": "full-flow-mcp-subgraph"})
    extra: dict[str, Any] = field(
        default_factory=lambda: {"automatedTest": True, "version": "2.0", "mcpEnabled": True}
    )
    # Owner-issued token, for when the SDK signer is not the agent owner
    feedback_auth: str | None = None


@dataclass
class LifecycleOptions:
    """
    Run options.

    mcp_url=None disables MCP configuration entirely; probe_mcp=False keeps
    the endpoint but skips capability discovery.
    """

    agent_name: str | None = None  # default: "MCP Agent <unix millis>"
    description: str = "Test agent with MCP server integration for full flow testing"
    image: str = "ipfs://QmTestMCPAgentImage"
    mcp_url: str | None = None
    mcp_version: str = "2024-11-05"
    probe_mcp: bool = True
    a2a_url: str | None = None
    a2a_version: str = "1.0"
    include_feedback: bool = True
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    feedback: FeedbackOptions = field(default_factory=FeedbackOptions)


@dataclass
class LifecycleContext:
    """Everything a run has learned so far, threaded through every step."""

    state: LifecycleState = LifecycleState.IDLE
    mcp_url: str | None = None
    chain_id: int | None = None
    registries: dict[str, str] = field(default_factory=dict)
    server_info: ServerInfo | None = None
    capabilities: McpCapabilities = field(default_factory=McpCapabilities)
    handle: "AgentHandle | None" = None
    registration: RegistrationResult | None = None
    agent_id: str | None = None
    summary: AgentSummary | None = None
    draft: FeedbackDraft | None = None
    feedback_error: Exception | None = None
    feedback: Feedback | None = None
    verification: VerificationReport | None = None
    reputation: ReputationSummary | None = None
    search_page: SearchPage | None = None
    warnings: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: BaseException | None = None

    def warn(self, message: str, *args: Any) -> None:
        text = message % args if args else message
        logger.warning(text)
        self.warnings.append(text)

    def require(self, name: str) -> Any:
        """
        Return a value an earlier step produced.

        Raises:
            HarnessError: If the value is still unset
        """
        value = getattr(self, name)
        if value is None:
            raise HarnessError("MISSING_STEP_RESULT", f"No {name} yet; an earlier step did not run")
        return value


@dataclass
class LifecycleReport:
    """Final outcome of a run."""

    state: LifecycleState
    context: LifecycleContext

    @property
    def succeeded(self) -> bool:
        return self.state is LifecycleState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    @property
    def agent_id(self) -> str | None:
        return self.context.agent_id

    @property
    def failed_step(self) -> str | None:
        return self.context.failed_step

    @property
    def error(self) -> BaseException | None:
        return self.context.error

    @property
    def warnings(self) -> list[str]:
        return self.context.warnings

    @property
    def feedback_error(self) -> Exception | None:
        return self.context.feedback_error

    def raise_for_failure(self) -> None:
        """
        Raise StepFailedError if the run failed.

        Raises:
            StepFailedError: Carrying the failed step and the original error
        """
        if self.state is LifecycleState.FAILED and self.context.error is not None:
            raise StepFailedError(self.context.failed_step or "unknown", self.context.error) from self.context.error


Step = tuple[str, LifecycleState, Callable[[LifecycleContext], None]]


class LifecycleOrchestrator:
    """
    Run the full agent lifecycle against an SDK.

    Example:
        ```python
        client = FluidClient.from_config(config, sdk_factory)
        with ChainClient(config.require("rpc_url")) as chain:
            orchestrator = LifecycleOrchestrator(
                client,
                chain,
                LifecycleOptions(mcp_url=config.mcp_server_url),
            )
            report = orchestrator.run()
        raise SystemExit(report.exit_code)
        ```
    """

    def __init__(
        self,
        client: "FluidClient",
        chain: BalanceSource,
        options: LifecycleOptions | None = None,
        prober: McpProber | None = None,
        gateway: IpfsGateway | None = None,
        local_server: "LocalMCPServer | None" = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            client: Guarded SDK client
            chain: Balance source for the pre-transaction balance checks
            options: Run options (default: LifecycleOptions())
            prober: MCP prober (default: built from options.mcp_url)
            gateway: IPFS gateway for the advisory content check (optional)
            local_server: MCP server subprocess started for this run and
                always stopped when it ends (optional)
            sleep: Sleep function used between indexing polls
        """
        self.client = client
        self.chain = chain
        self.options = options or LifecycleOptions()
        self.prober = prober
        self.gateway = gateway
        self.local_server = local_server
        self.sleep = sleep
        self._owns_prober = False

    def steps(self) -> list[Step]:
        """Ordered (description, state reached, step) triples."""
        return [
            ("Connect to chain", LifecycleState.CONNECTED, self._connect),
            ("Build agent profile", LifecycleState.PROFILE_BUILT, self._build_profile),
            ("Register agent", LifecycleState.REGISTERED, self._register),
            ("Wait for agent indexing", LifecycleState.INDEXED, self._await_agent),
            ("Prepare feedback", LifecycleState.FEEDBACK_PREPARED, self._prepare_feedback),
            ("Submit feedback", LifecycleState.FEEDBACK_SUBMITTED, self._submit_feedback),
            ("Verify feedback", LifecycleState.FEEDBACK_INDEXED, self._verify_feedback),
            ("Search agents", LifecycleState.DONE, self._final_search),
        ]

    def run(self) -> LifecycleReport:
        """
        Execute every step in order.

        Returns:
            LifecycleReport; state is DONE on success and FAILED otherwise
        """
        ctx = LifecycleContext(mcp_url=self.options.mcp_url)
        step_name = "Start local MCP server"
        try:
            if self.local_server is not None:
                self.local_server.start()
                ctx.mcp_url = self.local_server.url

            for number, (step_name, target, step) in enumerate(self.steps(), start=1):
                if self._skipped(ctx, target):
                    logger.info("STEP %d: %s - skipped", number, step_name)
                    continue
                logger.info("STEP %d: %s", number, step_name)
                step(ctx)
                ctx.state = target
        except Exception as e:
            ctx.failed_step = step_name
            ctx.error = e
            ctx.state = LifecycleState.FAILED
            logger.error("Step '%s' failed: %s", step_name, e, exc_info=e)
        finally:
            self._cleanup()

        if ctx.state is LifecycleState.DONE:
            logger.info("Lifecycle completed: agent %s", ctx.agent_id)
            for warning in ctx.warnings:
                logger.info("  warning: %s", warning)
        return LifecycleReport(state=ctx.state, context=ctx)

    def _skipped(self, ctx: LifecycleContext, target: LifecycleState) -> bool:
        if target not in (
            LifecycleState.FEEDBACK_PREPARED,
            LifecycleState.FEEDBACK_SUBMITTED,
            LifecycleState.FEEDBACK_INDEXED,
        ):
            return False
        if not self.options.include_feedback:
            return True
        # A rejected draft skips submission and verification
        return target is not LifecycleState.FEEDBACK_PREPARED and ctx.draft is None

    def _cleanup(self) -> None:
        if self._owns_prober and self.prober is not None:
            self.prober.close()
            self.prober = None
            self._owns_prober = False
        if self.local_server is not None:
            self.local_server.stop()

    def _get_prober(self, ctx: LifecycleContext) -> McpProber | None:
        if self.prober is None and ctx.mcp_url:
            self.prober = McpProber(ctx.mcp_url, timeout=self.client.config.timeout)
            self._owns_prober = True
        return self.prober

    def _check_balance(self, role: str, address: str) -> None:
        minimum = self.client.config.min_balance_wei
        balance = self.chain.get_balance(address)
        logger.info("%s wallet %s balance: %s ETH", role, address, format_ether(balance))
        if balance < minimum:
            raise InsufficientBalanceError(address, balance, minimum)

    # Steps

    def _connect(self, ctx: LifecycleContext) -> None:
        ctx.chain_id = self.client.chain_id()
        logger.info("Connected to chain %d", ctx.chain_id)
        if ctx.chain_id != self.client.config.chain_id:
            ctx.warn(
                "Chain id %d differs from configured CHAIN_ID %d",
                ctx.chain_id,
                self.client.config.chain_id,
            )

        ctx.registries = dict(self.client.registries())
        if not ctx.registries:
            raise ConfigurationError(f"No registry addresses configured for chain {ctx.chain_id}")
        for kind, address in ctx.registries.items():
            logger.info("  %s registry: %s", kind, address)

        if self.client.is_read_only:
            logger.info("SDK is in read-only mode")

        prober = self._get_prober(ctx)
        if prober is not None and self.options.probe_mcp:
            ctx.server_info = prober.check_connectivity()
            if ctx.server_info is None:
                ctx.warn("MCP server %s is not reachable; continuing without capabilities", prober.base_url)

    def _build_profile(self, ctx: LifecycleContext) -> None:
        options = self.options
        name = options.agent_name or f"MCP Agent {int(time.time() * 1000)}"
        handle = self.client.agents.create(name, options.description, options.image)
        ctx.handle = handle

        if ctx.mcp_url:
            prober = self._get_prober(ctx)
            if prober is not None and options.probe_mcp:
                ctx.capabilities = prober.probe()
                if ctx.capabilities.is_empty:
                    ctx.warn("No MCP capabilities discovered at %s", ctx.mcp_url)
            self.client.agents.configure_mcp(
                handle,
                ctx.mcp_url,
                options.mcp_version,
                ctx.capabilities,
            )

        if options.a2a_url:
            handle.set_a2a(options.a2a_url, options.a2a_version, auto_fetch=False)
            logger.info("A2A endpoint configured: %s", options.a2a_url)

        handle.set_active(True)
        logger.info("Agent profile built: %s", name)

    def _register(self, ctx: LifecycleContext) -> None:
        handle = ctx.require("handle")
        owner = self.client.signers.require_owner()
        self.client.config.require("pinata_jwt")
        self._check_balance("Owner", owner.address)

        registration = self.client.agents.register(handle)
        if not registration.agent_id:
            raise RegistrationError("Registration returned no agent id")
        ctx.registration = registration
        ctx.agent_id = registration.agent_id

        if self.gateway is not None and registration.cid:
            self._inspect_pinned_file(ctx, self.gateway, registration.cid)

    def _inspect_pinned_file(self, ctx: LifecycleContext, gateway: IpfsGateway, cid: str) -> None:
        try:
            document = gateway.fetch_json(cid)
        except Exception as e:
            ctx.warn("Could not fetch registration file %s from IPFS: %s", cid, e)
            return

        endpoint = find_mcp_endpoint(document)
        if endpoint is None:
            if ctx.mcp_url:
                ctx.warn("Registration file %s has no MCP endpoint", cid)
            return
        logger.info(
            "Pinned MCP endpoint: %s (%d tools, %d prompts, %d resources)",
            endpoint.get("endpoint"),
            len(endpoint.get("mcpTools") or []),
            len(endpoint.get("mcpPrompts") or []),
            len(endpoint.get("mcpResources") or []),
        )

    def _await_agent(self, ctx: LifecycleContext) -> None:
        agent_id: str = ctx.require("agent_id")
        result = poll(
            lambda: self.client.agents.get(agent_id),
            policy=self.options.retry,
            sleep=self.sleep,
            description=f"agent {agent_id}",
        )
        if result.found:
            ctx.summary = result.value
            logger.info("Agent %s indexed after %d lookup(s)", agent_id, result.attempts)
        else:
            ctx.warn(
                "Agent %s not indexed after %d lookups; it may appear later",
                agent_id,
                result.attempts,
            )

        try:
            loaded = self.client.agents.load(agent_id)
        except Exception as e:
            ctx.warn("Could not load agent %s: %s", agent_id, e)
        else:
            logger.info("Agent loaded: %s", loaded.profile.name)

    def _prepare_feedback(self, ctx: LifecycleContext) -> None:
        agent_id: str = ctx.require("agent_id")
        fb = self.options.feedback
        context = dict(fb.context)
        context.setdefault("timestamp", int(time.time() * 1000))
        if self.client.reviewer_address:
            context.setdefault("reviewer", self.client.reviewer_address)
        if ctx.mcp_url:
            context.setdefault("mcpServer", ctx.mcp_url)

        try:
            draft = self.client.feedback.prepare(
                agent_id,
                fb.score,
                tags=list(fb.tags),
                text=fb.text,
                capability=fb.capability,
                name=ctx.handle.profile.name if ctx.handle else None,
                skill=fb.skill,
                task=fb.task,
                context=context,
                extra=dict(fb.extra),
            )
        except (ValidationError, ValueError) as e:
            ctx.feedback_error = e
            ctx.warn("Feedback draft rejected: %s", e)
            return

        if fb.feedback_auth:
            draft = dataclasses.replace(draft, feedback_auth=fb.feedback_auth)
        ctx.draft = draft

    def _submit_feedback(self, ctx: LifecycleContext) -> None:
        agent_id: str = ctx.require("agent_id")
        draft: FeedbackDraft = ctx.require("draft")
        reviewer = self.client.signers.require_reviewer()
        self._check_balance("Reviewer", reviewer.address)
        ctx.feedback = self.client.feedback.give(agent_id, draft)

    def _verify_feedback(self, ctx: LifecycleContext) -> None:
        agent_id: str = ctx.require("agent_id")
        feedback: Feedback = ctx.require("feedback")
        reviewer = feedback.reviewer.lower()

        # Search and summary are served by the same index but can lag apart
        def lookup() -> tuple[list[Feedback], ReputationSummary]:
            return (
                self.client.feedback.search(agent_id),
                self.client.feedback.reputation_summary(agent_id),
            )

        result = poll(
            lookup,
            policy=self.options.retry,
            sleep=self.sleep,
            description=f"feedback for {agent_id}",
            accept=lambda found: found[1].count >= 1
            and any(e.reviewer.lower() == reviewer for e in found[0]),
        )
        if result.value is not None:
            ctx.reputation = result.value[1]
        else:
            ctx.warn(
                "Feedback from %s not indexed after %d lookups",
                feedback.reviewer,
                result.attempts,
            )

        tags = self.options.feedback.tags
        verification = ReputationVerifier(self.client).verify(
            agent_id,
            feedback.reviewer,
            feedback.id.index,
            tag=tags[0] if tags else None,
        )
        ctx.verification = verification
        for check in verification.failures:
            ctx.warn("Verification %s failed: %s", check.name, check.error)
        for note in verification.notes:
            ctx.warn(note)

    def _final_search(self, ctx: LifecycleContext) -> None:
        try:
            page = self.client.agents.search({}, None, 10)
        except Exception as e:
            ctx.warn("Agent search failed: %s", e)
            return

        ctx.search_page = page
        logger.info("Found %d agent(s)", len(page.items))
        if ctx.agent_id and page.find(ctx.agent_id) is None:
            ctx.warn("Agent %s not in the first page of search results", ctx.agent_id)


class FeedbackOrchestrator(LifecycleOrchestrator):
    """
    Submit and verify feedback for an agent that is already registered.

    Runs connect, agent lookup, prepare, submit, verify and a reputation
    summary. The reviewer (FEEDBACK_PRIVATE_KEY) must not own the agent.

    Example:
        ```python
        orchestrator = FeedbackOrchestrator(client, chain, config.require("test_agent_id"))
        report = orchestrator.run()
        print(report.context.reputation)
        ```
    """

    def __init__(
        self,
        client: "FluidClient",
        chain: BalanceSource,
        agent_id: str,
        options: LifecycleOptions | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        options = dataclasses.replace(options or LifecycleOptions(), include_feedback=True)
        super().__init__(client, chain, options, sleep=sleep)
        self.agent_id = str(agent_id)

    def steps(self) -> list[Step]:
        return [
            ("Connect to chain", LifecycleState.CONNECTED, self._connect),
            ("Look up agent", LifecycleState.INDEXED, self._lookup_agent),
            ("Prepare feedback", LifecycleState.FEEDBACK_PREPARED, self._prepare_feedback),
            ("Submit feedback", LifecycleState.FEEDBACK_SUBMITTED, self._submit_feedback),
            ("Verify feedback", LifecycleState.FEEDBACK_INDEXED, self._verify_feedback),
            ("Reputation summary", LifecycleState.DONE, self._report_reputation),
        ]

    def _lookup_agent(self, ctx: LifecycleContext) -> None:
        summary = self.client.agents.get(self.agent_id)
        if summary is None:
            raise HarnessError("AGENT_NOT_FOUND", f"Agent {self.agent_id} is not indexed")

        reviewer = self.client.signers.require_reviewer()
        owners = {owner.lower() for owner in summary.owners}
        if reviewer.address.lower() in owners:
            raise SelfFeedbackError(reviewer.address)

        ctx.agent_id = self.agent_id
        ctx.summary = summary
        logger.info("Reviewing agent %s (%s) as %s", self.agent_id, summary.name, reviewer.address)

    def _report_reputation(self, ctx: LifecycleContext) -> None:
        agent_id: str = ctx.require("agent_id")
        try:
            ctx.reputation = self.client.feedback.reputation_summary(agent_id)
        except Exception as e:
            ctx.warn("Reputation summary failed: %s", e)
            return
        logger.info(
            "Reputation of %s: %d feedback(s), average %.2f",
            agent_id,
            ctx.reputation.count,
            ctx.reputation.average_score,
        )
