"""Typer CLI entry point for the FluidSDK lifecycle harness."""

import dataclasses
import importlib
import logging
import os
import sys
from typing import Annotated

import typer
from dotenv import load_dotenv

from fluidharness import __version__
from fluidharness.checks import ChecksReport, McpDiscoveryChecks, ReadOnlyChecks
from fluidharness.client import FluidClient
from fluidharness.config import DEFAULT_RPC_URL, HarnessConfig
from fluidharness.exceptions import ConfigurationError, HarnessError
from fluidharness.ipfs import IpfsGateway
from fluidharness.lifecycle import (
    FeedbackOptions,
    FeedbackOrchestrator,
    LifecycleOptions,
    LifecycleOrchestrator,
    LifecycleReport,
)
from fluidharness.logging import configure_logging, get_logger
from fluidharness.mcp.process import LocalMCPServer
from fluidharness.mcp.prober import McpProber
from fluidharness.mcp.session import McpSessionCheck
from fluidharness.polling import RetryPolicy
from fluidharness.rpc import ChainClient
from fluidharness.sdk import SdkFactory
from fluidharness.signers import EthereumSigner, SignerSet, build_signers

logger = get_logger("cli")

SDK_FACTORY_ENV = "FLUID_SDK_FACTORY"

app = typer.Typer(
    name="fluidharness",
    help="Integration-test harness for the FluidSDK agent lifecycle.",
    no_args_is_help=True,
)

SdkOption = Annotated[
    str | None,
    typer.Option(
        "--sdk",
        help=f"SDK factory as 'module:attribute' (default: ${SDK_FACTORY_ENV}).",
    ),
]
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", help="Use the in-memory SDK and chain instead of a real network."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        handler=logging.StreamHandler(sys.stderr),
        format_string="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def _fail(error: Exception) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=1)


def load_sdk_factory(path: str | None) -> SdkFactory:
    """
    Resolve an SDK factory from "module:attribute".

    Args:
        path: Factory path, or None to read FLUID_SDK_FACTORY

    Raises:
        ConfigurationError: If no factory is configured or it cannot be imported
    """
    path = path or os.environ.get(SDK_FACTORY_ENV)
    if not path:
        raise ConfigurationError(
            f"No SDK configured - pass --sdk module:factory, set {SDK_FACTORY_ENV} or use --dry-run"
        )

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"SDK factory must look like 'module:attribute', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import SDK module {module_name!r}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigurationError(f"{path!r} is not a callable SDK factory")
    return factory


def dry_run_config(config: HarnessConfig) -> HarnessConfig:
    """Fill in throwaway keys and credentials so the full lifecycle can run in memory."""
    owner = config.private_key or EthereumSigner.generate()[0].private_key_hex()
    reviewer = config.feedback_private_key or EthereumSigner.generate()[0].private_key_hex()
    return dataclasses.replace(
        config,
        rpc_url=config.rpc_url or "memory://",
        private_key=owner,
        feedback_private_key=reviewer,
        pinata_jwt=config.pinata_jwt or "dry-run",
        ipfs_gateway_url=None,
    )


def _print_report(report: LifecycleReport) -> None:
    typer.echo(f"State: {report.state.value}")
    if report.agent_id:
        typer.echo(f"Agent: {report.agent_id}")
    ctx = report.context
    if ctx.feedback is not None:
        typer.echo(f"Feedback: score={ctx.feedback.score} index={ctx.feedback.id.index}")
    if report.feedback_error is not None:
        typer.echo(f"Feedback rejected: {report.feedback_error}")
    if report.warnings:
        typer.echo(f"Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            typer.echo(f"  - {warning}")
    if report.failed_step:
        typer.echo(f"Failed step: {report.failed_step}", err=True)
        typer.echo(f"Error: {report.error}", err=True)


def _print_checks(report: ChecksReport) -> None:
    for result in report.results:
        status = "ok" if result.ok else f"FAILED ({result.error})"
        typer.echo(f"{result.name}: {status}")
    for name in report.skipped:
        typer.echo(f"{name}: skipped")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"fluidharness {__version__}")
        raise typer.Exit


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """FluidSDK lifecycle harness."""
    load_dotenv()


@app.command()
def run(
    sdk: SdkOption = None,
    dry_run: DryRunOption = False,
    skip_feedback: Annotated[
        bool, typer.Option("--skip-feedback", help="Stop after registration and indexing.")
    ] = False,
    no_mcp: Annotated[bool, typer.Option("--no-mcp", help="Register without an MCP endpoint.")] = False,
    local_mcp: Annotated[
        bool, typer.Option("--local-mcp", help="Start the local MCP test server for this run.")
    ] = False,
    mcp_url: Annotated[
        str | None, typer.Option("--mcp-url", help="MCP server to probe (default: $MCP_SERVER_URL).")
    ] = None,
    mcp_port: Annotated[int, typer.Option("--mcp-port", help="Port for --local-mcp.")] = 3000,
    poll_interval: Annotated[
        float, typer.Option("--poll-interval", help="Seconds between indexing lookups.")
    ] = 10.0,
    poll_retries: Annotated[
        int, typer.Option("--poll-retries", help="Indexing retries after the first lookup.")
    ] = 3,
    agent_name: Annotated[str | None, typer.Option("--agent-name", help="Agent display name.")] = None,
    score: Annotated[int, typer.Option("--score", help="Feedback score (1-5).")] = 5,
    verbose: VerboseOption = False,
) -> None:
    """Run the full agent lifecycle: register, index, feedback, verify."""
    _setup_logging(verbose)

    try:
        config = HarnessConfig.from_env()
        retry = RetryPolicy(max_retries=poll_retries, interval=poll_interval)
        if dry_run:
            from fluidharness.testing.mock import InMemoryChain, in_memory_sdk_factory

            config = dry_run_config(config)
            factory: SdkFactory = in_memory_sdk_factory
            chain = InMemoryChain(chain_id=config.chain_id)
        else:
            factory = load_sdk_factory(sdk)
            chain = ChainClient(config.require("rpc_url"), timeout=config.timeout)
        client = FluidClient.from_config(config, factory)
    except (HarnessError, ValueError) as e:
        raise _fail(e) from e

    options = LifecycleOptions(
        agent_name=agent_name,
        mcp_url=None if no_mcp else (mcp_url or config.mcp_server_url),
        mcp_version=config.mcp_protocol_version,
        include_feedback=not skip_feedback,
        retry=retry,
        feedback=FeedbackOptions(score=score),
    )
    local_server = LocalMCPServer(port=mcp_port) if local_mcp and not no_mcp else None
    gateway = IpfsGateway(config.ipfs_gateway_url, config.timeout) if config.ipfs_gateway_url else None

    try:
        with chain, client:
            report = LifecycleOrchestrator(
                client,
                chain,
                options,
                gateway=gateway,
                local_server=local_server,
            ).run()
    finally:
        if gateway is not None:
            gateway.close()

    _print_report(report)
    raise typer.Exit(code=report.exit_code)


@app.command()
def feedback(
    sdk: SdkOption = None,
    dry_run: DryRunOption = False,
    agent_id: Annotated[
        str | None,
        typer.Option("--agent-id", help="Agent to review as chainId:tokenId (default: $TEST_AGENT_ID)."),
    ] = None,
    score: Annotated[int, typer.Option("--score", help="Feedback score (1-5).")] = 5,
    tags: Annotated[list[str] | None, typer.Option("--tag", help="Feedback tag (repeatable, up to 3).")] = None,
    feedback_auth: Annotated[
        str | None,
        typer.Option("--feedback-auth", help="Authorization token issued by the agent owner."),
    ] = None,
    poll_interval: Annotated[
        float, typer.Option("--poll-interval", help="Seconds between indexing lookups.")
    ] = 10.0,
    poll_retries: Annotated[
        int, typer.Option("--poll-retries", help="Indexing retries after the first lookup.")
    ] = 3,
    verbose: VerboseOption = False,
) -> None:
    """Submit feedback from FEEDBACK_PRIVATE_KEY to an existing agent and verify it."""
    _setup_logging(verbose)

    try:
        config = HarnessConfig.from_env()
        retry = RetryPolicy(max_retries=poll_retries, interval=poll_interval)
        if dry_run:
            from fluidharness.testing.mock import InMemoryChain, in_memory_sdk_factory

            config = dry_run_config(config)
            factory: SdkFactory = in_memory_sdk_factory
            chain = InMemoryChain(chain_id=config.chain_id)
        else:
            target = agent_id or (str(config.test_agent_id) if config.test_agent_id else None)
            if not target:
                raise ConfigurationError("TEST_AGENT_ID not set - pass --agent-id chainId:tokenId")
            factory = load_sdk_factory(sdk)
            chain = ChainClient(config.require("rpc_url"), timeout=config.timeout)
        client = FluidClient.from_config(config, factory)

        if dry_run:
            # The in-memory store starts empty: review a freshly registered agent
            handle = client.agents.create("Dry Run Agent", "Agent reviewed in a dry run", "ipfs://QmDryRun")
            target = client.agents.register(handle).agent_id or ""
    except (HarnessError, ValueError) as e:
        raise _fail(e) from e

    options = LifecycleOptions(
        retry=retry,
        feedback=FeedbackOptions(
            score=score,
            tags=list(tags) if tags else ["mcp", "integration"],
            feedback_auth=feedback_auth,
        ),
    )
    with chain, client:
        report = FeedbackOrchestrator(client, chain, target, options).run()

    _print_report(report)
    reputation = report.context.reputation
    if reputation is not None:
        typer.echo(f"Reputation: count={reputation.count} average={reputation.average_score:.2f}")
    raise typer.Exit(code=report.exit_code)


@app.command()
def check(
    sdk: SdkOption = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Run the read-only checks and MCP discovery queries."""
    _setup_logging(verbose)

    try:
        config = HarnessConfig.from_env()
        config = dataclasses.replace(config, rpc_url=config.rpc_url or DEFAULT_RPC_URL)
        if dry_run:
            from fluidharness.testing.mock import in_memory_sdk_factory

            factory: SdkFactory = in_memory_sdk_factory
        else:
            factory = load_sdk_factory(sdk)
        client = FluidClient.from_config(config, factory)
    except HarnessError as e:
        raise _fail(e) from e

    with client:
        report = ReadOnlyChecks(client).run().merge(McpDiscoveryChecks(client).run())

    _print_checks(report)
    chain = report.get("chain id")
    raise typer.Exit(code=0 if chain is not None and chain.ok else 1)


@app.command()
def probe(
    url: Annotated[str, typer.Argument(help="MCP server base URL.")],
    timeout: Annotated[float, typer.Option("--timeout", help="Request timeout in seconds.")] = 30.0,
    exercise: Annotated[
        bool,
        typer.Option("--exercise", help="Also open an MCP session and call a tool, prompt and resource."),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Discover the tools, prompts and resources an MCP server advertises."""
    _setup_logging(verbose)

    with McpProber(url, timeout=timeout) as prober:
        info = prober.check_connectivity()
        capabilities = prober.probe()

    if info is not None:
        typer.echo(f"Server: version={info.version} protocol={info.protocol}")
    else:
        typer.echo("Server: /info not available")
    typer.echo(f"Tools ({len(capabilities.tools)}): {', '.join(capabilities.tools)}")
    typer.echo(f"Prompts ({len(capabilities.prompts)}): {', '.join(capabilities.prompts)}")
    typer.echo(f"Resources ({len(capabilities.resources)}): {', '.join(capabilities.resources)}")

    if exercise:
        report = McpSessionCheck(url, timeout=timeout).run()
        _print_checks(report)
        if not report.all_ok:
            raise typer.Exit(code=1)


@app.command("serve-mcp")
def serve_mcp(
    host: Annotated[str, typer.Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Port to bind.")] = 3000,
) -> None:
    """Run the local MCP test server."""
    from fluidharness.mcp.server import serve

    serve(host, port)


@app.command("generate-wallet")
def generate_wallet() -> None:
    """Generate a fresh wallet for the feedback reviewer."""
    signer, address = EthereumSigner.generate()
    typer.echo("New wallet generated")
    typer.echo(f"Address:     {address}")
    typer.echo(f"Private key: {signer.private_key_hex()}")
    typer.echo("")
    typer.echo("Add to .env:")
    typer.echo(f"FEEDBACK_PRIVATE_KEY={signer.private_key_hex()}")
    typer.echo("")
    typer.echo("WARNING: testnet use only. Never share this key or commit it.")
    typer.echo(f"Fund {address} with Sepolia ETH before submitting feedback.")


@app.command("signers")
def show_signers() -> None:
    """Show the addresses derived from PRIVATE_KEY and FEEDBACK_PRIVATE_KEY."""
    try:
        signers: SignerSet = build_signers(HarnessConfig.from_env())
    except HarnessError as e:
        raise _fail(e) from e
    typer.echo(f"Owner:    {signers.owner.address if signers.owner else 'not set (read-only)'}")
    typer.echo(f"Reviewer: {signers.reviewer.address if signers.reviewer else 'not set'}")
    if signers.owner and signers.reviewer and signers.owner.address == signers.reviewer.address:
        typer.echo("WARNING: owner and reviewer are the same wallet; feedback will be refused", err=True)


if __name__ == "__main__":
    app()
