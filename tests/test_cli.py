"""
Tests for the command-line interface.
"""

import json
import logging
from collections.abc import Generator

import httpx
import pytest
from typer.testing import CliRunner

from fluidharness import __version__, cli
from fluidharness.checks import ChecksReport
from fluidharness.config import ENV_VARS
from fluidharness.exceptions import ConfigurationError
from fluidharness.logging import configure_logging
from fluidharness.mcp.prober import McpProber
from fluidharness.signers import EthereumSigner
from fluidharness.testing import InMemoryChain, in_memory_sdk_factory
from fluidharness.verification import CheckResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate commands from the developer's environment and .env file."""
    for name in [*ENV_VARS.values(), cli.SDK_FACTORY_ENV]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    yield
    # Commands log to the runner's captured stderr, which is closed afterwards
    configure_logging(handler=logging.NullHandler())


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(cli.app, ["--version"])

        assert result.exit_code == 0
        assert f"fluidharness {__version__}" in result.stdout


class TestRun:
    def test_dry_run_completes(self) -> None:
        result = runner.invoke(cli.app, ["run", "--dry-run", "--no-mcp", "--poll-interval", "0"])

        assert result.exit_code == 0, result.output
        assert "State: DONE" in result.stdout
        assert "Agent: 11155111:1" in result.stdout
        assert "Feedback: score=5 index=0" in result.stdout

    def test_dry_run_skip_feedback(self) -> None:
        result = runner.invoke(cli.app, ["run", "--dry-run", "--no-mcp", "--skip-feedback"])

        assert result.exit_code == 0, result.output
        assert "State: DONE" in result.stdout
        assert "Feedback:" not in result.stdout

    def test_rejected_score_still_succeeds(self) -> None:
        result = runner.invoke(
            cli.app, ["run", "--dry-run", "--no-mcp", "--poll-interval", "0", "--score", "7"]
        )

        assert result.exit_code == 0, result.output
        assert "Feedback rejected" in result.stdout

    def test_missing_sdk_factory(self) -> None:
        result = runner.invoke(cli.app, ["run", "--no-mcp"])

        assert result.exit_code == 1
        assert "No SDK configured" in result.output

    def test_sdk_option(self, monkeypatch: pytest.MonkeyPatch) -> None:
        signer, _ = EthereumSigner.generate()
        monkeypatch.setenv("RPC_URL", "https://rpc.test")
        monkeypatch.setenv("PRIVATE_KEY", signer.private_key_hex())
        monkeypatch.setattr(cli, "ChainClient", lambda url, timeout: InMemoryChain())

        result = runner.invoke(
            cli.app,
            [
                "run",
                "--sdk",
                "fluidharness.testing.mock:in_memory_sdk_factory",
                "--no-mcp",
                "--poll-interval",
                "0",
            ],
        )

        # Owner set but no PINATA_JWT: registration is refused
        assert result.exit_code == 1
        assert "State: FAILED" in result.stdout
        assert "Register agent" in result.output


class TestLoadSdkFactory:
    def test_module_attribute(self) -> None:
        factory = cli.load_sdk_factory("fluidharness.testing.mock:in_memory_sdk_factory")
        assert factory is in_memory_sdk_factory

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(cli.SDK_FACTORY_ENV, "fluidharness.testing.mock:in_memory_sdk_factory")
        assert cli.load_sdk_factory(None) is in_memory_sdk_factory

    @pytest.mark.parametrize(
        "path",
        [
            None,
            "no-colon",
            "fluidharness_missing_module:factory",
            "fluidharness.testing.mock:missing",
            "fluidharness.testing.mock:WRITE_METHODS",
        ],
    )
    def test_invalid(self, path: str | None) -> None:
        with pytest.raises(ConfigurationError):
            cli.load_sdk_factory(path)


class TestCheck:
    def test_dry_run_read_only(self) -> None:
        result = runner.invoke(cli.app, ["check", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "chain id: ok" in result.stdout
        assert "get agent: skipped" in result.stdout
        assert "search by mcp tool: skipped" in result.stdout


class TestProbe:
    def test_prints_capabilities(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"version": "2024-11-05", "protocol": "mcp"})
            body = json.loads(request.content)
            key = body["method"].split("/")[0]
            entries = {"tools": [{"name": "echo"}], "prompts": [], "resources": [{"uri": "fluidsdk://config"}]}[key]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": {key: entries}})

        def make_prober(url: str, timeout: float) -> McpProber:
            return McpProber(url, http_client=httpx.Client(transport=httpx.MockTransport(handler)))

        monkeypatch.setattr(cli, "McpProber", make_prober)

        result = runner.invoke(cli.app, ["probe", "https://mcp.test/"])

        assert result.exit_code == 0, result.output
        assert "Server: version=2024-11-05 protocol=mcp" in result.stdout
        assert "Tools (1): echo" in result.stdout
        assert "Prompts (0): " in result.stdout
        assert "Resources (1): fluidsdk://config" in result.stdout

    def test_exercise_prints_session_checks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[tuple[str, float]] = []

        class FakeSessionCheck:
            def __init__(self, url: str, timeout: float) -> None:
                calls.append((url, timeout))

            def run(self) -> ChecksReport:
                report = ChecksReport()
                report.add(CheckResult(name="connect", ok=True, value="fluidsdk-test-mcp"))
                report.add(CheckResult(name="call tool", ok=False, error=RuntimeError("tool crashed")))
                return report

        monkeypatch.setattr(cli, "McpProber", self.make_prober)
        monkeypatch.setattr(cli, "McpSessionCheck", FakeSessionCheck)

        result = runner.invoke(cli.app, ["probe", "https://mcp.test/", "--exercise", "--timeout", "5"])

        assert result.exit_code == 1
        assert calls == [("https://mcp.test/", 5.0)]
        assert "connect: ok" in result.stdout
        assert "call tool: FAILED (tool crashed)" in result.stdout

    def test_session_not_opened_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def unexpected(*args: object, **kwargs: object) -> None:
            raise AssertionError("session check should not run")

        monkeypatch.setattr(cli, "McpProber", self.make_prober)
        monkeypatch.setattr(cli, "McpSessionCheck", unexpected)

        result = runner.invoke(cli.app, ["probe", "https://mcp.test/"])

        assert result.exit_code == 0, result.output

    @staticmethod
    def make_prober(url: str, timeout: float) -> McpProber:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"version": "2024-11-05", "protocol": "mcp"})
            body = json.loads(request.content)
            key = body["method"].split("/")[0]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": {key: []}})

        return McpProber(url, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestFeedback:
    def test_dry_run_completes(self) -> None:
        result = runner.invoke(cli.app, ["feedback", "--dry-run", "--poll-interval", "0"])

        assert result.exit_code == 0, result.output
        assert "State: DONE" in result.stdout
        assert "Agent: 11155111:1" in result.stdout
        assert "Feedback: score=5 index=0" in result.stdout
        assert "Reputation: count=1 average=5.00" in result.stdout

    def test_dry_run_custom_score_and_tags(self) -> None:
        result = runner.invoke(
            cli.app,
            ["feedback", "--dry-run", "--poll-interval", "0", "--score", "3", "--tag", "mcp", "--tag", "smoke"],
        )

        assert result.exit_code == 0, result.output
        assert "Feedback: score=3 index=0" in result.stdout
        assert "Reputation: count=1 average=3.00" in result.stdout

    def test_missing_agent_id(self) -> None:
        result = runner.invoke(
            cli.app, ["feedback", "--sdk", "fluidharness.testing.mock:in_memory_sdk_factory"]
        )

        assert result.exit_code == 1
        assert "TEST_AGENT_ID not set" in result.output

    def test_unknown_agent_fails(self, monkeypatch: pytest.MonkeyPatch) -> None:
        owner, _ = EthereumSigner.generate()
        reviewer, _ = EthereumSigner.generate()
        monkeypatch.setenv("RPC_URL", "https://rpc.test")
        monkeypatch.setenv("PRIVATE_KEY", owner.private_key_hex())
        monkeypatch.setenv("FEEDBACK_PRIVATE_KEY", reviewer.private_key_hex())
        monkeypatch.setattr(cli, "ChainClient", lambda url, timeout: InMemoryChain())

        result = runner.invoke(
            cli.app,
            [
                "feedback",
                "--sdk",
                "fluidharness.testing.mock:in_memory_sdk_factory",
                "--agent-id",
                "11155111:404",
                "--poll-interval",
                "0",
            ],
        )

        assert result.exit_code == 1
        assert "State: FAILED" in result.stdout
        assert "Look up agent" in result.output


class TestWallets:
    def test_generate_wallet(self) -> None:
        result = runner.invoke(cli.app, ["generate-wallet"])

        assert result.exit_code == 0
        assert "FEEDBACK_PRIVATE_KEY=0x" in result.stdout
        assert "testnet use only" in result.stdout

    def test_signers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        owner, owner_address = EthereumSigner.generate()
        reviewer, reviewer_address = EthereumSigner.generate()
        monkeypatch.setenv("PRIVATE_KEY", owner.private_key_hex())
        monkeypatch.setenv("FEEDBACK_PRIVATE_KEY", reviewer.private_key_hex())

        result = runner.invoke(cli.app, ["signers"])

        assert result.exit_code == 0
        assert owner_address in result.stdout
        assert reviewer_address in result.stdout

    def test_signers_read_only(self) -> None:
        result = runner.invoke(cli.app, ["signers"])

        assert result.exit_code == 0
        assert "not set (read-only)" in result.stdout

    def test_malformed_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRIVATE_KEY", "0x1234")

        result = runner.invoke(cli.app, ["signers"])

        assert result.exit_code == 1
        assert "PRIVATE_KEY" in result.output
