"""
Exercise an MCP server through a real client session.

McpProber only lists capability names with bare JSON-RPC requests. This
check opens an MCP session over streamable HTTP, lists tools, prompts and
resources, then calls one tool, renders one prompt and reads one resource.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import httpx
from mcp import ClientSession
from mcp.client.streamable_http import streamable_http_client
from mcp.types import Implementation

from fluidharness.checks import ChecksReport
from fluidharness.exceptions import HarnessError
from fluidharness.logging import get_logger
from fluidharness.verification import CheckResult

logger = get_logger("mcp")

CLIENT_INFO = Implementation(name="fluidsdk-test-client", version="1.0.0")


@dataclass
class ToolCall:
    """A tool invocation and the arguments to send."""

    name: str = "calculate"
    arguments: dict[str, Any] = field(default_factory=lambda: {"operation": "add", "a": 42, "b": 58})


@dataclass
class PromptRequest:
    """A prompt to render and its string arguments."""

    name: str = "greeting"
    arguments: dict[str, str] = field(default_factory=lambda: {"name": "FluidSDK Tester"})


def _text(content: list[Any]) -> str:
    return "\n".join(item.text for item in content if getattr(item, "text", None) is not None)


class McpSessionCheck:
    """
    Smoke-test an MCP server with a full client session.

    Example:
        ```python
        with LocalMCPServer(port=3000) as server:
            report = McpSessionCheck(server.url).run()
            assert report.get("call tool").value == "Result: 42 add 58 = 100"
        ```
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        tool: ToolCall | None = None,
        prompt: PromptRequest | None = None,
        resource: str = "fluidsdk://status",
    ) -> None:
        """
        Initialize the check.

        Args:
            base_url: Server base URL; the session talks to <base_url>/mcp
            timeout: HTTP timeout in seconds
            tool: Tool to call (default: calculate add 42 58)
            prompt: Prompt to render (default: greeting)
            resource: Resource URI to read
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.tool = tool or ToolCall()
        self.prompt = prompt or PromptRequest()
        self.resource = resource

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/mcp"

    def run(self) -> ChecksReport:
        """Run the session check from synchronous code."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> ChecksReport:
        """
        Open a session and exercise the server.

        A connection or handshake failure is recorded as a failed "connect"
        check. After that, each call is recorded on its own.

        Returns:
            ChecksReport with one result per session operation
        """
        report = ChecksReport()
        logger.info("Opening MCP session with %s", self.endpoint)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as http_client:
                async with streamable_http_client(self.endpoint, http_client=http_client) as (read, write, _):
                    async with ClientSession(
                        read,
                        write,
                        read_timeout_seconds=timedelta(seconds=self.timeout),
                        client_info=CLIENT_INFO,
                    ) as session:
                        result = await session.initialize()
                        report.add(CheckResult(name="connect", ok=True, value=result.serverInfo.name))
                        await self._exercise(session, report)
        except Exception as e:
            if report.get("connect") is None:
                logger.warning("MCP session with %s failed: %s", self.endpoint, e)
                report.add(CheckResult(name="connect", ok=False, error=e))
            else:
                logger.warning("MCP session with %s closed with an error: %s", self.endpoint, e)
        return report

    async def _exercise(self, session: ClientSession, report: ChecksReport) -> None:
        async def list_tools() -> list[str]:
            return [tool.name for tool in (await session.list_tools()).tools]

        async def list_prompts() -> list[str]:
            return [prompt.name for prompt in (await session.list_prompts()).prompts]

        async def list_resources() -> list[str]:
            return [str(resource.uri) for resource in (await session.list_resources()).resources]

        async def call_tool() -> str:
            result = await session.call_tool(self.tool.name, self.tool.arguments)
            if result.isError:
                raise HarnessError("MCP_TOOL_ERROR", f"{self.tool.name} failed: {_text(result.content)}")
            return _text(result.content)

        async def get_prompt() -> str:
            result = await session.get_prompt(self.prompt.name, self.prompt.arguments)
            return "\n".join(_text([message.content]) for message in result.messages)

        async def read_resource() -> str:
            result = await session.read_resource(self.resource)  # type: ignore[arg-type]
            return _text(result.contents)

        await _check(report, "list tools", list_tools)
        await _check(report, "list prompts", list_prompts)
        await _check(report, "list resources", list_resources)
        await _check(report, "call tool", call_tool)
        await _check(report, "get prompt", get_prompt)
        await _check(report, "read resource", read_resource)


async def _check(report: ChecksReport, name: str, fn: Callable[[], Awaitable[Any]]) -> None:
    try:
        value = await fn()
    except Exception as e:
        logger.warning("MCP %s failed: %s", name, e)
        report.add(CheckResult(name=name, ok=False, error=e))
    else:
        logger.info("MCP %s: ok", name)
        report.add(CheckResult(name=name, ok=True, value=value))
