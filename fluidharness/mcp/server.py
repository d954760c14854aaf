"""
Local MCP test server.

A small FastMCP server that advertises tools, prompts and resources an agent
can register. It serves stateless streamable HTTP with plain JSON responses
at /mcp, so a bare JSON-RPC POST of tools/list works without a session
handshake, plus GET /info for connectivity checks.

Run standalone:
    fluidharness serve-mcp --port 3000
"""

import json
import os
import random
import time
from datetime import datetime, timezone

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

SERVER_NAME = "fluidsdk-test-mcp"
SERVER_VERSION = "1.0.0"
PROTOCOL_VERSION = "2024-11-05"

_STARTED = time.monotonic()

QUICKSTART = """# FluidSDK Quick Start

## Installation
```bash
npm install fluidsdk
```

## Initialize SDK
```typescript
import { FluidSDK } from "fluidsdk";

const sdk = new FluidSDK({
  chainId: 11155111,
  rpcUrl: "https://rpc.url",
  signer: wallet,
});
```

## Create an Agent
```typescript
const agent = sdk.createAgent("My Agent", "Description", "ipfs://...");
await agent.registerIPFS();
```
"""


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


# Tools


def calculate(operation: str, a: float, b: float) -> str:
    """Perform basic mathematical calculations (add, subtract, multiply, divide)."""
    if operation == "add":
        result = a + b
    elif operation == "subtract":
        result = a - b
    elif operation == "multiply":
        result = a * b
    elif operation == "divide":
        if b == 0:
            return "Error: Division by zero"
        result = a / b
    else:
        return f"Error: Unknown operation {operation}"
    return f"Result: {_fmt(a)} {operation} {_fmt(b)} = {_fmt(result)}"


def get_weather(location: str) -> str:
    """Get mock weather information for a location."""
    weather = {
        "location": location,
        "temperature": random.randint(10, 39),
        "condition": random.choice(["Sunny", "Cloudy", "Rainy", "Windy"]),
        "humidity": random.randint(40, 99),
    }
    return json.dumps(weather, indent=2)


def echo(message: str) -> str:
    """Echo back the input message."""
    return f"Echo: {message}"


# Prompts


def greeting(name: str = "User") -> str:
    """Generate a friendly greeting."""
    return f"Hello {name}! Welcome to the FluidSDK MCP Test Server. How can I assist you today?"


def code_review(language: str = "JavaScript", complexity: str = "medium") -> str:
    """Template for code review requests."""
    return (
        f"Please review the following {language} code with {complexity} complexity. Focus on:\n"
        "1. Code quality and best practices\n"
        "2. Potential bugs or security issues\n"
        "3. Performance optimizations\n"
        "4. Readability and maintainability"
    )


# Resources


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def read_config() -> str:
    """Current SDK configuration information."""
    return json.dumps(
        {
            "serverName": SERVER_NAME,
            "version": SERVER_VERSION,
            "capabilities": ["tools", "prompts", "resources"],
            "timestamp": _now(),
        },
        indent=2,
    )


def read_status() -> str:
    """MCP server status and metadata."""
    return json.dumps(
        {
            "status": "running",
            "uptime": round(time.monotonic() - _STARTED, 3),
            "pid": os.getpid(),
            "timestamp": _now(),
        },
        indent=2,
    )


def read_quickstart() -> str:
    """Getting started with FluidSDK."""
    return QUICKSTART


async def info(request: Request) -> JSONResponse:
    return JSONResponse({"version": PROTOCOL_VERSION, "protocol": "mcp", "name": SERVER_NAME})


def create_server(host: str = "127.0.0.1", port: int = 3000) -> FastMCP:
    """
    Build the test server.

    Args:
        host: Interface to bind
        port: Port to bind

    Returns:
        Configured FastMCP instance (call .run(transport="streamable-http"))
    """
    server = FastMCP(
        SERVER_NAME,
        host=host,
        port=port,
        stateless_http=True,
        json_response=True,
    )

    for tool in (calculate, get_weather, echo):
        server.tool()(tool)

    for prompt in (greeting, code_review):
        server.prompt()(prompt)

    server.resource(
        "fluidsdk://config",
        name="SDK Configuration",
        description="Current SDK configuration information",
        mime_type="application/json",
    )(read_config)
    server.resource(
        "fluidsdk://status",
        name="Server Status",
        description="MCP server status and metadata",
        mime_type="application/json",
    )(read_status)
    server.resource(
        "fluidsdk://docs/quickstart",
        name="Quick Start Guide",
        description="Getting started with FluidSDK",
        mime_type="text/markdown",
    )(read_quickstart)

    server.custom_route("/info", methods=["GET"])(info)
    return server


def serve(host: str = "127.0.0.1", port: int = 3000) -> None:
    """Run the test server until interrupted."""
    create_server(host, port).run(transport="streamable-http")
