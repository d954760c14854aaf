"""
Tests for the local MCP test server.
"""

import asyncio
import json

import pytest

from fluidharness.mcp import server
from fluidharness.testing import create_capabilities


class TestTools:
    @pytest.mark.parametrize(
        ("operation", "a", "b", "expected"),
        [
            ("add", 2, 3, "Result: 2 add 3 = 5"),
            ("subtract", 10, 4, "Result: 10 subtract 4 = 6"),
            ("multiply", 2.5, 2, "Result: 2.5 multiply 2 = 5"),
            ("divide", 7, 2, "Result: 7 divide 2 = 3.5"),
        ],
    )
    def test_calculate(self, operation: str, a: float, b: float, expected: str) -> None:
        assert server.calculate(operation, a, b) == expected

    def test_divide_by_zero(self) -> None:
        assert server.calculate("divide", 1, 0) == "Error: Division by zero"

    def test_unknown_operation(self) -> None:
        assert server.calculate("modulo", 1, 2) == "Error: Unknown operation modulo"

    def test_echo(self) -> None:
        assert server.echo("ping") == "Echo: ping"

    def test_weather_shape(self) -> None:
        weather = json.loads(server.get_weather("Nairobi"))

        assert weather["location"] == "Nairobi"
        assert 10 <= weather["temperature"] < 40
        assert weather["condition"] in {"Sunny", "Cloudy", "Rainy", "Windy"}
        assert 40 <= weather["humidity"] < 100


class TestPrompts:
    def test_greeting(self) -> None:
        assert server.greeting("Ada").startswith("Hello Ada!")
        assert server.greeting().startswith("Hello User!")

    def test_code_review(self) -> None:
        text = server.code_review("Python", "high")
        assert "Python code with high complexity" in text


class TestResources:
    def test_config(self) -> None:
        config = json.loads(server.read_config())
        assert config["serverName"] == server.SERVER_NAME
        assert config["capabilities"] == ["tools", "prompts", "resources"]

    def test_status(self) -> None:
        status = json.loads(server.read_status())
        assert status["status"] == "running"
        assert status["uptime"] >= 0

    def test_quickstart(self) -> None:
        assert server.read_quickstart().startswith("# FluidSDK Quick Start")


class TestCreateServer:
    def test_registers_advertised_capabilities(self) -> None:
        mcp_server = server.create_server(port=3999)
        expected = create_capabilities()

        tools = asyncio.run(mcp_server.list_tools())
        prompts = asyncio.run(mcp_server.list_prompts())
        resources = asyncio.run(mcp_server.list_resources())

        assert sorted(t.name for t in tools) == sorted(expected.tools)
        assert sorted(p.name for p in prompts) == sorted(expected.prompts)
        assert sorted(str(r.uri) for r in resources) == sorted(expected.resources)

    def test_settings(self) -> None:
        mcp_server = server.create_server(host="0.0.0.0", port=4001)

        assert mcp_server.settings.port == 4001
        assert mcp_server.settings.host == "0.0.0.0"
        assert mcp_server.settings.stateless_http
        assert mcp_server.settings.json_response
