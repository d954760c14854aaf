"""MCP capability discovery, session checks and the local MCP test server.

The server module is imported lazily by the serve-mcp command.
"""

from fluidharness.mcp.process import LocalMCPServer
from fluidharness.mcp.prober import McpProber
from fluidharness.mcp.session import McpSessionCheck, PromptRequest, ToolCall

__all__ = [
    "McpProber",
    "McpSessionCheck",
    "ToolCall",
    "PromptRequest",
    "LocalMCPServer",
]
