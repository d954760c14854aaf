"""MCP capability data models."""

from dataclasses import dataclass, field


@dataclass
class McpCapabilities:
    """Capability names discovered on an MCP server."""

    tools: list[str] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.tools) + len(self.prompts) + len(self.resources)

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass
class ServerInfo:
    """Server metadata reported by GET <base>/info."""

    version: str
    protocol: str
