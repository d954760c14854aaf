"""FluidSDK harness type definitions.

This module exports all data model types used by the harness.
"""

from fluidharness.types.agents import (
    AgentId,
    AgentProfile,
    AgentSummary,
    Endpoint,
    RegistrationResult,
    SearchPage,
)
from fluidharness.types.feedback import (
    Feedback,
    FeedbackDraft,
    FeedbackId,
    ReputationSummary,
)
from fluidharness.types.mcp import McpCapabilities, ServerInfo

__all__ = [
    # Agent types
    "AgentId",
    "AgentProfile",
    "AgentSummary",
    "Endpoint",
    "RegistrationResult",
    "SearchPage",
    # Feedback types
    "Feedback",
    "FeedbackDraft",
    "FeedbackId",
    "ReputationSummary",
    # MCP types
    "McpCapabilities",
    "ServerInfo",
]
