"""FluidSDK harness testing utilities.

Provides an in-memory SDK, a fake chain and clock, and data factories.
Pytest fixtures live in fluidharness.testing.fixtures.
"""

from fluidharness.testing.factories import (
    create_agent_summary,
    create_capabilities,
    create_config,
    create_feedback,
    create_signer_set,
)
from fluidharness.testing.mock import (
    FakeSleep,
    InMemoryAgentHandle,
    InMemoryChain,
    InMemoryFluidSDK,
    MockCall,
    MockResponse,
    in_memory_sdk_factory,
)

__all__ = [
    # In-memory collaborators
    "InMemoryFluidSDK",
    "InMemoryAgentHandle",
    "InMemoryChain",
    "FakeSleep",
    "MockCall",
    "MockResponse",
    "in_memory_sdk_factory",
    # Helper functions
    "create_signer_set",
    "create_config",
    "create_agent_summary",
    "create_feedback",
    "create_capabilities",
]
