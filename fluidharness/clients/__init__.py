"""FluidSDK harness resource clients."""

from fluidharness.clients.agents import AgentsClient
from fluidharness.clients.discovery import DiscoveryClient
from fluidharness.clients.feedback import FeedbackClient

__all__ = [
    "AgentsClient",
    "FeedbackClient",
    "DiscoveryClient",
]
