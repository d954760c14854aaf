"""FluidSDK harness - integration tests for the FluidSDK agent lifecycle."""

__version__ = "0.1.0"

from fluidharness.checks import ChecksReport, McpDiscoveryChecks, ReadOnlyChecks
from fluidharness.client import FluidClient
from fluidharness.config import HarnessConfig
from fluidharness.exceptions import (
    ConfigurationError,
    ConnectivityError,
    HarnessError,
    InsufficientBalanceError,
    RegistrationError,
    RpcError,
    SelfFeedbackError,
    StepFailedError,
    ValidationError,
)
from fluidharness.ipfs import IpfsGateway
from fluidharness.lifecycle import (
    FeedbackOptions,
    FeedbackOrchestrator,
    LifecycleContext,
    LifecycleOptions,
    LifecycleOrchestrator,
    LifecycleReport,
    LifecycleState,
)
from fluidharness.logging import configure_logging, get_logger
from fluidharness.mcp import LocalMCPServer, McpProber, McpSessionCheck
from fluidharness.polling import PollResult, RetryPolicy, poll
from fluidharness.rpc import ChainClient
from fluidharness.sdk import AgentHandle, AgentSDK, SdkFactory
from fluidharness.signers import EthereumSigner, Signer, SignerSet, build_signers
from fluidharness.verification import CheckResult, ReputationVerifier, VerificationReport

__all__ = [
    "__version__",
    # Main Client
    "FluidClient",
    "HarnessConfig",
    # SDK facade
    "AgentSDK",
    "AgentHandle",
    "SdkFactory",
    # Lifecycle
    "LifecycleOrchestrator",
    "FeedbackOrchestrator",
    "LifecycleOptions",
    "FeedbackOptions",
    "LifecycleContext",
    "LifecycleReport",
    "LifecycleState",
    # Verification and checks
    "ReputationVerifier",
    "VerificationReport",
    "CheckResult",
    "ReadOnlyChecks",
    "McpDiscoveryChecks",
    "ChecksReport",
    # Polling
    "RetryPolicy",
    "PollResult",
    "poll",
    # Network
    "ChainClient",
    "McpProber",
    "McpSessionCheck",
    "LocalMCPServer",
    "IpfsGateway",
    # Signers
    "Signer",
    "EthereumSigner",
    "SignerSet",
    "build_signers",
    # Exceptions
    "HarnessError",
    "ConfigurationError",
    "SelfFeedbackError",
    "ConnectivityError",
    "RpcError",
    "InsufficientBalanceError",
    "RegistrationError",
    "ValidationError",
    "StepFailedError",
    # Logging
    "configure_logging",
    "get_logger",
]
