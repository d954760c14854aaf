"""
Pytest fixtures for harness testing.

Provides in-memory SDKs, signers, clients and a fake clock.
"""

from collections.abc import Generator

import pytest

from fluidharness.client import FluidClient
from fluidharness.config import HarnessConfig
from fluidharness.signers import EthereumSigner, SignerSet
from fluidharness.testing.factories import create_config, create_signer_set
from fluidharness.testing.mock import FakeSleep, InMemoryChain, InMemoryFluidSDK

# ============================================================================
# Signer Fixtures
# ============================================================================


@pytest.fixture
def signer_set() -> SignerSet:
    """Owner and reviewer identities, distinct from each other."""
    return create_signer_set()


@pytest.fixture
def owner_signer(signer_set: SignerSet) -> EthereumSigner:
    assert signer_set.owner is not None
    return signer_set.owner


@pytest.fixture
def reviewer_signer(signer_set: SignerSet) -> EthereumSigner:
    assert signer_set.reviewer is not None
    return signer_set.reviewer


# ============================================================================
# SDK and Client Fixtures
# ============================================================================


@pytest.fixture
def harness_config(signer_set: SignerSet) -> HarnessConfig:
    return create_config(signer_set)


@pytest.fixture
def in_memory_sdk(owner_signer: EthereumSigner) -> Generator[InMemoryFluidSDK, None, None]:
    """
    InMemoryFluidSDK signing as the owner.

    Example:
        ```python
        def test_registration(fluid_client, in_memory_sdk):
            handle = fluid_client.agents.create("Agent", "desc", "ipfs://Qm")
            fluid_client.agents.register(handle)
            assert in_memory_sdk.was_called("register_ipfs")
        ```
    """
    sdk = InMemoryFluidSDK(signer=owner_signer)
    yield sdk
    sdk.reset()


@pytest.fixture
def fluid_client(
    in_memory_sdk: InMemoryFluidSDK,
    harness_config: HarnessConfig,
    signer_set: SignerSet,
) -> FluidClient:
    return FluidClient(in_memory_sdk, harness_config, signer_set)


@pytest.fixture
def read_only_sdk() -> InMemoryFluidSDK:
    return InMemoryFluidSDK(signer=None)


@pytest.fixture
def read_only_client(read_only_sdk: InMemoryFluidSDK) -> FluidClient:
    """Client with no PRIVATE_KEY, FEEDBACK_PRIVATE_KEY or PINATA_JWT."""
    return FluidClient(read_only_sdk, HarnessConfig(rpc_url="https://rpc.test"), SignerSet())


@pytest.fixture
def in_memory_chain() -> InMemoryChain:
    return InMemoryChain()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()
