"""
Pytest plugin for harness fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["fluidharness.testing.conftest"]
"""

from fluidharness.testing.fixtures import (
    fake_sleep,
    fluid_client,
    harness_config,
    in_memory_chain,
    in_memory_sdk,
    owner_signer,
    read_only_client,
    read_only_sdk,
    reviewer_signer,
    signer_set,
)

__all__ = [
    "signer_set",
    "owner_signer",
    "reviewer_signer",
    "harness_config",
    "in_memory_sdk",
    "fluid_client",
    "read_only_sdk",
    "read_only_client",
    "in_memory_chain",
    "fake_sleep",
]
