#!/usr/bin/env python3
"""
FluidSDK harness walkthrough.

Drives the lifecycle by hand against the in-memory SDK:
1. Generate owner and reviewer wallets
2. Build and register an agent with an MCP endpoint
3. Wait for indexing
4. Submit feedback from the second wallet and verify it

Swap `in_memory_sdk_factory` for a real FluidSDK factory and `InMemoryChain`
for `ChainClient(config.rpc_url)` to run the same steps on a testnet.
"""

import sys

from fluidharness import FluidClient, HarnessError, ReputationVerifier
from fluidharness.polling import RetryPolicy, poll
from fluidharness.signers import EthereumSigner, SignerSet
from fluidharness.testing import FakeSleep, InMemoryChain, create_capabilities, create_config
from fluidharness.testing.mock import InMemoryFluidSDK


def main() -> None:
    print("=== FluidSDK Harness Walkthrough ===\n")

    # Step 1: Wallets
    print("1. Generating wallets...")
    owner, owner_address = EthereumSigner.generate()
    reviewer, reviewer_address = EthereumSigner.generate()
    signers = SignerSet(owner=owner, reviewer=reviewer)
    print(f"   Owner:    {owner_address}")
    print(f"   Reviewer: {reviewer_address}")

    config = create_config(signers)
    # Agents show up in the index on the third lookup
    sdk = InMemoryFluidSDK(signer=owner, index_lag=2)
    client = FluidClient(sdk, config, signers)
    chain = InMemoryChain()

    try:
        # Step 2: Register
        print("\n2. Registering agent...")
        print(f"   Owner balance: {chain.get_balance(owner_address)} wei")
        handle = client.agents.create("Walkthrough Agent", "Harness example agent", "ipfs://QmExampleImage")
        client.agents.configure_mcp(handle, config.mcp_server_url, config.mcp_protocol_version, create_capabilities())
        handle.set_active(True)
        registration = client.agents.register(handle)
        agent_id = registration.agent_id
        if agent_id is None:
            print("   Registration returned no agent id")
            sys.exit(1)
        print(f"   Agent ID: {agent_id}")
        print(f"   Agent URI: {registration.agent_uri}")

        # Step 3: Indexing
        print("\n3. Waiting for indexing...")
        sleep = FakeSleep()
        result = poll(lambda: client.agents.get(agent_id), RetryPolicy(max_retries=3, interval=10.0), sleep=sleep)
        print(f"   Indexed after {result.attempts} lookup(s), {sleep.total:.0f}s of simulated waiting")

        # Step 4: Feedback
        print("\n4. Submitting feedback...")
        draft = client.feedback.prepare(agent_id, 5, tags=["mcp", "example"], text="Works as advertised")
        feedback = client.feedback.give(agent_id, draft)
        print(f"   Feedback index: {feedback.id.index}")

        sdk.make_visible()
        report = ReputationVerifier(client).verify(agent_id, reviewer_address, feedback.id.index, tag="mcp")
        for check in report.checks:
            print(f"   {check.name}: {'ok' if check.ok else check.error}")
        if report.summary.value is not None:
            print(f"   Average score: {report.summary.value.average_score:.2f}")

        print("\n=== Walkthrough Complete ===")

    except HarnessError as e:
        print(f"\nError: [{e.code}] {e.message}")
        sys.exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()
