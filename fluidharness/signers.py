"""
Signing identities for the harness.

Supports secp256k1 (Ethereum) keys. Addresses and EIP-191 signatures are
produced by eth-account; fresh keys are generated with the cryptography
package.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives.asymmetric import ec
from eth_account import Account
from eth_account.messages import encode_defunct

from fluidharness.exceptions import ConfigurationError, SelfFeedbackError
from fluidharness.logging import log_signing_operation

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

    from fluidharness.config import HarnessConfig

_HEX_KEY = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")

# Order of the secp256k1 group
_SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class Signer(ABC):
    """Abstract base class for signing identities."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Return the checksummed account address."""
        pass

    @abstractmethod
    def sign(self, message: bytes) -> bytes:
        """Sign a message and return the signature bytes."""
        pass

    @classmethod
    @abstractmethod
    def from_key(cls, private_key: str) -> "Signer":
        """Load a signer from a hex private key."""
        pass

    @classmethod
    @abstractmethod
    def generate(cls) -> tuple["Signer", str]:
        """Generate a new keypair, returning (signer, address)."""
        pass


class EthereumSigner(Signer):
    """secp256k1 signer producing Ethereum personal-sign signatures."""

    def __init__(self, account: "LocalAccount") -> None:
        """
        Initialize with an eth-account LocalAccount.

        Args:
            account: Local account holding the private key
        """
        self._account = account

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def account(self) -> "LocalAccount":
        """Underlying eth-account object, for SDK implementations that sign transactions."""
        return self._account

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message using EIP-191 personal sign.

        Args:
            message: The message bytes to sign

        Returns:
            65-byte signature (r || s || v)
        """
        signed = self._account.sign_message(encode_defunct(primitive=message))
        signature = bytes(signed.signature)
        log_signing_operation("sign_message", self.address, f"{len(message)} bytes", "0x" + signature.hex())
        return signature

    def private_key_hex(self) -> str:
        """Return the private key as 0x-prefixed hex (for storage)."""
        return "0x" + bytes(self._account.key).hex()

    @classmethod
    def from_key(cls, private_key: str) -> "EthereumSigner":
        """
        Load a signer from a hex private key.

        Args:
            private_key: 32-byte key as hex, with or without 0x prefix

        Returns:
            EthereumSigner instance

        Raises:
            ValueError: If the key is not a valid secp256k1 private key
        """
        key = private_key.strip()
        if not _HEX_KEY.match(key):
            raise ValueError("Private key must be 32 bytes of hex")
        value = int(key.removeprefix("0x").removeprefix("0X"), 16)
        if not 0 < value < _SECP256K1_N:
            raise ValueError("Private key is outside the secp256k1 range")
        return cls(Account.from_key(value.to_bytes(32, "big")))

    @classmethod
    def generate(cls) -> tuple["EthereumSigner", str]:
        """
        Generate a new secp256k1 keypair.

        Returns:
            Tuple of (signer, address)
        """
        private_key = ec.generate_private_key(ec.SECP256K1())
        value = private_key.private_numbers().private_value
        signer = cls(Account.from_key(value.to_bytes(32, "big")))
        return signer, signer.address

    def __repr__(self) -> str:
        return f"EthereumSigner(address={self.address!r})"


def recover_signer(message: bytes, signature: bytes) -> str:
    """
    Recover the address that produced a personal-sign signature.

    Args:
        message: The original message bytes
        signature: 65-byte signature

    Returns:
        Checksummed address of the signer
    """
    return Account.recover_message(encode_defunct(primitive=message), signature=signature)


@dataclass(frozen=True)
class SignerSet:
    """The harness's signing identities: the agent owner and the feedback reviewer."""

    owner: EthereumSigner | None = None
    reviewer: EthereumSigner | None = None

    @property
    def is_read_only(self) -> bool:
        """True when no owner signer is configured."""
        return self.owner is None

    def require_owner(self) -> EthereumSigner:
        """
        Return the owner signer.

        Raises:
            ConfigurationError: If PRIVATE_KEY is not configured
        """
        if self.owner is None:
            raise ConfigurationError("PRIVATE_KEY not set - write operations require a signer")
        return self.owner

    def require_reviewer(self) -> EthereumSigner:
        """
        Return the reviewer signer, which must differ from the owner.

        Raises:
            ConfigurationError: If FEEDBACK_PRIVATE_KEY is not configured
            SelfFeedbackError: If the reviewer is the same wallet as the owner
        """
        if self.reviewer is None:
            raise ConfigurationError(
                "FEEDBACK_PRIVATE_KEY not set - feedback requires a second wallet "
                "distinct from the agent owner"
            )
        if self.owner is not None and self.owner.address == self.reviewer.address:
            raise SelfFeedbackError(self.reviewer.address)
        return self.reviewer


def build_signers(config: "HarnessConfig") -> SignerSet:
    """
    Derive signing identities from configured secrets.

    Args:
        config: Harness configuration

    Returns:
        SignerSet with zero, one or two identities

    Raises:
        ConfigurationError: If a configured key is malformed
    """
    return SignerSet(
        owner=_load("PRIVATE_KEY", config.private_key),
        reviewer=_load("FEEDBACK_PRIVATE_KEY", config.feedback_private_key),
    )


def _load(env_name: str, key: str | None) -> EthereumSigner | None:
    if key is None:
        return None
    try:
        return EthereumSigner.from_key(key)
    except ValueError as e:
        raise ConfigurationError(f"{env_name} is not a valid private key: {e}") from e
