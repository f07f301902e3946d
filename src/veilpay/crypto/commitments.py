"""Hash-based amount commitments, stealth addresses and ownership proofs.

The commitment scheme sits behind ``CommitmentScheme`` so a Pedersen or
bulletproof construction can replace the hash binding without touching the
lifecycle services. Every predicate here is a pure function of its inputs.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from abc import ABC, abstractmethod
from typing import Final

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

COMMITMENT_LABEL: Final[bytes] = b"bulletproof_payment"
RECEIVER_PROOF_LABEL: Final[bytes] = b"receiver_secret"
STEALTH_INFO: Final[bytes] = b"stealth-address"

COMMITMENT_LEN: Final[int] = 32
EPHEMERAL_KEY_LEN: Final[int] = 32
MIN_RANGE_PROOF_LEN: Final[int] = 64
MAX_RANGE_PROOF_LEN: Final[int] = 512
MIN_PAYMENT_PROOF_LEN: Final[int] = 32
MAX_PAYMENT_PROOF_LEN: Final[int] = 512
MIN_RECEIVER_PROOF_LEN: Final[int] = 32
MAX_RECEIVER_PROOF_LEN: Final[int] = 256


def b64_to_bytes(data_b64: str) -> bytes:
    """Decode a base64 string into raw bytes (strict validation)."""
    return base64.b64decode(data_b64, validate=True)


def bytes_to_b64(data: bytes) -> str:
    """Encode raw bytes into base64 string."""
    return base64.b64encode(data).decode("utf-8")


def u64_le(value: int) -> bytes:
    """Encode an amount as 8 little-endian bytes."""
    return value.to_bytes(8, "little")


class CommitmentScheme(ABC):
    """Binding between a hidden amount, its range proof and a public digest."""

    @abstractmethod
    def commit(self, amount: int, range_proof: bytes) -> bytes:
        pass

    @abstractmethod
    def verify_binding(
        self, commitment: bytes, amount: int, range_proof: bytes
    ) -> bool:
        """True iff (amount, range_proof) reproduces the commitment exactly."""
        pass


class Sha256CommitmentScheme(CommitmentScheme):
    """sha256(amount LE || range_proof || label).

    Binding, but small amounts can be recovered by brute force.
    """

    def __init__(self, label: bytes = COMMITMENT_LABEL):
        self.label = label

    def commit(self, amount: int, range_proof: bytes) -> bytes:
        hasher = hashlib.sha256()
        hasher.update(u64_le(amount))
        hasher.update(range_proof)
        hasher.update(self.label)
        return hasher.digest()

    def verify_binding(
        self, commitment: bytes, amount: int, range_proof: bytes
    ) -> bool:
        return hmac.compare_digest(self.commit(amount, range_proof), commitment)


def derive_ephemeral_pubkey(ephemeral_secret: bytes) -> bytes:
    """X25519 public key (raw 32 bytes) for a raw 32-byte secret."""
    if len(ephemeral_secret) != EPHEMERAL_KEY_LEN:
        raise ValueError("Ephemeral secret must be 32 bytes")
    private_key = X25519PrivateKey.from_private_bytes(ephemeral_secret)
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def generate_ephemeral_keypair() -> tuple[bytes, bytes]:
    """Return a fresh (secret, pubkey) pair, both raw 32 bytes."""
    private_key = X25519PrivateKey.generate()
    secret = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return secret, derive_ephemeral_pubkey(secret)


def is_valid_ephemeral_pubkey(ephemeral_pubkey: bytes) -> bool:
    if len(ephemeral_pubkey) != EPHEMERAL_KEY_LEN:
        return False
    try:
        X25519PublicKey.from_public_bytes(ephemeral_pubkey)
    except ValueError:
        return False
    return True


def derive_stealth_address(
    receiver: str, request_id: int, ephemeral_pubkey: bytes
) -> str:
    """One-time address bound to the receiver, the request and the ephemeral key."""
    hkdf = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=STEALTH_INFO)
    ikm = bytes.fromhex(receiver) + u64_le(request_id) + ephemeral_pubkey
    return hkdf.derive(ikm).hex()


def compute_receiver_proof(receiver: str) -> bytes:
    return hashlib.sha256(bytes.fromhex(receiver) + RECEIVER_PROOF_LABEL).digest()


def verify_receiver_ownership(
    *,
    receiver: str,
    request_id: int,
    receiver_proof: bytes,
    ephemeral_secret: bytes,
    ephemeral_pubkey: bytes,
    stealth_address: str,
) -> bool:
    """Check the receiver proof, the ephemeral key pair and the stealth address.

    Returns False on any mismatch, including a malformed ephemeral secret.
    """
    if not hmac.compare_digest(compute_receiver_proof(receiver), receiver_proof):
        return False
    try:
        derived_pubkey = derive_ephemeral_pubkey(ephemeral_secret)
    except ValueError:
        return False
    if not hmac.compare_digest(derived_pubkey, ephemeral_pubkey):
        return False
    expected = derive_stealth_address(receiver, request_id, ephemeral_pubkey)
    return hmac.compare_digest(expected, stealth_address)


def settlement_commitment(payer: str, amount: int, unix_timestamp: int) -> bytes:
    """Digest recording who settled, for how much and when."""
    hasher = hashlib.sha256()
    hasher.update(bytes.fromhex(payer))
    hasher.update(u64_le(amount))
    hasher.update(unix_timestamp.to_bytes(8, "little", signed=True))
    return hasher.digest()
