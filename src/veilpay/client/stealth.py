"""Receiver-side material for private payment requests."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field

from veilpay.crypto.commitments import (
    MIN_RANGE_PROOF_LEN,
    CommitmentScheme,
    Sha256CommitmentScheme,
    compute_receiver_proof,
    generate_ephemeral_keypair,
    u64_le,
)


@dataclass(frozen=True)
class StealthKit:
    """Commitment opening and ephemeral key pair for one hidden amount.

    The receiver keeps the kit: ``amount`` and ``range_proof`` are handed to
    the payer out of band, ``ephemeral_secret`` is revealed only at sweep.
    """

    amount: int
    range_proof: bytes
    ephemeral_secret: bytes
    ephemeral_pubkey: bytes
    scheme: CommitmentScheme = field(default_factory=Sha256CommitmentScheme)

    @classmethod
    def create(
        cls,
        amount: int,
        *,
        range_proof: bytes | None = None,
        scheme: CommitmentScheme | None = None,
    ) -> "StealthKit":
        secret, pubkey = generate_ephemeral_keypair()
        return cls(
            amount=amount,
            range_proof=range_proof or os.urandom(MIN_RANGE_PROOF_LEN),
            ephemeral_secret=secret,
            ephemeral_pubkey=pubkey,
            scheme=scheme or Sha256CommitmentScheme(),
        )

    @property
    def commitment(self) -> bytes:
        return self.scheme.commit(self.amount, self.range_proof)

    def payment_proof(self, amount: int | None = None) -> bytes:
        """Payer-side proof blob. Only its length is checked by the verifier."""
        value = self.amount if amount is None else amount
        return hashlib.sha256(self.commitment + u64_le(value)).digest()

    @staticmethod
    def receiver_proof(receiver: str) -> bytes:
        return compute_receiver_proof(receiver)
