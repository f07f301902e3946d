"""Unit tests for amount commitments and stealth-address ownership."""

import os

from veilpay.crypto.commitments import (
    Sha256CommitmentScheme,
    compute_receiver_proof,
    derive_ephemeral_pubkey,
    derive_stealth_address,
    generate_ephemeral_keypair,
    is_valid_ephemeral_pubkey,
    settlement_commitment,
    verify_receiver_ownership,
)

RECEIVER = "33" * 32
PAYER = "44" * 32


class TestSha256CommitmentScheme:
    def test_binding_holds_for_opening(self) -> None:
        scheme = Sha256CommitmentScheme()
        range_proof = os.urandom(64)
        commitment = scheme.commit(100_000_000, range_proof)

        assert len(commitment) == 32
        assert scheme.verify_binding(commitment, 100_000_000, range_proof)

    def test_other_amount_or_proof_breaks_binding(self) -> None:
        scheme = Sha256CommitmentScheme()
        range_proof = os.urandom(64)
        commitment = scheme.commit(100, range_proof)

        assert not scheme.verify_binding(commitment, 101, range_proof)
        assert not scheme.verify_binding(commitment, 100, os.urandom(64))

    def test_label_separates_schemes(self) -> None:
        range_proof = b"\x00" * 64
        default = Sha256CommitmentScheme().commit(5, range_proof)
        relabelled = Sha256CommitmentScheme(label=b"other").commit(5, range_proof)
        assert default != relabelled


class TestEphemeralKeys:
    def test_generated_pair_is_consistent(self) -> None:
        secret, pubkey = generate_ephemeral_keypair()
        assert len(secret) == 32
        assert derive_ephemeral_pubkey(secret) == pubkey
        assert is_valid_ephemeral_pubkey(pubkey)

    def test_wrong_length_pubkey_invalid(self) -> None:
        assert not is_valid_ephemeral_pubkey(b"\x09" * 31)


class TestStealthOwnership:
    def _claim(self, request_id: int = 54321) -> tuple[bytes, bytes, str]:
        secret, pubkey = generate_ephemeral_keypair()
        return secret, pubkey, derive_stealth_address(RECEIVER, request_id, pubkey)

    def test_stealth_address_depends_on_request(self) -> None:
        _, pubkey = generate_ephemeral_keypair()
        assert derive_stealth_address(RECEIVER, 1, pubkey) != derive_stealth_address(
            RECEIVER, 2, pubkey
        )

    def test_valid_claim_accepted(self) -> None:
        secret, pubkey, stealth = self._claim()
        assert verify_receiver_ownership(
            receiver=RECEIVER,
            request_id=54321,
            receiver_proof=compute_receiver_proof(RECEIVER),
            ephemeral_secret=secret,
            ephemeral_pubkey=pubkey,
            stealth_address=stealth,
        )

    def test_other_receivers_proof_rejected(self) -> None:
        secret, pubkey, stealth = self._claim()
        assert not verify_receiver_ownership(
            receiver=RECEIVER,
            request_id=54321,
            receiver_proof=compute_receiver_proof(PAYER),
            ephemeral_secret=secret,
            ephemeral_pubkey=pubkey,
            stealth_address=stealth,
        )

    def test_foreign_or_malformed_secret_rejected(self) -> None:
        _, pubkey, stealth = self._claim()
        other_secret, _ = generate_ephemeral_keypair()
        for secret in (other_secret, b"\x01" * 16):
            assert not verify_receiver_ownership(
                receiver=RECEIVER,
                request_id=54321,
                receiver_proof=compute_receiver_proof(RECEIVER),
                ephemeral_secret=secret,
                ephemeral_pubkey=pubkey,
                stealth_address=stealth,
            )

    def test_stealth_address_for_other_request_rejected(self) -> None:
        secret, pubkey, _ = self._claim()
        assert not verify_receiver_ownership(
            receiver=RECEIVER,
            request_id=54321,
            receiver_proof=compute_receiver_proof(RECEIVER),
            ephemeral_secret=secret,
            ephemeral_pubkey=pubkey,
            stealth_address=derive_stealth_address(RECEIVER, 1, pubkey),
        )


def test_settlement_commitment_binds_payer_amount_and_time() -> None:
    base = settlement_commitment(PAYER, 100, 1_700_000_000)
    assert len(base) == 32
    assert base == settlement_commitment(PAYER, 100, 1_700_000_000)
    assert base != settlement_commitment(RECEIVER, 100, 1_700_000_000)
    assert base != settlement_commitment(PAYER, 101, 1_700_000_000)
    assert base != settlement_commitment(PAYER, 100, 1_700_000_001)
