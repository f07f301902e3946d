"""Participant key pair and signed-envelope builders."""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel

from veilpay.application.dtos import (
    CreatePayRequestDTO,
    RegisterAccountRequestDTO,
    SettlePayRequestDTO,
    SweepPayRequestDTO,
)
from veilpay.application.shared.pay_request_payloads import (
    CreatePayRequestPayload,
    SettlePayRequestPayload,
    SweepPayRequestPayload,
)
from veilpay.application.shared.zk_pay_request_payloads import (
    CreateZkPayRequestPayload,
    SettleZkPayRequestPayload,
    SweepZkPayRequestPayload,
)
from veilpay.client.stealth import StealthKit
from veilpay.crypto.certificates import (
    Envelope,
    address_from_public_key_der_b64,
    generate_envelope,
    load_private_key_from_pem,
    public_key_to_der_b64,
)
from veilpay.crypto.commitments import bytes_to_b64
from veilpay.crypto.derivation import (
    PLAIN_NAMESPACE,
    PRIVATE_NAMESPACE,
    RequestAddresses,
    derive_request_addresses,
)


@dataclass(frozen=True)
class Wallet:
    """An ECDSA P-256 identity able to sign escrow transitions."""

    private_key: ec.EllipticCurvePrivateKey

    @classmethod
    def generate(cls) -> "Wallet":
        return cls(ec.generate_private_key(ec.SECP256R1()))

    @classmethod
    def from_pem(cls, pem: str) -> "Wallet":
        return cls(load_private_key_from_pem(pem))

    @property
    def public_key_der_b64(self) -> str:
        return public_key_to_der_b64(self.private_key.public_key())

    @property
    def address(self) -> str:
        return address_from_public_key_der_b64(self.public_key_der_b64)

    def private_key_pem(self) -> str:
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("utf-8")

    def sign(self, payload: BaseModel) -> Envelope:
        return generate_envelope(self.private_key, payload.model_dump())

    def registration(self) -> RegisterAccountRequestDTO:
        return RegisterAccountRequestDTO(public_key_der_b64=self.public_key_der_b64)

    # Plain variant

    def create_pay_request(self, request_id: int, amount: int) -> CreatePayRequestDTO:
        envelope = self.sign(
            CreatePayRequestPayload(
                receiver_public_key_der_b64=self.public_key_der_b64,
                request_id=request_id,
                amount=amount,
            )
        )
        return CreatePayRequestDTO(
            receiver_public_key_der_b64=self.public_key_der_b64,
            payload_b64=envelope.payload_b64,
            signature_b64=envelope.signature_b64,
        )

    def settle_pay_request(self, address: str, amount: int) -> SettlePayRequestDTO:
        envelope = self.sign(
            SettlePayRequestPayload(
                payer_public_key_der_b64=self.public_key_der_b64,
                pay_request_address=address,
                amount=amount,
            )
        )
        return SettlePayRequestDTO(
            payer_public_key_der_b64=self.public_key_der_b64,
            payload_b64=envelope.payload_b64,
            signature_b64=envelope.signature_b64,
        )

    def sweep_pay_request(self, address: str) -> SweepPayRequestDTO:
        envelope = self.sign(
            SweepPayRequestPayload(
                receiver_public_key_der_b64=self.public_key_der_b64,
                pay_request_address=address,
            )
        )
        return SweepPayRequestDTO(
            receiver_public_key_der_b64=self.public_key_der_b64,
            payload_b64=envelope.payload_b64,
            signature_b64=envelope.signature_b64,
        )

    # Private variant

    def create_zk_pay_request(
        self, request_id: int, kit: StealthKit, min_amount: int, max_amount: int
    ) -> CreatePayRequestDTO:
        envelope = self.sign(
            CreateZkPayRequestPayload(
                receiver_public_key_der_b64=self.public_key_der_b64,
                request_id=request_id,
                amount_commitment_b64=bytes_to_b64(kit.commitment),
                range_proof_b64=bytes_to_b64(kit.range_proof),
                min_amount=min_amount,
                max_amount=max_amount,
                ephemeral_pubkey_b64=bytes_to_b64(kit.ephemeral_pubkey),
            )
        )
        return CreatePayRequestDTO(
            receiver_public_key_der_b64=self.public_key_der_b64,
            payload_b64=envelope.payload_b64,
            signature_b64=envelope.signature_b64,
        )

    def settle_zk_pay_request(
        self, address: str, amount: int, payment_proof: bytes
    ) -> SettlePayRequestDTO:
        envelope = self.sign(
            SettleZkPayRequestPayload(
                payer_public_key_der_b64=self.public_key_der_b64,
                pay_request_address=address,
                amount=amount,
                payment_proof_b64=bytes_to_b64(payment_proof),
            )
        )
        return SettlePayRequestDTO(
            payer_public_key_der_b64=self.public_key_der_b64,
            payload_b64=envelope.payload_b64,
            signature_b64=envelope.signature_b64,
        )

    def sweep_zk_pay_request(
        self,
        address: str,
        kit: StealthKit,
        *,
        receiver_proof: bytes | None = None,
    ) -> SweepPayRequestDTO:
        proof = (
            receiver_proof
            if receiver_proof is not None
            else kit.receiver_proof(self.address)
        )
        envelope = self.sign(
            SweepZkPayRequestPayload(
                receiver_public_key_der_b64=self.public_key_der_b64,
                pay_request_address=address,
                receiver_proof_b64=bytes_to_b64(proof),
                ephemeral_secret_b64=bytes_to_b64(kit.ephemeral_secret),
            )
        )
        return SweepPayRequestDTO(
            receiver_public_key_der_b64=self.public_key_der_b64,
            payload_b64=envelope.payload_b64,
            signature_b64=envelope.signature_b64,
        )


def derive_pay_request_addresses(
    receiver: str, request_id: int, program_id_hex: str, *, private: bool = False
) -> RequestAddresses:
    """Recompute record and vault addresses from public data, as a payer would."""
    namespace = PRIVATE_NAMESPACE if private else PLAIN_NAMESPACE
    return derive_request_addresses(
        namespace, receiver, request_id, bytes.fromhex(program_id_hex)
    )
