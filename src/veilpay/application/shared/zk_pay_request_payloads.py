from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ...domain.entities import U64_MAX


class CreateZkPayRequestPayload(BaseModel):
    """Payload signed by the receiver to open a private payment request."""

    model_config = ConfigDict(extra="forbid")

    receiver_public_key_der_b64: str
    request_id: int = Field(..., ge=0, le=U64_MAX)
    amount_commitment_b64: str = Field(
        ..., description="Base64 commitment to the hidden amount (32 bytes)"
    )
    range_proof_b64: str
    min_amount: int
    max_amount: int
    ephemeral_pubkey_b64: str = Field(
        ..., description="Base64 raw X25519 public key (32 bytes)"
    )


class SettleZkPayRequestPayload(BaseModel):
    """Payload signed by the payer revealing the amount bound to the commitment."""

    model_config = ConfigDict(extra="forbid")

    payer_public_key_der_b64: str
    pay_request_address: str
    amount: int
    payment_proof_b64: str


class SweepZkPayRequestPayload(BaseModel):
    """Payload signed by the receiver proving ownership of the stealth claim."""

    model_config = ConfigDict(extra="forbid")

    receiver_public_key_der_b64: str
    pay_request_address: str
    receiver_proof_b64: str
    ephemeral_secret_b64: str
