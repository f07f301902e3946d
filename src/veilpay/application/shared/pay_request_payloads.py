from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ...domain.entities import U64_MAX


class CreatePayRequestPayload(BaseModel):
    """Payload signed by the receiver to open a plain payment request."""

    model_config = ConfigDict(extra="forbid")

    receiver_public_key_der_b64: str
    request_id: int = Field(..., ge=0, le=U64_MAX)
    amount: int


class SettlePayRequestPayload(BaseModel):
    """Payload signed by the payer when settling a plain payment request."""

    model_config = ConfigDict(extra="forbid")

    payer_public_key_der_b64: str
    pay_request_address: str
    amount: int


class SweepPayRequestPayload(BaseModel):
    """Payload signed by the receiver to drain the escrow vault."""

    model_config = ConfigDict(extra="forbid")

    receiver_public_key_der_b64: str
    pay_request_address: str
