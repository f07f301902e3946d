"""Data Transfer Objects for the escrow application layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_serializer


# Account DTOs
class RegisterAccountRequestDTO(BaseModel):
    """Participant sends only its public key (DER b64) to open a ledger account."""

    public_key_der_b64: str


class AccountResponseDTO(BaseModel):
    address: str
    public_key_der_b64: Optional[str] = None
    balance: int


class ProgramInfoDTO(BaseModel):
    """Public parameters a client needs to derive addresses and budget fees."""

    program_id: str
    transaction_fee: int
    deposit_per_byte: int
    account_overhead_bytes: int
    pay_request_tags: list[str]
    zk_pay_request_tags: list[str]


# Signed transition DTOs
class CreatePayRequestDTO(BaseModel):
    """Receiver-signed envelope opening a payment request."""

    receiver_public_key_der_b64: str
    payload_b64: str
    signature_b64: str


class SettlePayRequestDTO(BaseModel):
    """Payer-signed envelope settling a payment request."""

    payer_public_key_der_b64: str
    payload_b64: str
    signature_b64: str


class SweepPayRequestDTO(BaseModel):
    """Receiver-signed envelope sweeping the escrow vault."""

    receiver_public_key_der_b64: str
    payload_b64: str
    signature_b64: str


# Responses
class PayRequestResponseDTO(BaseModel):
    """Plain request record plus the current vault balance."""

    address: str
    escrow_address: str
    bump: int
    escrow_bump: int
    receiver: str
    request_id: int
    amount: int
    storage_deposit: int
    is_settled: bool
    is_swept: bool
    settled_amount: Optional[int] = None
    payer: Optional[str] = None
    vault_balance: int
    created_at: datetime
    settled_at: Optional[datetime] = None

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return value.isoformat()

    @field_serializer("settled_at")
    def serialize_settled_at(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


class ZkPayRequestResponseDTO(BaseModel):
    """Private request record. The amount stays hidden until settlement."""

    address: str
    escrow_address: str
    bump: int
    escrow_bump: int
    receiver: str
    request_id: int
    amount_commitment_b64: str
    range_proof_b64: str
    min_amount: int
    max_amount: int
    ephemeral_pubkey_b64: str
    stealth_address: str
    storage_deposit: int
    is_settled: bool
    is_swept: bool
    settled_amount: Optional[int] = None
    payer: Optional[str] = None
    settlement_commitment_b64: Optional[str] = None
    vault_balance: int
    created_at: datetime
    settled_at: Optional[datetime] = None

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return value.isoformat()

    @field_serializer("settled_at")
    def serialize_settled_at(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


class SettlementResponseDTO(BaseModel):
    address: str
    escrow_address: str
    payer: str
    settled_amount: int
    vault_balance: int
    settlement_commitment_b64: Optional[str] = None


class SweepResponseDTO(BaseModel):
    """Outcome of a sweep: both accounts are gone, funds are with the receiver."""

    address: str
    escrow_address: str
    receiver: str
    swept_amount: int
    refunded_deposit: int
    receiver_balance: int
