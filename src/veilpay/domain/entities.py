"""Escrow domain entities: Account, PayRequest, ZkPayRequest and EscrowVault."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_serializer

from .errors import NotSettledError

U64_MAX = 2**64 - 1
UNITS_PER_COIN = 1_000_000_000


class Account(BaseModel):
    """Ledger account identified by the hash of its public key."""

    address: str
    public_key_der_b64: Optional[str] = None
    balance: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return value.isoformat()


class EscrowVault(BaseModel):
    """Program-owned account that custodies settled value until sweep."""

    address: str
    balance: int = 0


class EscrowRecord(BaseModel):
    """Fields shared by every request record, whatever the amount model."""

    # Serialized size reserved for the record; drives the storage deposit.
    SPACE: ClassVar[int] = 0

    address: str
    escrow_address: str
    bump: int = Field(..., ge=0, le=255)
    escrow_bump: int = Field(..., ge=0, le=255)
    receiver: str
    request_id: int = Field(..., ge=0, le=U64_MAX)
    storage_deposit: int = Field(..., ge=0)
    is_settled: bool = False
    is_swept: bool = False
    settled_amount: Optional[int] = None
    payer: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    settled_at: Optional[datetime] = None

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return value.isoformat()

    @field_serializer("settled_at")
    def serialize_settled_at(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None

    def mark_settled(
        self, payer: str, amount: int, at: Optional[datetime] = None
    ) -> None:
        """Record the settlement. Flags are monotone: never called twice."""
        self.is_settled = True
        self.settled_amount = amount
        self.payer = payer
        self.settled_at = at or datetime.now(timezone.utc)

    def mark_swept(self) -> None:
        if not self.is_settled:
            raise NotSettledError("Payment request has not been settled yet")
        self.is_swept = True


class PayRequest(EscrowRecord):
    """Plain payment request: the requested amount is public."""

    # discriminator 8 + receiver 32 + request_id 8 + amount 8 + two flags
    SPACE: ClassVar[int] = 8 + 32 + 8 + 8 + 1 + 1

    amount: int = Field(..., gt=0)


class ZkPayRequest(EscrowRecord):
    """Private payment request: the amount hides behind a commitment."""

    SPACE: ClassVar[int] = (
        8  # discriminator
        + 32  # receiver
        + 8  # request_id
        + 32  # amount commitment
        + 4
        + 512  # range proof (length prefix + reserved bytes)
        + 32  # stealth address
        + 8  # min_amount
        + 8  # max_amount
        + 8  # settled_amount
        + 32  # settlement commitment
        + 4
        + 256  # ownership proof (length prefix + reserved bytes)
        + 1
        + 1
    )

    amount_commitment_b64: str
    range_proof_b64: str
    min_amount: int = Field(..., gt=0)
    max_amount: int = Field(..., gt=0)
    ephemeral_pubkey_b64: str
    stealth_address: str
    settlement_commitment_b64: Optional[str] = None
