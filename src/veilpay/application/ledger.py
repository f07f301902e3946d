"""Ledger parameters shared by every escrow transition."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LedgerParams(BaseModel):
    """Program identity, fee and storage-deposit schedule."""

    program_id_hex: str = Field(..., pattern=r"^[0-9a-f]{64}$")
    transaction_fee: int = Field(5000, ge=0)
    deposit_per_byte: int = Field(6960, ge=0)
    account_overhead_bytes: int = Field(128, ge=0)

    @property
    def program_id(self) -> bytes:
        return bytes.fromhex(self.program_id_hex)

    def storage_deposit(self, space: int) -> int:
        """Deposit that keeps a record of ``space`` bytes alive until it is closed."""
        return (self.account_overhead_bytes + space) * self.deposit_per_byte
